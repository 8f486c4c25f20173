# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Repository:tag references used to select images.
"""

from typing import Iterable, List, Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """
    A repository:tag filter.

    Examples:
        - minipaas/hello -> minipaas/hello:latest
        - minipaas/hello:v1 -> minipaas/hello:v1
        - localhost:5000/hello -> localhost:5000/hello (a colon is taken as a tag
          separator, so no tag is appended)
    """

    repository: str
    tag: str

    DEFAULT_TAG = "latest"

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse a reference, appending the default tag when there is no colon.

        Args:
            reference: Reference string (e.g., 'minipaas/hello', 'minipaas/hello:v1')

        Returns:
            Parsed ImageReference object.
        """
        reference = reference.strip()
        if not reference:
            raise ValueError("Empty image reference")

        if ":" not in reference:
            return cls(repository=reference, tag=cls.DEFAULT_TAG)

        repository, tag = reference.rsplit(":", 1)
        return cls(repository=repository, tag=tag)

    @property
    def repo_tag(self) -> str:
        return f"{self.repository}:{self.tag}"

    def __str__(self) -> str:
        return self.repo_tag


def normalize_repo_tags(references: Optional[Iterable[str]]) -> List[str]:
    """
    Normalize a list of filters to unique repo tags, preserving order.
    """
    result: List[str] = []
    for reference in references or []:
        repo_tag = ImageReference.parse(reference).repo_tag
        if repo_tag not in result:
            result.append(repo_tag)
    return result
