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
Local cache of metadata extracted from images.
One directory per image id; entries are never invalidated.
"""

from typing import List, Optional, Union
from pathlib import Path

METADATA_DIR = "minipaas"
CANDIDATES = ("service.json", "service.jsonld", "service.ttl")


class MetadataCache:
    """
    Maps image ids to the directories their metadata is copied into.
    """

    def __init__(self, cache_dir: Union[str, Path]):
        """
        Initialize the metadata cache.

        Args:
            cache_dir: Root directory, holding one subdirectory per image id.
        """
        self.cache_dir = Path(cache_dir)

    def path_for(self, image_id: str) -> Path:
        """Directory for an image, without creating it."""
        # Image ids may carry an algorithm prefix ("sha256:...").
        return self.cache_dir / image_id.replace(":", "_")

    def container_path(self, image_id: str) -> Path:
        """
        Get the directory for an image, creating it if needed.

        Args:
            image_id: Full image id

        Returns:
            Path to the image's cache directory
        """
        path = self.path_for(image_id)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def candidates(self, image_id: str) -> List[Path]:
        """Metadata files whose presence marks a completed extraction."""
        metadata_dir = self.path_for(image_id) / METADATA_DIR
        return [metadata_dir / name for name in CANDIDATES]

    def quick_verify(self, image_id: str) -> Optional[Path]:
        """
        Find the cached metadata file for an image.

        Args:
            image_id: Full image id

        Returns:
            Path of the first candidate that exists, None if there is none
        """
        for candidate in self.candidates(image_id):
            if candidate.is_file():
                return candidate
        return None
