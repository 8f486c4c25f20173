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
Client for the container engine.
Drives the engine through its command line and parses what it prints.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Set

from ..exceptions import CommandError, PullError
from ..MODELS.options import LOGIN_SHELL, StartOptions
from ..MODELS.records import ContainerRecord, ImageRecord, ServiceInput
from ..PARSERS.engine_output_parser import (
    container_from_inspect,
    image_environment,
    parse_container_ids,
    parse_image_table,
    parse_inspect,
)
from ..PARSERS.env_parser import EnvParser
from ..REGISTRY.image_reference import normalize_repo_tags
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class EngineClient:
    """
    Lifecycle and listing operations against the engine.

    Every operation is a coroutine. A failing engine command raises
    CommandError carrying the command line and exit status.
    """

    def __init__(self, runner: Optional[CommandRunner] = None):
        """
        Initialize the engine client.

        Args:
            runner: Runner used for every engine invocation. Defaults to
                running ``docker`` from PATH.
        """
        self.runner = runner or CommandRunner()
        self._removals: Set[asyncio.Task] = set()

    # Lifecycle

    async def start(self, image_id: str, options: Optional[StartOptions] = None) -> str:
        """
        Start a container from an image.

        Args:
            image_id: Image to run
            options: Run flags; defaults to a detached, interactive container
                running the image's own command

        Returns:
            Id of the new container
        """
        options = options or StartOptions()
        args = ["run"]
        if options.interactive:
            args.append("--interactive=true")
        if options.detached:
            args.append("--detach=true")
        if options.entrypoint:
            args.append(f"--entrypoint={options.entrypoint}")
        args.append(image_id)
        args.extend(options.cmd)

        output = await self.runner.run(args)
        return output.strip()

    async def start_detached_for_extraction(self, image_id: str) -> str:
        """
        Start a login shell container whose filesystem can be copied from.
        Pair with ``stop``, which waits for the container to be removed.
        """
        return await self.start(image_id, LOGIN_SHELL)

    async def start_interactive_shell(self, image_id: str) -> str:
        """
        Start a login shell container for a user session.
        Same container as ``start_detached_for_extraction``; only the paired
        teardown differs.
        Pair with ``stop_interactive_shell``, which does not wait for removal.
        """
        return await self.start(image_id, LOGIN_SHELL)

    async def stop(self, container_id: str) -> None:
        """
        Stop a container and wait for it to be removed.
        Failure to remove is logged, not raised.
        """
        await self.runner.run(["stop", container_id])
        await self._remove(container_id)

    async def stop_interactive_shell(self, container_id: str) -> None:
        """
        Stop a container and schedule its removal without waiting for it.
        ``drain`` waits for the scheduled removals.
        """
        await self.runner.run(["stop", container_id])
        task = asyncio.create_task(self._remove(container_id))
        self._removals.add(task)
        task.add_done_callback(self._removals.discard)

    async def drain(self) -> None:
        """Wait for every scheduled container removal to finish."""
        if self._removals:
            await asyncio.gather(*list(self._removals))

    async def _remove(self, container_id: str) -> None:
        try:
            await self.runner.run(["rm", "--force", container_id])
        except CommandError as e:
            logger.warning("could not remove container %s: %s", container_id[:12], e)

    async def attach_shell(self, container_id: str) -> int:
        """
        Open a login shell in a running container on the caller's terminal.

        Returns:
            Exit status of the shell
        """
        args = ["exec", "--interactive", "--tty", container_id] + \
            [LOGIN_SHELL.entrypoint] + LOGIN_SHELL.cmd
        return await self.runner.run_interactive(args)

    async def cp(self, container_id: str, src_path: str, dst_path: str) -> None:
        """
        Copy a path out of a container's filesystem.

        Args:
            container_id: Source container
            src_path: Path inside the container
            dst_path: Destination on the local disk
        """
        await self.runner.run(["cp", f"{container_id}:{src_path}", str(dst_path)])

    # Listings

    async def images(self) -> Dict[str, ImageRecord]:
        """
        List local images, keyed by ``repository:tag``.
        """
        output = await self.runner.run(["images", "--no-trunc"])
        return parse_image_table(output)

    async def inspect_one(self, object_id: str) -> Dict:
        """Inspect one image or container."""
        output = await self.runner.run(["inspect", object_id])
        try:
            return parse_inspect(output)
        except ValueError as e:
            raise CommandError(self.runner.command, ["inspect", object_id],
                               stderr=f"unexpected output: {e}") from e

    async def ps(self) -> Dict[str, ContainerRecord]:
        """
        List running containers, keyed by the id of their image.

        When several containers run from one image, the last one listed wins.
        """
        output = await self.runner.run(["ps", "--quiet", "--no-trunc"])
        container_ids = parse_container_ids(output)
        inspected = await asyncio.gather(*(self.inspect_one(cid) for cid in container_ids))

        containers: Dict[str, ContainerRecord] = {}
        for data in inspected:
            record = container_from_inspect(data)
            containers[record.image_id] = record
        return containers

    async def _inspect_images(self, repo_tags: List[str]) -> List[ServiceInput]:
        table = await self.images()
        if repo_tags:
            picked = [table[repo_tag] for repo_tag in repo_tags if repo_tag in table]
        else:
            picked = list(table.values())

        inspected = await asyncio.gather(*(self.inspect_one(image.id) for image in picked))
        return [
            ServiceInput(image=image,
                         environment=EnvParser.parse_from_list(image_environment(data)))
            for image, data in zip(picked, inspected)
        ]

    async def inspect(self, repo_tags: Optional[Iterable[str]] = None) -> List[ServiceInput]:
        """
        Join the image table with the running containers.

        Args:
            repo_tags: Filters; a filter without a colon gets ':latest'.
                Empty or None selects every image.

        Returns:
            One entry per selected image, with its matched container or None
        """
        filters = normalize_repo_tags(repo_tags)
        containers, images = await asyncio.gather(self.ps(), self._inspect_images(filters))
        return [
            item.model_copy(update={"container": containers.get(item.image.id)})
            for item in images
        ]

    async def pull_one(self, repo_tag: str) -> None:
        logger.info("pulling %s", repo_tag)
        await self.runner.run(["pull", repo_tag])

    async def pull(self, repo_tags: Optional[Iterable[str]] = None) -> None:
        """
        Pull images concurrently.

        A failing pull does not cancel the others.

        Raises:
            PullError: If any pull failed, listing every failure
        """
        filters = normalize_repo_tags(repo_tags)
        if not filters:
            return
        results = await asyncio.gather(*(self.pull_one(t) for t in filters),
                                       return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            raise PullError(errors)
