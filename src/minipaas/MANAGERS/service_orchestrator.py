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
Correlation of images, their metadata and their containers into services.
"""
import asyncio
import logging
from typing import Iterable, List, Optional

from ..ENGINE.docker_client import EngineClient
from ..exceptions import MinipaasError, StopError
from ..MODELS.minipaas_config import MinipaasConfig
from ..MODELS.service import Service
from ..REGISTRY.image_reference import normalize_repo_tags
from ..RUNNERS.command_runner import CommandRunner
from .metadata_extractor import MetadataExtractor

logger = logging.getLogger(__name__)

class ServiceOrchestrator:
    """
    Builds the service inventory and starts, stops and pulls services.

    Every operation that changes engine state re-lists the inventory
    afterwards.
    """
    def __init__(self, engine: EngineClient, extractor: MetadataExtractor):
        """
        Initializes the orchestrator.

        :param engine: Client for the container engine.
        :param extractor: Extractor for the metadata of managed services.
        """
        self.engine = engine
        self.extractor = extractor

    @classmethod
    def from_config(cls, config: MinipaasConfig) -> "ServiceOrchestrator":
        engine = EngineClient(CommandRunner(config.docker_command))
        return cls(engine, MetadataExtractor.from_config(config, engine))

    async def services(self, repo_tags: Optional[Iterable[str]] = None) -> List[Service]:
        """
        Returns the current inventory.

        Only services that declare the supported minipaas version have their
        metadata extracted; extractions run concurrently.

        :param repo_tags: repository[:tag] filters, all images when empty.
        """
        inputs = await self.engine.inspect(repo_tags)
        cache = self.extractor.cache
        services = [
            Service.from_input(item, str(cache.path_for(item.image.id)))
            for item in inputs
        ]
        managed = [service for service in services if service.is_managed]
        await asyncio.gather(*(self.extractor.extract_service(s) for s in managed))
        return services

    async def pull(self, repo_tags: Iterable[str]) -> List[Service]:
        """
        Pulls images, then returns their services.
        """
        repo_tags = list(repo_tags)
        await self.engine.pull(repo_tags)
        return await self.services(repo_tags)

    async def start(self, repo_tags: Iterable[str]) -> List[Service]:
        """
        Starts a detached container for every repository:tag, running the
        image's own command.
        """
        repo_tags = normalize_repo_tags(repo_tags)
        for repo_tag in repo_tags:
            container_id = await self.engine.start(repo_tag)
            logger.info("started %s as %s", repo_tag, container_id[:12])
        return await self.services(repo_tags)

    async def stop(self, repo_tags: Optional[Iterable[str]] = None) -> List[Service]:
        """
        Stops the running container of every selected service.

        Services without a matched container are skipped. All stops are
        attempted even if some fail.

        :raises StopError: If any container could not be stopped.
        """
        repo_tags = list(repo_tags or [])
        container_ids = [
            service.container.id
            for service in await self.services(repo_tags)
            if service.container is not None
        ]
        results = await asyncio.gather(*(self.engine.stop(cid) for cid in container_ids),
                                       return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            raise StopError(errors)
        return await self.services(repo_tags)

    async def shell(self, repo_tag: str) -> int:
        """
        Runs an interactive login shell in an ephemeral container.

        :return: Exit status of the shell.
        """
        services = await self.services([repo_tag])
        if not services:
            raise MinipaasError(f"no such image: {repo_tag}")
        container_id = await self.engine.start_interactive_shell(services[0].image_id)
        try:
            return await self.engine.attach_shell(container_id)
        finally:
            await self.engine.stop_interactive_shell(container_id)
