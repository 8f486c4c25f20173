"""
Extraction of the metadata embedded in service images.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..ENGINE.docker_client import EngineClient
from ..exceptions import CommandError, MetadataError, MinipaasError
from ..METADATA.store import MetadataStore
from ..MODELS.minipaas_config import MinipaasConfig
from ..MODELS.options import RetryOptions
from ..MODELS.service import SUPPORTED_VERSION, VERSION_VARIABLE, Service
from ..PARSERS.metadata_parser import MetadataParser
from ..REGISTRY.metadata_cache import MetadataCache
from ..UTILS.retry import retry

logger = logging.getLogger(__name__)

class ExtractionState(str, Enum):
    """
    States of a single extraction.

    A cached extraction goes UNVERIFIED -> CACHED -> PARSING; a fresh one goes
    UNVERIFIED -> STARTING -> COPYING -> PARSING. Both end in VERIFIED or FAILED.
    """
    UNVERIFIED = "unverified"
    CACHED = "cached"
    STARTING = "starting"
    COPYING = "copying"
    PARSING = "parsing"
    VERIFIED = "verified"
    FAILED = "failed"

@dataclass
class Extraction:
    """
    Progress and outcome of extracting one image's metadata.
    """
    image_id: str
    label: str
    container_path: Path
    states: List[ExtractionState] = field(default_factory=lambda: [ExtractionState.UNVERIFIED])
    metadata: Optional[MetadataStore] = None
    diagnostic: Optional[str] = None

    @property
    def state(self) -> ExtractionState:
        return self.states[-1]

    @property
    def succeeded(self) -> bool:
        return self.state == ExtractionState.VERIFIED

    def advance(self, state: ExtractionState) -> None:
        logger.debug("%s: %s -> %s", self.label, self.state.value, state.value)
        self.states.append(state)

    def fail(self, diagnostic: str) -> None:
        self.metadata = None
        self.diagnostic = diagnostic
        self.advance(ExtractionState.FAILED)

class MetadataExtractor:
    """
    Produces a MetadataStore for an image, copying the metadata out of an
    ephemeral container unless it is already cached.

    Failures never propagate: they end the extraction in the FAILED state
    with a diagnostic message.
    """
    def __init__(self,
                 engine: EngineClient,
                 cache: MetadataCache,
                 parser: Optional[MetadataParser] = None,
                 source: str = "/etc/minipaas",
                 copy_options: Optional[RetryOptions] = None,
                 timeout: float = 30.0):
        """
        :param engine: Client used to start, copy from and stop containers.
        :param cache: Cache holding one directory per image.
        :param parser: Metadata document parser.
        :param source: Metadata directory inside the image.
        :param copy_options: Retry policy for the copy step.
        :param timeout: Seconds allowed for copying and tearing down.
        """
        self.engine = engine
        self.cache = cache
        self.parser = parser or MetadataParser()
        self.source = source
        self.copy_options = copy_options or RetryOptions(attempts=8, delay=2.0)
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: MinipaasConfig, engine: EngineClient) -> "MetadataExtractor":
        return cls(
            engine,
            MetadataCache(config.cache_root),
            source=config.metadata_source,
            copy_options=RetryOptions(attempts=config.copy_attempts, delay=config.copy_delay),
            timeout=config.extraction_timeout,
        )

    async def extract_service(self, service: Service) -> Extraction:
        """
        Extracts metadata for a service and records the outcome on it.

        Services that do not declare the supported version are never
        extracted.
        """
        if not service.is_managed:
            extraction = Extraction(service.image_id, service.repo_tag, Path(service.container_path))
            extraction.fail(f"{VERSION_VARIABLE} is not {SUPPORTED_VERSION!r}")
        else:
            extraction = await self.extract(service.image_id, label=service.repo_tag)
        service.metadata = extraction.metadata
        service.diagnostic = extraction.diagnostic
        return extraction

    async def extract(self, image_id: str, label: Optional[str] = None) -> Extraction:
        """
        Runs the extraction for one image.

        :param image_id: Image to extract metadata from.
        :param label: Name used in log messages, usually the repo tag.
        """
        extraction = Extraction(image_id, label or image_id[:12], self.cache.path_for(image_id))
        try:
            try:
                self.cache.container_path(image_id)
            except OSError as e:
                raise MetadataError(
                    f"cannot create cache directory {extraction.container_path}: {e}"
                ) from e
            path = self.cache.quick_verify(image_id)
            if path is not None:
                extraction.advance(ExtractionState.CACHED)
            else:
                path = await self._fetch(extraction)

            extraction.advance(ExtractionState.PARSING)
            extraction.metadata = self.parser.parse(image_id, path)
            extraction.advance(ExtractionState.VERIFIED)
            logger.info("metadata for %s read from %s", extraction.label, path)
        except MinipaasError as e:
            logger.warning("unable to extract metadata for %s (%s)", extraction.label, e)
            extraction.fail(str(e))
        return extraction

    async def _fetch(self, extraction: Extraction) -> Path:
        logger.info("extracting metadata for %s", extraction.label)
        extraction.advance(ExtractionState.STARTING)
        container_id = await self.engine.start_detached_for_extraction(extraction.image_id)

        extraction.advance(ExtractionState.COPYING)
        try:
            await asyncio.wait_for(
                self._copy_and_stop(container_id, extraction.container_path),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise MetadataError(
                f"timed out after {self.timeout:g}s copying {self.source}"
            ) from e

        path = self.cache.quick_verify(extraction.image_id)
        if path is None:
            raise MetadataError(f"no metadata found in {self.source}")
        return path

    async def _copy_and_stop(self, container_id: str, destination: Path) -> None:
        # The container only exists to be copied from; stop it whatever the outcome.
        try:
            await retry(self.engine.cp, container_id, self.source, str(destination),
                        options=self.copy_options)
        finally:
            await self._teardown(container_id)

    async def _teardown(self, container_id: str) -> None:
        try:
            await self.engine.stop(container_id)
        except CommandError as e:
            logger.warning("could not stop container %s: %s", container_id[:12], e)
