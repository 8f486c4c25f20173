"""
Models for services: an image, its declared environment, its metadata and its container.
"""
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict

from .records import ContainerRecord, ServiceInput
from ..METADATA.store import MetadataStore

VERSION_VARIABLE = "minipaas_version"
SUPPORTED_VERSION = "1"

class ServiceStatus(str, Enum):
    """
    Display status of a service, computed on demand.
    """
    ERROR = "error"
    RUNNING = "running"
    STOPPED = "stopped"

def parse_version(environment: Dict[str, str]) -> Optional[int]:
    """
    Reads the declared minipaas version from an image environment.
    """
    value = environment.get(VERSION_VARIABLE)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None

class Service(BaseModel):
    """
    The unit of inventory output, one per image.

    ``container`` is looked up by image id for every inventory pass and is
    never owned by the service. ``metadata`` stays None for images that do not
    declare a supported version, and for managed images whose extraction
    failed, in which case ``diagnostic`` explains why.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    image_id: str
    repo_tag: str
    container_path: str
    environment: Dict[str, str] = {}
    minipaas_version: Optional[int] = None
    metadata: Optional[MetadataStore] = None
    diagnostic: Optional[str] = None
    container: Optional[ContainerRecord] = None

    @classmethod
    def from_input(cls, service_input: ServiceInput, container_path: str) -> "Service":
        return cls(
            image_id=service_input.image.id,
            repo_tag=service_input.image.repo_tag,
            container_path=container_path,
            environment=dict(service_input.environment),
            minipaas_version=parse_version(service_input.environment),
            container=service_input.container,
        )

    @property
    def is_managed(self) -> bool:
        """True when the image declares exactly the supported version."""
        return self.environment.get(VERSION_VARIABLE) == SUPPORTED_VERSION

    @property
    def short_id(self) -> str:
        image_id = self.image_id.split(":", 1)[-1]
        return image_id[:12]

    @property
    def title(self) -> Optional[str]:
        if self.metadata is None:
            return None
        title = self.metadata.get("dc:title")
        return str(title) if title is not None else None

    @property
    def is_running(self) -> bool:
        return self.container is not None and self.container.running

    @property
    def status(self) -> ServiceStatus:
        if self.is_managed and self.metadata is None:
            return ServiceStatus.ERROR
        if self.is_running:
            return ServiceStatus.RUNNING
        return ServiceStatus.STOPPED

    def running_for(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        if self.container is None:
            return None
        return self.container.running_for(now)
