"""
Models representing the engine's view of images and containers.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict

class ImageRecord(BaseModel):
    """
    One row of the engine's image table.
    """
    model_config = ConfigDict(frozen=True)

    repository: str
    tag: str
    id: str

    @property
    def repo_tag(self) -> str:
        return f"{self.repository}:{self.tag}"

class ContainerRecord(BaseModel):
    """
    Inspected state of a single container.

    ``image_id`` refers back to the image the container was created from;
    the container does not own the image.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    image_id: str
    running: bool = False
    started_at: Optional[datetime] = None

    def running_for(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        """
        Time elapsed since the container started, None when it is not running.
        """
        if not self.running or self.started_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return max(now - self.started_at, timedelta(0))

class ServiceInput(BaseModel):
    """
    An image joined with its declared environment and its matched container.
    """
    model_config = ConfigDict(frozen=True)

    image: ImageRecord
    environment: Dict[str, str] = {}
    container: Optional[ContainerRecord] = None
