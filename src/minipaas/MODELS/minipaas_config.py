"""
Models for the runtime configuration.
"""
import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator

APP_NAME = "minipaas"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

class MinipaasConfig(BaseModel):
    """
    Settings shared by the engine client, the extractor and the CLI.
    """
    docker_command: str = "docker"
    cache_dir: Optional[str] = None
    metadata_source: str = "/etc/minipaas"

    # Extraction
    copy_attempts: int = 8
    copy_delay: float = Field(default=2.0, ge=0.0)
    extraction_timeout: float = Field(default=30.0, gt=0.0)

    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if value.upper() not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return value.upper()

    @property
    def cache_root(self) -> Path:
        """
        Directory holding one subdirectory per image id.
        Defaults to $XDG_CACHE_HOME/minipaas.
        """
        if self.cache_dir:
            return Path(self.cache_dir).expanduser()
        base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
        return Path(base) / APP_NAME
