"""
Option models for engine operations and the retry policy.
"""
from typing import List, Optional
from pydantic import BaseModel

DEFAULT_ATTEMPTS = 8

class RetryOptions(BaseModel):
    """
    How often and how patiently to re-invoke a failing operation.

    ``delay`` is in seconds and constant between attempts. A non-positive
    ``attempts`` falls back to the default.
    """
    attempts: int = DEFAULT_ATTEMPTS
    delay: float = 0.0

    @property
    def effective_attempts(self) -> int:
        return self.attempts if self.attempts >= 1 else DEFAULT_ATTEMPTS

class StartOptions(BaseModel):
    """
    Flags for starting a container with ``run``.
    """
    entrypoint: Optional[str] = None
    cmd: List[str] = []
    detached: bool = True
    interactive: bool = True

# Inspectable login shell, used both for extraction and for interactive use.
LOGIN_SHELL = StartOptions(entrypoint="/bin/bash", cmd=["--login"])
