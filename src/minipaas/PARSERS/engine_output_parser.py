"""
Parsers for the textual and JSON output of engine commands.
"""
import json
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..MODELS.records import ContainerRecord, ImageRecord

_FRACTION = re.compile(r"\.(\d+)")

def parse_image_table(output: str) -> Dict[str, ImageRecord]:
    """
    Parses the output of ``images --no-trunc``.

    The header row and blank lines are skipped. The result is keyed by
    ``repository:tag``.

    :param output: Tabular listing with REPOSITORY, TAG and IMAGE ID columns.
    :return: Image records keyed by repo tag.
    """
    images: Dict[str, ImageRecord] = {}
    for line in output.splitlines():
        parts = line.split()
        if not parts or parts[0] == "REPOSITORY":
            continue
        if len(parts) < 3:
            continue
        record = ImageRecord(repository=parts[0], tag=parts[1], id=parts[2])
        images[record.repo_tag] = record
    return images

def parse_container_ids(output: str) -> List[str]:
    """
    Parses the newline separated ids printed by ``ps --quiet --no-trunc``.
    """
    return [line.strip() for line in output.splitlines() if line.strip()]

def parse_inspect(output: str) -> Dict[str, Any]:
    """
    Returns the single object from an ``inspect`` JSON array.

    :raises ValueError: If the output is not a non-empty JSON array.
    """
    data = json.loads(output)
    if not isinstance(data, list) or not data:
        raise ValueError("inspect returned no objects")
    return data[0]

def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parses an engine timestamp such as '2014-06-20T10:11:12.123456789Z'.

    Fractions are truncated to microseconds. The engine reports
    '0001-01-01T00:00:00Z' for containers that never started, which maps to None.
    """
    if not value or value.startswith("0001-01-01"):
        return None
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None

def container_from_inspect(data: Dict[str, Any]) -> ContainerRecord:
    """
    Builds a container record from a container ``inspect`` object.
    """
    state = data.get("State") or {}
    return ContainerRecord(
        id=data["Id"],
        image_id=data["Image"],
        running=bool(state.get("Running", False)),
        started_at=parse_timestamp(state.get("StartedAt")),
    )

def image_environment(data: Dict[str, Any]) -> List[str]:
    """
    Extracts the ``Config.Env`` entries from an image ``inspect`` object.
    """
    config = data.get("Config") or {}
    return list(config.get("Env") or [])
