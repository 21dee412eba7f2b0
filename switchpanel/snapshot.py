"""Normalization of status payloads into one snapshot shape.

``GET /api/switches/status`` answers either ``{"system": ..., "sections": [...]}``
or, from older backends, a bare list of sections. Both are turned into a
:class:`StatusSnapshot` here and nowhere else.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from switchpanel.exceptions import SnapshotError
from switchpanel.models.device import SystemInfo
from switchpanel.models.section import PortSection


class StatusSnapshot(BaseModel):
    """One internally consistent telemetry read of a device."""

    model_config = ConfigDict(frozen=True)

    sections: tuple[PortSection, ...] = Field(default_factory=tuple)
    system: SystemInfo | None = None


def parse_status_payload(payload: Any) -> StatusSnapshot:
    """Normalize a decoded status response.

    Raises:
        SnapshotError: If the payload has neither known shape or fails
            validation.
    """
    if payload is None:
        return StatusSnapshot()

    if isinstance(payload, list):
        sections_data: Any = payload
        system_data: Any = None
    elif isinstance(payload, dict) and "sections" in payload:
        sections_data = payload.get("sections") or []
        system_data = payload.get("system")
    else:
        raise SnapshotError(f"Unexpected status payload of type {type(payload).__name__}")

    if not isinstance(sections_data, list):
        raise SnapshotError(f"Status payload sections must be a list, got {type(sections_data).__name__}")
    if system_data is not None and not isinstance(system_data, dict):
        raise SnapshotError(f"Status payload system must be an object, got {type(system_data).__name__}")

    try:
        return StatusSnapshot(
            sections=tuple(PortSection.model_validate(s) for s in sections_data),
            system=SystemInfo.model_validate(system_data) if system_data else None,
        )
    except ValidationError as e:
        raise SnapshotError(f"Invalid status payload: {e.error_count()} validation error(s)") from e
