"""Panel state and the reducer that applies poll-stream events to it.

Nothing here performs I/O. The scheduler produces events, :func:`reduce`
folds them into a new :class:`PanelState`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from switchpanel.models.device import SystemInfo
from switchpanel.models.section import PortSection
from switchpanel.snapshot import StatusSnapshot


class PanelState(BaseModel):
    model_config = ConfigDict(frozen=True)

    device_id: int | None = None
    generation: int = 0
    last_request_id: int = 0
    visible: bool = True
    always_poll: bool = False
    sections: tuple[PortSection, ...] = Field(default_factory=tuple)
    system: SystemInfo | None = None
    selected_port: str | None = None
    last_error: str | None = None
    consecutive_failures: int = 0
    last_updated: datetime | None = None


class DeviceSelected(BaseModel):
    model_config = ConfigDict(frozen=True)

    device_id: int | None


class SnapshotReceived(BaseModel):
    model_config = ConfigDict(frozen=True)

    device_id: int
    generation: int
    request_id: int
    snapshot: StatusSnapshot
    received_at: datetime


class PollFailed(BaseModel):
    model_config = ConfigDict(frozen=True)

    device_id: int
    generation: int
    request_id: int
    error: str


class VisibilityChanged(BaseModel):
    model_config = ConfigDict(frozen=True)

    visible: bool


class AlwaysPollChanged(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool


class PortSelected(BaseModel):
    model_config = ConfigDict(frozen=True)

    if_name: str | None


PanelEvent = Union[DeviceSelected, SnapshotReceived, PollFailed, VisibilityChanged, AlwaysPollChanged, PortSelected]


def is_current(state: PanelState, event: SnapshotReceived | PollFailed) -> bool:
    """True if *event* belongs to the active poll stream and is newer than anything applied."""
    return (
        event.generation == state.generation
        and event.device_id == state.device_id
        and event.request_id > state.last_request_id
    )


def should_fetch(state: PanelState) -> bool:
    return state.visible or state.always_poll


def reduce(state: PanelState, event: PanelEvent) -> PanelState:
    """Return the state after *event*; stale poll results leave it unchanged."""
    if isinstance(event, DeviceSelected):
        return state.model_copy(
            update={
                "device_id": event.device_id,
                "generation": state.generation + 1,
                "sections": (),
                "system": None,
                "selected_port": None,
                "last_error": None,
                "consecutive_failures": 0,
                "last_updated": None,
            }
        )

    if isinstance(event, SnapshotReceived):
        if not is_current(state, event):
            return state
        return state.model_copy(
            update={
                "last_request_id": event.request_id,
                "sections": event.snapshot.sections,
                "system": event.snapshot.system,
                "last_error": None,
                "consecutive_failures": 0,
                "last_updated": event.received_at,
            }
        )

    if isinstance(event, PollFailed):
        if not is_current(state, event):
            return state
        return state.model_copy(
            update={
                "last_request_id": event.request_id,
                "last_error": event.error,
                "consecutive_failures": state.consecutive_failures + 1,
            }
        )

    if isinstance(event, VisibilityChanged):
        return state.model_copy(update={"visible": event.visible})

    if isinstance(event, AlwaysPollChanged):
        return state.model_copy(update={"always_poll": event.enabled})

    if isinstance(event, PortSelected):
        return state.model_copy(update={"selected_port": event.if_name})

    raise TypeError(f"Unknown panel event {type(event).__name__}")
