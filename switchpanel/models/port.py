"""Live port telemetry models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LinkStatus(str, Enum):
    """Operational status as classified by the backend from ifOperStatus."""

    UP = "UP"
    DOWN = "DOWN"


class PortMode(str, Enum):
    """Switchport mode."""

    ACCESS = "access"
    TRUNK = "trunk"


class DomReading(BaseModel):
    """Optical transceiver diagnostics; every value is independently optional."""

    model_config = ConfigDict(frozen=True)

    temperature: float | None = None
    voltage: float | None = None
    tx_power: float | None = None
    rx_power: float | None = None
    bias_current: float | None = None

    @property
    def has_readings(self) -> bool:
        return any(v is not None for v in self.model_dump().values())

    def present_readings(self) -> dict[str, float]:
        """Return only the readings that were reported."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class Port(BaseModel):
    model_config = ConfigDict(frozen=True)

    if_name: str
    physical_index: int
    port_type: str = ""
    status: LinkStatus = LinkStatus.DOWN
    if_desc: str = ""
    speed: int = 0
    in_traffic: int = 0
    out_traffic: int = 0
    in_rate: int = 0
    out_rate: int = 0
    vlan_id: int = 0
    allowed_vlans: str = ""
    mode: PortMode = PortMode.ACCESS
    dom: DomReading | None = None
    is_breakout: bool = False
    breakout_ports: tuple[Port, ...] = Field(default_factory=tuple)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> Any:
        # Classification already happened upstream; anything but UP is DOWN.
        if isinstance(value, LinkStatus):
            return value
        return LinkStatus.UP if str(value).upper() == "UP" else LinkStatus.DOWN

    @field_validator("mode", mode="before")
    @classmethod
    def _coerce_mode(cls, value: Any) -> Any:
        if isinstance(value, PortMode):
            return value
        return PortMode.TRUNK if str(value or "").lower() == "trunk" else PortMode.ACCESS

    @field_validator("breakout_ports", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def is_up(self) -> bool:
        return self.status is LinkStatus.UP

    def interfaces(self) -> Iterator[Port]:
        """Yield the independently monitored interfaces of this slot.

        A breakout port has no status of its own, so only its sub-ports are
        yielded; any other port yields itself.
        """
        if self.is_breakout:
            yield from self.breakout_ports
        else:
            yield self
