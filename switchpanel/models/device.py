"""Device, system and session models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from switchpanel.models.section import PortSection


class SwitchConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    sections: tuple[PortSection, ...] = Field(default_factory=tuple)

    @field_validator("sections", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return () if value is None else value


class Device(BaseModel):
    """A managed switch as stored by the backend."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    ip_address: str = ""
    community: str = "public"
    detected_ports: int = 0
    allow_port_zero: bool = False
    enabled: bool = True
    config: SwitchConfig = Field(default_factory=SwitchConfig)

    @field_validator("config", mode="before")
    @classmethod
    def _none_to_default(cls, value: Any) -> Any:
        return SwitchConfig() if value is None else value

    @property
    def sections(self) -> tuple[PortSection, ...]:
        return self.config.sections

    def with_sections(self, sections: tuple[PortSection, ...]) -> Device:
        return self.model_copy(update={"config": SwitchConfig(sections=tuple(sections))})

    def to_update_payload(self) -> dict[str, Any]:
        """Body for ``PUT /api/switches``."""
        return {
            "id": self.id,
            "name": self.name,
            "ip_address": self.ip_address,
            "community": self.community,
            "detected_ports": self.detected_ports,
            "allow_port_zero": self.allow_port_zero,
            "enabled": self.enabled,
            "config": {"sections": [s.to_payload() for s in self.sections]},
        }


class DeviceDraft(BaseModel):
    """Body for ``POST /api/switches``."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    ip_address: str
    community: str = "public"
    allow_port_zero: bool = False


class SystemInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    descr: str = ""
    uptime: str = ""
    contact: str = ""
    location: str = ""


class Session(BaseModel):
    """The fields of the logged-in session the panel cares about."""

    model_config = ConfigDict(frozen=True)

    username: str = ""
    role: str = ""
    password_change_required: bool = False

    @property
    def may_poll(self) -> bool:
        return not self.password_change_required

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
