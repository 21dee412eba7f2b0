"""Port section configuration model."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from switchpanel.models.port import Port


class LayoutMode(str, Enum):
    """How a section's ports are distributed over its rows."""

    ODD_TOP = "odd_top"
    SEQUENTIAL = "sequential"


DEFAULT_ROWS = 2


class PortSection(BaseModel):
    """A contiguous block of front-panel ports sharing one connector type."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    type: str = ""
    port_type: str = ""
    layout_mode: LayoutMode = LayoutMode.ODD_TOP
    rows: int = DEFAULT_ROWS
    port_ranges: str = ""
    is_combo: bool = False
    ports: tuple[Port, ...] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _accept_wire_layout_keys(cls, data: Any) -> Any:
        # The backend stores the layout as "layout" or "layout_type".
        if isinstance(data, dict) and not data.get("layout_mode"):
            layout = data.get("layout") or data.get("layout_type")
            data = {k: v for k, v in data.items() if k not in ("layout", "layout_type")}
            if layout:
                data["layout_mode"] = layout
        return data

    @field_validator("layout_mode", mode="before")
    @classmethod
    def _coerce_layout(cls, value: Any) -> Any:
        if isinstance(value, LayoutMode):
            return value
        if not value:
            return LayoutMode.ODD_TOP
        if str(value) == LayoutMode.ODD_TOP.value:
            return LayoutMode.ODD_TOP
        return LayoutMode.SEQUENTIAL

    @field_validator("rows", mode="before")
    @classmethod
    def _coerce_rows(cls, value: Any) -> Any:
        try:
            rows = int(value)
        except (TypeError, ValueError):
            return DEFAULT_ROWS
        return rows if rows >= 1 else DEFAULT_ROWS

    @field_validator("ports", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return () if value is None else value

    def to_payload(self, include_ports: bool = False) -> dict[str, Any]:
        """Serialize for the configuration endpoint."""
        data = self.model_dump(mode="json", exclude={"layout_mode", "ports"})
        data["layout"] = self.layout_mode.value
        data["layout_type"] = self.layout_mode.value
        data["ports"] = [p.model_dump(mode="json") for p in self.ports] if include_ports else []
        return data
