"""Traffic history sample model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TrafficSample(BaseModel):
    """One poll cycle's rates for one interface, in bytes per second."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    time: str
    in_rate: int = Field(default=0, alias="in")
    out_rate: int = Field(default=0, alias="out")
