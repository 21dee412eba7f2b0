"""Runtime settings, read from ``SWITCHPANEL_*`` environment variables."""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from switchpanel.exceptions import SettingsError
from switchpanel.history import DEFAULT_CAPACITY
from switchpanel.scheduler import DEFAULT_INTERVAL

ENV_PREFIX = "SWITCHPANEL_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class PanelSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = "http://localhost:8080"
    username: str | None = None
    password: str | None = None
    verify_ssl: bool = True
    poll_interval: float = Field(default=DEFAULT_INTERVAL, gt=0)
    history_capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)
    always_poll: bool = False
    timeout: float = Field(default=10.0, gt=0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> PanelSettings:
        """Build settings from the environment; non-None *overrides* win.

        Raises:
            SettingsError: If a value fails validation.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None or raw == "":
                continue
            if name in ("verify_ssl", "always_poll"):
                values[name] = raw.strip().lower() in _TRUE_VALUES
            else:
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise SettingsError(f"Invalid settings: {fields or e}") from e
