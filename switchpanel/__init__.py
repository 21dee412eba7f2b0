"""Front-panel visualizer core for managed network switches.

Polls a switch status endpoint, lays the reported ports out the way they sit
on the physical front panel and keeps a rolling traffic history per interface.
"""

__version__ = "0.0.1"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
    level: str | None = None,
) -> None:
    """Install the stderr sink and enable the ``switchpanel`` logger.

    *level* wins over ``LOGURU_LEVEL``, which defaults to DEBUG.
    """
    if level is not None:
        os.environ["LOGURU_LEVEL"] = level
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "DEBUG")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>::<cyan>{extra[classname]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"classname": "None", "skiplog": False})
    glogger.enable(__name__)


from switchpanel.exceptions import (  # noqa: E402
    APIError,
    AuthenticationError,
    DeviceMutationError,
    PanelError,
    RequestCancelled,
    SectionError,
    SettingsError,
    SnapshotError,
)
from switchpanel.history import TrafficHistoryStore  # noqa: E402
from switchpanel.layout import build_layout  # noqa: E402
from switchpanel.ranges import next_port_range, parse_port_ranges  # noqa: E402
from switchpanel.scheduler import PollScheduler  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "build_layout",
    "next_port_range",
    "parse_port_ranges",
    "PollScheduler",
    "TrafficHistoryStore",
    "PanelError",
    "AuthenticationError",
    "APIError",
    "DeviceMutationError",
    "RequestCancelled",
    "SnapshotError",
    "SectionError",
    "SettingsError",
]
