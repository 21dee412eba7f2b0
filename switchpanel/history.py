"""Rolling per-interface traffic history."""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Sequence

from loguru import logger

from switchpanel.layout import flatten_interfaces
from switchpanel.models.section import PortSection
from switchpanel.models.traffic import TrafficSample

DEFAULT_CAPACITY = 60  # 3 minutes at the default 3 s poll interval
TIME_FORMAT = "%H:%M:%S"


class TrafficHistoryStore:
    """Bounded time series of in/out rates keyed by interface name.

    Keys are independent of the section layout, so history survives section
    reconfiguration. Interfaces that stop appearing in snapshots keep their
    samples until :meth:`clear` is called.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._series: dict[str, deque[TrafficSample]] = {}

    def record(self, sections: Sequence[PortSection], timestamp: datetime | None = None) -> int:
        """Append one sample per interface found in *sections*.

        Breakout ports contribute one sample per sub-port and none for the
        parent.

        Returns:
            The number of samples appended.
        """
        label = (timestamp or datetime.now()).strftime(TIME_FORMAT)
        count = 0
        for port in flatten_interfaces(sections):
            series = self._series.get(port.if_name)
            if series is None:
                series = self._series[port.if_name] = deque(maxlen=self.capacity)
            series.append(TrafficSample(time=label, in_rate=port.in_rate, out_rate=port.out_rate))
            count += 1
        logger.trace(f"Recorded {count} traffic samples at {label}")
        return count

    def get(self, if_name: str) -> list[TrafficSample]:
        """Samples for *if_name*, oldest first; empty if unknown."""
        return list(self._series.get(if_name, ()))

    def clear(self, if_name: str | None = None) -> None:
        """Forget one interface, or everything when *if_name* is None."""
        if if_name is None:
            self._series.clear()
        else:
            self._series.pop(if_name, None)

    def interfaces(self) -> list[str]:
        return sorted(self._series)

    def __contains__(self, if_name: object) -> bool:
        return if_name in self._series

    def __len__(self) -> int:
        return len(self._series)
