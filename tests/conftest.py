"""Shared fixtures for the switchpanel test suite."""

from __future__ import annotations

import asyncio
from typing import Callable
from unittest.mock import MagicMock

import pytest

from switchpanel.models.port import Port
from switchpanel.models.section import PortSection

# ── model factories ───────────────────────────────────────────────────


@pytest.fixture()
def make_port():
    """Factory fixture returning a Port with customizable fields."""

    def _make(physical_index: int, **kwargs):
        defaults = {
            "if_name": f"Eth{physical_index}",
            "physical_index": physical_index,
            "port_type": "RJ45",
            "status": "UP",
            "in_rate": physical_index * 1000,
            "out_rate": physical_index * 100,
        }
        defaults.update(kwargs)
        return Port(**defaults)

    return _make


@pytest.fixture()
def make_breakout(make_port):
    """Factory fixture returning a breakout Port with N sub-ports."""

    def _make(physical_index: int, subs: int = 4, down: tuple[int, ...] = ()):
        children = tuple(
            make_port(
                physical_index,
                if_name=f"Eth{physical_index}/{k + 1}",
                port_type="SFP28",
                status="DOWN" if k in down else "UP",
            )
            for k in range(subs)
        )
        return Port(
            if_name=f"Port {physical_index} (Breakout)",
            physical_index=physical_index,
            port_type="QSFP28",
            status="UP",
            is_breakout=True,
            breakout_ports=children,
        )

    return _make


@pytest.fixture()
def make_section(make_port):
    """Factory fixture returning a PortSection with ports for the given indices."""

    def _make(section_id: str = "sec-1", indices=(), **kwargs):
        defaults = {
            "id": section_id,
            "title": "RJ45",
            "type": "RJ45",
            "port_type": "RJ45",
            "layout_mode": "odd_top",
            "rows": 2,
            "port_ranges": "1-24",
            "ports": tuple(make_port(i) for i in indices),
        }
        defaults.update(kwargs)
        return PortSection(**defaults)

    return _make


@pytest.fixture()
def status_payload():
    """Factory fixture returning a decoded ``/api/switches/status`` response."""

    def _make(prefix: str = "Eth", indices=(1, 2, 3, 4), system: bool = True, rate: int = 1000):
        payload: dict = {
            "sections": [
                {
                    "id": "sec-1",
                    "title": "RJ45",
                    "port_type": "RJ45",
                    "layout": "odd_top",
                    "rows": 2,
                    "port_ranges": f"{min(indices)}-{max(indices)}",
                    "ports": [
                        {
                            "if_name": f"{prefix}{i}",
                            "physical_index": i,
                            "port_type": "RJ45",
                            "status": "UP" if i % 2 else "DOWN",
                            "in_rate": rate * i,
                            "out_rate": rate,
                        }
                        for i in indices
                    ],
                }
            ]
        }
        if system:
            payload["system"] = {"name": "core-sw1", "uptime": "10 days", "descr": "Lab switch", "location": "Rack 4"}
        return payload

    return _make


# ── scheduler helpers ─────────────────────────────────────────────────


class ScriptedSleep:
    """Stand-in for ``asyncio.sleep`` that drives the poll loop tick by tick.

    Records every requested delay, runs an optional hook on the n-th call
    (1-based) and cancels the calling task once more than *ticks* delays
    have been requested, which ends the poll loop deterministically.
    """

    def __init__(self, ticks: int, hooks: dict[int, Callable[[], None]] | None = None) -> None:
        self.ticks = ticks
        self.hooks = hooks or {}
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        hook = self.hooks.get(len(self.delays))
        if hook is not None:
            hook()
        if len(self.delays) > self.ticks:
            asyncio.current_task().cancel()  # type: ignore[union-attr]
        await asyncio.sleep(0)


@pytest.fixture()
def scripted_sleep():
    """Factory fixture returning a ScriptedSleep."""
    return ScriptedSleep


# ── REST mocks ────────────────────────────────────────────────────────


@pytest.fixture()
def mock_response():
    """Factory fixture returning a MagicMock requests.Response."""

    def _make(json_data=None, status_code: int = 200):
        resp = MagicMock()
        resp.status_code = status_code
        resp.ok = 200 <= status_code < 400
        resp.json.return_value = json_data
        return resp

    return _make
