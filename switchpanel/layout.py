"""Front-panel layout engine.

Turns the section list of one status snapshot into render-ready groups of
rows and slots. Everything here is a pure function of its arguments: the
same sections always produce the same layout, whatever order the ports
arrived in.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Iterator, Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from switchpanel.models.port import LinkStatus, Port
from switchpanel.models.section import LayoutMode, PortSection

MAX_BREAKOUT_CELLS = 4


class GroupKind(str, Enum):
    SINGLE = "single"
    COMBO = "combo"


class BreakoutCell(BaseModel):
    """One sub-interface of a breakout slot, placed on a 2x2 grid."""

    model_config = ConfigDict(frozen=True)

    position: int
    grid_row: int
    grid_col: int
    if_name: str
    status: LinkStatus
    selected: bool = False


class PortSlot(BaseModel):
    """One physical connector on the panel."""

    model_config = ConfigDict(frozen=True)

    physical_index: int
    if_name: str
    port_type: str
    status: LinkStatus
    is_breakout: bool = False
    selected: bool = False
    cells: tuple[BreakoutCell, ...] = Field(default_factory=tuple)


class SectionLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    section_id: str
    title: str
    port_type: str
    rows: tuple[tuple[PortSlot, ...], ...]


class LayoutGroup(BaseModel):
    """A standalone section, or a combo pair rendered side by side."""

    model_config = ConfigDict(frozen=True)

    kind: GroupKind
    sections: tuple[SectionLayout, ...]


class UsageSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    up: int = 0
    down: int = 0
    usage_percent: float = 0.0


def _sort_key(port: Port) -> tuple[int, str]:
    return port.physical_index, port.if_name


def partition_rows(ports: Sequence[Port], layout_mode: LayoutMode, rows: int) -> list[list[Port]]:
    """Distribute *ports* over *rows* rows.

    ``odd_top`` with two rows puts odd indices on top and even below. Every
    other combination splits the sorted ports into ``rows`` contiguous
    chunks of ``ceil(count / rows)``.
    """
    ordered = sorted(ports, key=_sort_key)
    rows = max(rows, 1)

    if layout_mode is LayoutMode.ODD_TOP and rows == 2:
        return [
            [p for p in ordered if p.physical_index % 2 != 0],
            [p for p in ordered if p.physical_index % 2 == 0],
        ]

    per_row = math.ceil(len(ordered) / rows)
    return [ordered[i * per_row : (i + 1) * per_row] for i in range(rows)]


def _build_slot(port: Port, selected_port: str | None) -> PortSlot:
    if not port.is_breakout:
        return PortSlot(
            physical_index=port.physical_index,
            if_name=port.if_name,
            port_type=port.port_type,
            status=port.status,
            selected=selected_port is not None and port.if_name == selected_port,
        )

    subs = port.breakout_ports[:MAX_BREAKOUT_CELLS]
    if len(port.breakout_ports) > MAX_BREAKOUT_CELLS:
        logger.warning(
            f"Breakout port {port.physical_index} reports {len(port.breakout_ports)} sub-ports; "
            f"showing the first {MAX_BREAKOUT_CELLS}"
        )
    # Cells fill the 2x2 grid column by column.
    cells = tuple(
        BreakoutCell(
            position=k + 1,
            grid_row=k % 2,
            grid_col=k // 2,
            if_name=sub.if_name,
            status=sub.status,
            selected=selected_port is not None and sub.if_name == selected_port,
        )
        for k, sub in enumerate(subs)
    )
    return PortSlot(
        physical_index=port.physical_index,
        if_name=port.if_name,
        port_type=port.port_type,
        status=LinkStatus.UP if any(c.status is LinkStatus.UP for c in cells) else LinkStatus.DOWN,
        is_breakout=True,
        cells=cells,
    )


def layout_section(section: PortSection, selected_port: str | None = None) -> SectionLayout:
    rows = partition_rows(section.ports, section.layout_mode, section.rows)
    return SectionLayout(
        section_id=section.id,
        title=section.title,
        port_type=section.port_type,
        rows=tuple(tuple(_build_slot(p, selected_port) for p in row) for row in rows),
    )


def build_layout(sections: Sequence[PortSection], selected_port: str | None = None) -> tuple[LayoutGroup, ...]:
    """Arrange *sections* into layout groups.

    A section followed by a combo-flagged section is paired with it. A combo
    flag with nothing valid to pair with (first section, or two combo flags
    in a row) is a configuration error; that section is laid out on its own.

    Args:
        sections: Sections of one snapshot, in configuration order.
        selected_port: ``if_name`` of the selected interface. Breakout
            sub-ports are matched individually, never their parent.

    Returns:
        The layout groups in panel order.
    """
    groups: list[LayoutGroup] = []
    i = 0
    while i < len(sections):
        current = sections[i]
        nxt = sections[i + 1] if i + 1 < len(sections) else None

        if current.is_combo:
            logger.warning(f"Section '{current.id}' is marked combo without a partner; laying it out standalone")
        elif nxt is not None and nxt.is_combo:
            groups.append(
                LayoutGroup(
                    kind=GroupKind.COMBO,
                    sections=(layout_section(current, selected_port), layout_section(nxt, selected_port)),
                )
            )
            i += 2
            continue

        groups.append(LayoutGroup(kind=GroupKind.SINGLE, sections=(layout_section(current, selected_port),)))
        i += 1
    return tuple(groups)


def flatten_interfaces(sections: Sequence[PortSection]) -> Iterator[Port]:
    """Yield every monitored interface, breakout sub-ports instead of their parent."""
    for section in sections:
        for port in section.ports:
            yield from port.interfaces()


def find_port(sections: Sequence[PortSection], if_name: str) -> Port | None:
    """Resolve *if_name* against the current sections, descending into breakouts."""
    for section in sections:
        for port in section.ports:
            if port.if_name == if_name:
                return port
            for sub in port.breakout_ports:
                if sub.if_name == if_name:
                    return sub
    return None


def usage_summary(sections: Sequence[PortSection]) -> UsageSummary:
    """Count up/down interfaces over the whole panel."""
    interfaces = list(flatten_interfaces(sections))
    total = len(interfaces)
    up = sum(1 for p in interfaces if p.is_up)
    return UsageSummary(
        total=total,
        up=up,
        down=total - up,
        usage_percent=round(up / total * 100, 1) if total else 0.0,
    )
