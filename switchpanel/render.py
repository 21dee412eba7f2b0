"""Plain-text rendering of panel layouts and port details."""

from __future__ import annotations

from typing import Sequence

from tabulate import tabulate

from switchpanel.layout import GroupKind, LayoutGroup, PortSlot, SectionLayout, UsageSummary
from switchpanel.models.device import SystemInfo
from switchpanel.models.port import LinkStatus, Port, PortMode
from switchpanel.models.traffic import TrafficSample

_DOM_UNITS = {
    "temperature": ("Temp", "{:.1f} °C"),
    "voltage": ("Volt", "{:.2f} V"),
    "tx_power": ("Tx", "{:.2f} dBm"),
    "rx_power": ("Rx", "{:.2f} dBm"),
    "bias_current": ("Bias", "{:.2f} mA"),
}

SLOT_WIDTH = 6


def format_speed(bps: int | float | None) -> str:
    """Human-readable rate, e.g. ``1.50 Gbps``."""
    if not bps:
        return "0 bps"
    if bps >= 1_000_000_000:
        return f"{bps / 1_000_000_000:.2f} Gbps"
    if bps >= 1_000_000:
        return f"{bps / 1_000_000:.2f} Mbps"
    if bps >= 1_000:
        return f"{bps / 1_000:.2f} Kbps"
    return f"{bps} bps"


def _slot_text(slot: PortSlot) -> str:
    if slot.is_breakout:
        marks = "".join(
            ("*" if c.selected else ("+" if c.status is LinkStatus.UP else "."))
            for c in sorted(slot.cells, key=lambda c: (c.grid_row, c.grid_col))
        )
        return f"{slot.physical_index}:{marks}".center(SLOT_WIDTH)
    label = str(slot.physical_index)
    if slot.selected:
        return f">{label}<".center(SLOT_WIDTH)
    if slot.status is LinkStatus.UP:
        return f"[{label}]".center(SLOT_WIDTH)
    return f" {label} ".center(SLOT_WIDTH)


def _section_lines(section: SectionLayout) -> list[str]:
    rows = [" ".join(_slot_text(s) for s in row) for row in section.rows]
    width = max([len(r) for r in rows] + [len(section.port_type), len(section.title), 1])
    lines = [(section.port_type or section.title).center(width), "-" * width]
    lines.extend(r.ljust(width) for r in rows)
    return lines


def _join_columns(blocks: Sequence[list[str]], gap: str = "   ") -> list[str]:
    height = max(len(b) for b in blocks)
    widths = [max(len(line) for line in b) for b in blocks]
    out: list[str] = []
    for i in range(height):
        parts = [(b[i] if i < len(b) else "").ljust(w) for b, w in zip(blocks, widths)]
        out.append(gap.join(parts).rstrip())
    return out


class PanelFormatter:
    """Format layout groups as a text front panel.

    UP ports show as ``[n]``, DOWN as `` n ``, the selected port as ``>n<``.
    Breakout slots list their cells row by row: ``+`` up, ``.`` down,
    ``*`` selected.
    """

    def __init__(
        self,
        groups: Sequence[LayoutGroup],
        system: SystemInfo | None = None,
        usage: UsageSummary | None = None,
    ) -> None:
        self.groups = groups
        self.system = system
        self.usage = usage

    def format(self) -> str:
        lines: list[str] = []

        if self.system is not None:
            lines.append(f"  Name:     {self.system.name or '-'}")
            lines.append(f"  Uptime:   {self.system.uptime or '-'}")
            lines.append(f"  Descr:    {self.system.descr or '-'}")
            lines.append(f"  Location: {self.system.location or '-'}")
            lines.append("")

        if not self.groups:
            lines.append("  Loading / No ports.")
        else:
            blocks: list[list[str]] = []
            for group in self.groups:
                inner = _join_columns([_section_lines(s) for s in group.sections], gap=" | ")
                if group.kind is GroupKind.COMBO:
                    width = max(len(line) for line in inner)
                    inner = ["Combo Group".center(width, "=")] + inner + ["=" * width]
                blocks.append(inner)
            lines.extend(_join_columns(blocks))

        if self.usage is not None:
            u = self.usage
            lines.append("")
            lines.append(
                tabulate(
                    [[u.total, u.up, u.down, f"{u.usage_percent:.1f}%"]],
                    headers=["Total", "Up", "Down", "Usage"],
                    tablefmt="simple",
                )
            )
        return "\n".join(lines)


class PortDetailFormatter:
    """Format one interface with its recent traffic history."""

    def __init__(self, port: Port, history: Sequence[TrafficSample] = (), history_rows: int = 10) -> None:
        self.port = port
        self.history = history
        self.history_rows = history_rows

    def format(self) -> str:
        p = self.port
        rows = [
            ["Port", p.physical_index],
            ["Status", p.status.value],
            ["Interface", p.if_name],
            ["Type", p.port_type or "-"],
            ["Description", p.if_desc or "-"],
            ["Speed", format_speed(p.speed)],
            ["In Rate", format_speed(p.in_rate)],
            ["Out Rate", format_speed(p.out_rate)],
        ]
        if p.mode is PortMode.TRUNK:
            rows.append(["Native VLAN", p.vlan_id or "-"])
            rows.append(["Allowed VLANs", p.allowed_vlans or "None"])
        else:
            rows.append(["Access VLAN", p.vlan_id if p.vlan_id > 0 else "-"])

        out = [tabulate(rows, tablefmt="plain")]

        if p.dom is not None and p.dom.has_readings:
            readings = p.dom.present_readings()
            out.append("")
            out.append("DOM/DDM Info")
            out.append(
                tabulate(
                    [[_DOM_UNITS[k][1].format(v) for k, v in readings.items()]],
                    headers=[_DOM_UNITS[k][0] for k in readings],
                    tablefmt="simple",
                )
            )

        if self.history:
            recent = list(self.history)[-self.history_rows :]
            out.append("")
            out.append(f"Traffic History (last {len(self.history)} samples)")
            out.append(
                tabulate(
                    [[s.time, format_speed(s.in_rate), format_speed(s.out_rate)] for s in recent],
                    headers=["Time", "In", "Out"],
                    tablefmt="simple",
                )
            )
        return "\n".join(out)
