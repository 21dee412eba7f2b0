"""Immutable edits on a device's port section list.

Every operation takes a tuple of sections and returns a new tuple; the input
(typically the section list of a fetched :class:`Device`) is never touched.
"""

from __future__ import annotations

import time
from typing import Any, Sequence

from loguru import logger
from pydantic import ValidationError

from switchpanel.exceptions import SectionError
from switchpanel.models.device import Device
from switchpanel.models.section import DEFAULT_ROWS, LayoutMode, PortSection
from switchpanel.ranges import is_valid_port_ranges, next_port_range

RJ45 = "RJ45"
SFP = "SFP"

EDITABLE_FIELDS = frozenset({"title", "type", "port_type", "layout_mode", "rows", "port_ranges", "is_combo"})
_FIELD_ALIASES = {"layout": "layout_mode", "layout_type": "layout_mode"}


def new_section_id(sections: Sequence[PortSection] = ()) -> str:
    """Return a ``sec-<epoch ms>`` id not used by *sections*."""
    taken = {s.id for s in sections}
    stamp = int(time.time() * 1000)
    while f"sec-{stamp}" in taken:
        stamp += 1
    return f"sec-{stamp}"


def add_section(
    sections: Sequence[PortSection],
    allow_port_zero: bool = False,
    detected_ports: int | None = None,
    section_id: str | None = None,
) -> tuple[PortSection, ...]:
    """Append a 2-row RJ45 section covering the next free port block."""
    start, end = next_port_range(sections, allow_port_zero, detected_ports)
    section = PortSection(
        id=section_id or new_section_id(sections),
        title=RJ45,
        type=RJ45,
        port_type=RJ45,
        layout_mode=LayoutMode.ODD_TOP,
        rows=DEFAULT_ROWS,
        port_ranges=f"{start}-{end}",
    )
    return (*sections, section)


def add_combo_section(sections: Sequence[PortSection], section_id: str | None = None) -> tuple[PortSection, ...]:
    """Append a combo partner for the last section.

    The partner shares the last section's ports, layout and rows but uses the
    other connector family. Without a preceding section there is nothing to
    pair with and the list is returned unchanged.
    """
    if not sections:
        logger.debug("Combo section needs a preceding section; ignoring")
        return tuple(sections)

    last = sections[-1]
    connector = SFP if last.port_type == RJ45 else RJ45
    section = PortSection(
        id=section_id or new_section_id(sections),
        title="Combo Section",
        type=connector,
        port_type=connector,
        layout_mode=last.layout_mode,
        rows=last.rows,
        port_ranges=last.port_ranges,
        is_combo=True,
    )
    return (*sections, section)


def delete_section(sections: Sequence[PortSection], section_id: str) -> tuple[PortSection, ...]:
    return tuple(s for s in sections if s.id != section_id)


def update_section(
    sections: Sequence[PortSection], section_id: str, field: str, value: Any
) -> tuple[PortSection, ...]:
    """Set one editable field of the section with id *section_id*.

    Raises:
        SectionError: If the field is not editable, the id is unknown or the
            value does not validate.
    """
    field = _FIELD_ALIASES.get(field, field)
    if field not in EDITABLE_FIELDS:
        raise SectionError(f"Field '{field}' is not editable")
    if not any(s.id == section_id for s in sections):
        raise SectionError(f"No section with id '{section_id}'")

    result: list[PortSection] = []
    for s in sections:
        if s.id == section_id:
            data = s.model_dump()
            data[field] = value
            try:
                s = PortSection.model_validate(data)
            except ValidationError as e:
                raise SectionError(f"Invalid value for '{field}': {value!r}") from e
        result.append(s)
    return tuple(result)


def section_problems(sections: Sequence[PortSection], allow_port_zero: bool = False) -> list[str]:
    """Describe configuration errors that layout would have to tolerate."""
    problems: list[str] = []
    for i, s in enumerate(sections):
        if not is_valid_port_ranges(s.port_ranges, allow_port_zero):
            problems.append(f"Section '{s.id}' has no usable ports in '{s.port_ranges}'")
        if s.is_combo and (i == 0 or sections[i - 1].is_combo):
            problems.append(f"Section '{s.id}' is marked combo but has no section to pair with")
    return problems


class DeviceEditor:
    """Editable copy of a device's section configuration.

    Usage::

        editor = DeviceEditor(device)
        editor.add_section()
        editor.add_combo_section()
        client.update_device(editor.device)
    """

    def __init__(self, device: Device) -> None:
        self.original = device
        self.device = device

    @property
    def sections(self) -> tuple[PortSection, ...]:
        return self.device.sections

    @property
    def is_dirty(self) -> bool:
        return self.device != self.original

    def _apply(self, sections: tuple[PortSection, ...]) -> Device:
        self.device = self.device.with_sections(sections)
        return self.device

    def add_section(self, section_id: str | None = None) -> Device:
        detected = self.device.detected_ports or None
        return self._apply(add_section(self.sections, self.device.allow_port_zero, detected, section_id))

    def add_combo_section(self, section_id: str | None = None) -> Device:
        return self._apply(add_combo_section(self.sections, section_id))

    def delete_section(self, section_id: str) -> Device:
        return self._apply(delete_section(self.sections, section_id))

    def update_section(self, section_id: str, field: str, value: Any) -> Device:
        return self._apply(update_section(self.sections, section_id, field, value))

    def problems(self) -> list[str]:
        return section_problems(self.sections, self.device.allow_port_zero)

    def reset(self) -> Device:
        """Drop all edits."""
        self.device = self.original
        return self.device

    def payload(self) -> dict[str, Any]:
        return self.device.to_update_payload()
