"""Port-range expressions: ``"1-24, 49, 51-52"``.

Parsing is lenient: a malformed token is skipped and the rest of the
expression still counts.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from loguru import logger

from switchpanel.models.section import PortSection

DEFAULT_BLOCK_SIZE = 24

_SINGLE_RE = re.compile(r"^(\d+)$")
_RANGE_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def parse_port_ranges(expr: str) -> set[int]:
    """Parse a range expression into the set of port indices it names."""
    ports: set[int] = set()
    for token in (expr or "").split(","):
        token = token.strip()
        if not token:
            continue
        m = _SINGLE_RE.match(token)
        if m:
            ports.add(int(m.group(1)))
            continue
        m = _RANGE_RE.match(token)
        if m:
            start, end = int(m.group(1)), int(m.group(2))
            if start <= end:
                ports.update(range(start, end + 1))
                continue
        logger.debug(f"Skipping malformed port range token {token!r} in {expr!r}")
    return ports


def section_port_indices(expr: str, allow_port_zero: bool = False) -> list[int]:
    """Sorted indices of a section, with port 0 dropped unless allowed."""
    return sorted(p for p in parse_port_ranges(expr) if p > 0 or allow_port_zero)


def is_valid_port_ranges(expr: str, allow_port_zero: bool = False) -> bool:
    """Check that *expr* names at least one usable port."""
    return bool(section_port_indices(expr, allow_port_zero))


def max_range_token(expr: str) -> int:
    """Largest integer appearing anywhere in *expr*, 0 if there is none.

    This looks at every number in the string, including the lower bound of
    descending or overlapping tokens, so it is not the maximum of
    :func:`parse_port_ranges`.
    """
    highest = 0
    for part in re.split(r"[,-]", expr or ""):
        m = _LEADING_INT_RE.match(part)
        if m:
            highest = max(highest, int(m.group(1)))
    return highest


def next_port_range(
    sections: Sequence[PortSection],
    allow_port_zero: bool = False,
    detected_port_count: int | None = None,
) -> tuple[int, int]:
    """Default ``(start, end)`` for a section appended after *sections*."""
    if not sections:
        start = 0 if allow_port_zero else 1
    else:
        last = sections[-1]
        start = max_range_token(last.port_ranges) + 1 if last.port_ranges else 1

    end = start + DEFAULT_BLOCK_SIZE - 1
    if detected_port_count is not None and detected_port_count > start:
        end = detected_port_count
    return start, end


def format_port_range(indices: Iterable[int]) -> str:
    """Compact indices into a range expression.

    E.g. [1, 2, 3, 4, 7, 9, 10] -> '1-4, 7, 9-10'
    """
    nums = sorted(set(indices))
    if not nums:
        return ""

    parts: list[str] = []
    start = end = nums[0]
    for n in nums[1:]:
        if n == end + 1:
            end = n
            continue
        parts.append(str(start) if start == end else f"{start}-{end}")
        start = end = n
    parts.append(str(start) if start == end else f"{start}-{end}")
    return ", ".join(parts)
