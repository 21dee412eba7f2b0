"""Tests for switchpanel/layout.py"""

import pytest

from switchpanel.layout import (
    GroupKind,
    build_layout,
    find_port,
    flatten_interfaces,
    layout_section,
    partition_rows,
    usage_summary,
)
from switchpanel.models.port import LinkStatus
from switchpanel.models.section import LayoutMode


def _indices(rows):
    return [[p.physical_index for p in row] for row in rows]


def _slot_indices(section_layout):
    return [[s.physical_index for s in row] for row in section_layout.rows]


class TestPartitionRows:
    """Tests for partition_rows()."""

    def test_odd_top_two_rows(self, make_port):
        ports = [make_port(i) for i in (1, 2, 3, 4, 5, 6)]
        assert _indices(partition_rows(ports, LayoutMode.ODD_TOP, 2)) == [[1, 3, 5], [2, 4, 6]]

    def test_odd_top_ignores_input_order(self, make_port):
        ports = [make_port(i) for i in (6, 3, 1, 4, 2, 5)]
        assert _indices(partition_rows(ports, LayoutMode.ODD_TOP, 2)) == [[1, 3, 5], [2, 4, 6]]

    def test_odd_top_one_row_is_sequential(self, make_port):
        ports = [make_port(i) for i in (3, 1, 2)]
        assert _indices(partition_rows(ports, LayoutMode.ODD_TOP, 1)) == [[1, 2, 3]]

    def test_odd_top_three_rows_chunks(self, make_port):
        ports = [make_port(i) for i in range(1, 7)]
        assert _indices(partition_rows(ports, LayoutMode.ODD_TOP, 3)) == [[1, 2], [3, 4], [5, 6]]

    def test_sequential_two_rows(self, make_port):
        ports = [make_port(i) for i in range(1, 7)]
        assert _indices(partition_rows(ports, LayoutMode.SEQUENTIAL, 2)) == [[1, 2, 3], [4, 5, 6]]

    def test_sequential_last_chunk_shorter(self, make_port):
        ports = [make_port(i) for i in range(1, 6)]
        assert _indices(partition_rows(ports, LayoutMode.SEQUENTIAL, 2)) == [[1, 2, 3], [4, 5]]

    def test_sequential_trailing_empty_row(self, make_port):
        ports = [make_port(i) for i in range(1, 6)]
        assert _indices(partition_rows(ports, LayoutMode.SEQUENTIAL, 4)) == [[1, 2], [3, 4], [5], []]

    def test_empty_ports(self):
        assert partition_rows([], LayoutMode.SEQUENTIAL, 2) == [[], []]

    def test_same_index_sorted_by_name(self, make_port):
        ports = [make_port(1, if_name="b"), make_port(1, if_name="a")]
        rows = partition_rows(ports, LayoutMode.SEQUENTIAL, 1)
        assert [p.if_name for p in rows[0]] == ["a", "b"]


class TestBuildLayoutGrouping:
    """Tests for combo grouping in build_layout()."""

    def test_combo_pair(self, make_section):
        sections = [make_section("a"), make_section("b", is_combo=True)]
        groups = build_layout(sections)

        assert len(groups) == 1
        assert groups[0].kind is GroupKind.COMBO
        assert [s.section_id for s in groups[0].sections] == ["a", "b"]

    def test_leading_combo_standalone(self, make_section):
        groups = build_layout([make_section("a", is_combo=True)])

        assert len(groups) == 1
        assert groups[0].kind is GroupKind.SINGLE
        assert groups[0].sections[0].section_id == "a"

    def test_consecutive_combo_flags(self, make_section):
        sections = [make_section("a"), make_section("b", is_combo=True), make_section("c", is_combo=True)]
        groups = build_layout(sections)

        assert [g.kind for g in groups] == [GroupKind.COMBO, GroupKind.SINGLE]
        assert groups[1].sections[0].section_id == "c"

    def test_leading_combo_not_paired_with_next_combo(self, make_section):
        sections = [make_section("a", is_combo=True), make_section("b", is_combo=True)]
        groups = build_layout(sections)
        assert [g.kind for g in groups] == [GroupKind.SINGLE, GroupKind.SINGLE]

    def test_mixed(self, make_section):
        sections = [
            make_section("a"),
            make_section("b"),
            make_section("c", is_combo=True),
            make_section("d"),
        ]
        groups = build_layout(sections)
        assert [g.kind for g in groups] == [GroupKind.SINGLE, GroupKind.COMBO, GroupKind.SINGLE]
        assert [[s.section_id for s in g.sections] for g in groups] == [["a"], ["b", "c"], ["d"]]

    def test_empty(self):
        assert build_layout([]) == ()


class TestBuildLayoutSlots:
    """Tests for slots, breakout cells and selection."""

    def test_rows_from_section(self, make_section):
        section = make_section("a", indices=(4, 1, 3, 2, 6, 5))
        assert _slot_indices(layout_section(section)) == [[1, 3, 5], [2, 4, 6]]

    def test_selected_port(self, make_section):
        section = make_section("a", indices=(1, 2, 3))
        layout = layout_section(section, selected_port="Eth2")
        selected = [s.if_name for row in layout.rows for s in row if s.selected]
        assert selected == ["Eth2"]

    def test_breakout_cells(self, make_section, make_breakout):
        section = make_section("a", ports=(make_breakout(49, down=(1,)),), layout_mode="sequential", rows=1)
        slot = layout_section(section).rows[0][0]

        assert slot.is_breakout is True
        assert [c.if_name for c in slot.cells] == ["Eth49/1", "Eth49/2", "Eth49/3", "Eth49/4"]
        assert [(c.grid_row, c.grid_col) for c in slot.cells] == [(0, 0), (1, 0), (0, 1), (1, 1)]
        assert [c.position for c in slot.cells] == [1, 2, 3, 4]
        assert slot.cells[1].status is LinkStatus.DOWN

    def test_breakout_selection_on_sub_port_only(self, make_section, make_breakout):
        breakout = make_breakout(49)
        section = make_section("a", ports=(breakout,), layout_mode="sequential", rows=1)

        slot = layout_section(section, selected_port="Eth49/3").rows[0][0]
        assert slot.selected is False
        assert [c.selected for c in slot.cells] == [False, False, True, False]

        parent = layout_section(section, selected_port=breakout.if_name).rows[0][0]
        assert parent.selected is False
        assert not any(c.selected for c in parent.cells)

    def test_breakout_capped_at_four_cells(self, make_section, make_breakout):
        section = make_section("a", ports=(make_breakout(49, subs=6),), rows=1)
        slot = layout_section(section).rows[0][0]
        assert len(slot.cells) == 4

    def test_deterministic_for_equal_inputs(self, make_section, make_breakout):
        def build():
            return [
                make_section("a", indices=(3, 1, 2, 4)),
                make_section("b", ports=(make_breakout(5),), is_combo=True),
            ]

        assert build_layout(build(), "Eth5/2") == build_layout(build(), "Eth5/2")

    def test_inputs_not_mutated(self, make_section):
        section = make_section("a", indices=(3, 1, 2))
        before = section.model_dump()
        build_layout([section])
        assert section.model_dump() == before
        assert [p.physical_index for p in section.ports] == [3, 1, 2]


class TestPortLookup:
    """Tests for flatten_interfaces(), find_port() and usage_summary()."""

    @pytest.fixture()
    def sections(self, make_section, make_breakout, make_port):
        return [
            make_section("a", ports=(make_port(1), make_port(2, status="DOWN"))),
            make_section("b", ports=(make_breakout(49, down=(0, 1)),)),
        ]

    def test_flatten_replaces_breakout_parent(self, sections):
        names = [p.if_name for p in flatten_interfaces(sections)]
        assert names == ["Eth1", "Eth2", "Eth49/1", "Eth49/2", "Eth49/3", "Eth49/4"]

    def test_find_top_level(self, sections):
        assert find_port(sections, "Eth2").physical_index == 2

    def test_find_sub_port(self, sections):
        assert find_port(sections, "Eth49/4").port_type == "SFP28"

    def test_find_missing(self, sections):
        assert find_port(sections, "nope") is None

    def test_usage(self, sections):
        usage = usage_summary(sections)
        assert usage.total == 6
        assert usage.up == 3
        assert usage.down == 3
        assert usage.usage_percent == 50.0

    def test_usage_empty(self):
        usage = usage_summary([])
        assert usage.total == 0
        assert usage.usage_percent == 0.0
