"""
Tests for the nested edit view, the markdown overview and the text Gantt.
"""

from datetime import date

from roadmapper.models.base import DeliverableStatus
from roadmapper.models.roadmap import Roadmap
from roadmapper.timeline.rows import RowLayout, build_gantt_rows
from roadmapper.views import (
    build_nested_structure,
    deliverables_by_status,
    generate_overview_markdown,
    render_gantt,
)
from roadmapper.views.gantt_text import BAR_CHARS, LABEL_WIDTH


class TestNestedStructure:
    """Test the goal → initiative → deliverable tree."""

    def test_goals_by_priority(self, sample_roadmap):
        nested = build_nested_structure(sample_roadmap)

        assert [node.goal.id for node in nested] == ["goal-1", "goal-2", "goal-3"]
        assert [child.initiative.id for child in nested[0].initiatives] == ["init-1", "init-2"]
        assert [d.id for d in nested[0].initiatives[0].deliverables] == ["D1", "D2", "D3", "D4"]

    def test_goal_without_initiatives(self, sample_roadmap):
        nested = build_nested_structure(sample_roadmap)

        assert nested[2].initiatives == []

    def test_to_json_nests_children(self, sample_roadmap):
        data = build_nested_structure(sample_roadmap)[0].to_json()

        assert data["desiredOutcome"] == "Double ARR"
        assert data["initiatives"][0]["deliverables"][1]["status"] == "in-progress"

    def test_status_counts(self, sample_roadmap):
        counts = deliverables_by_status(sample_roadmap)

        assert (counts.shipped, counts.in_progress, counts.planned, counts.total) == (1, 1, 3, 5)


class TestOverviewMarkdown:
    """Test the markdown export."""

    def test_document(self, sample_roadmap):
        markdown = generate_overview_markdown(sample_roadmap)
        lines = markdown.splitlines()

        assert lines[0] == "# Test Roadmap"
        assert "## [P1] Grow revenue" in lines
        assert "> Top line" in lines
        assert "**Desired Outcome:** Double ARR" in lines
        assert "### Self-serve checkout" in lines
        assert "**Ideal Outcome:** No sales call" in lines
        assert "- [SHIPPED] D1" in lines
        assert "- [IN PROGRESS] D2" in lines
        assert "- [PLANNED] D4" in lines

    def test_goal_order(self, sample_roadmap):
        markdown = generate_overview_markdown(sample_roadmap)

        assert markdown.index("[P1]") < markdown.index("[P2]") < markdown.index("[P3]")

    def test_description_is_optional(self, sample_roadmap):
        markdown = generate_overview_markdown(sample_roadmap)
        section = markdown.split("## [P2] Retain users")[1].split("---")[0]

        assert ">" not in section

    def test_empty_roadmap(self):
        assert generate_overview_markdown(Roadmap(title="Empty")) == "# Empty\n"


class TestTextGantt:
    """Test the terminal Gantt rendering."""

    def _render(self, roadmap, width=60):
        rows = build_gantt_rows(roadmap, RowLayout())
        return render_gantt(rows, date(2024, 1, 1), 6, width)

    def test_header_has_quarters(self, sample_roadmap):
        header = self._render(sample_roadmap).splitlines()[0]

        assert "|Q1 2024" in header
        assert "|Q2 2024" in header
        assert header.startswith(" " * LABEL_WIDTH)

    def test_overlapping_deliverables_get_two_lines(self, sample_roadmap):
        lines = self._render(sample_roadmap).splitlines()

        start = lines.index("[P1] Grow revenue")
        first_lane, second_lane = lines[start + 1], lines[start + 2]
        assert first_lane.startswith("  Self-serve checkout")
        assert BAR_CHARS[DeliverableStatus.SHIPPED] in first_lane
        assert BAR_CHARS[DeliverableStatus.PLANNED] in first_lane
        assert second_lane.startswith(" " * LABEL_WIDTH)
        assert BAR_CHARS[DeliverableStatus.IN_PROGRESS] in second_lane

    def test_unscheduled_line(self, sample_roadmap):
        assert "needs dates: D4" in self._render(sample_roadmap)

    def test_placeholder_row(self, sample_roadmap):
        assert "(No initiatives)" in self._render(sample_roadmap)

    def test_lines_have_fixed_width(self, sample_roadmap):
        lines = self._render(sample_roadmap, width=48).splitlines()
        lane_lines = [l for l in lines if l.startswith("  ") and "needs dates" not in l]

        assert lane_lines
        assert all(len(l) == LABEL_WIDTH + 48 for l in lane_lines)

    def test_out_of_window_bars_are_hidden(self, sample_roadmap):
        rows = build_gantt_rows(sample_roadmap, RowLayout())
        chart = render_gantt(rows, date(2025, 1, 1), 3, 40)

        for char in BAR_CHARS.values():
            assert chart.count(char) == 1  # legend only

    def test_legend(self, sample_roadmap):
        last = self._render(sample_roadmap).splitlines()[-1]

        assert "shipped" in last and "planned" in last
