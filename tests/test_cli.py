"""
Tests for the roadmap CLI.

Commands run against a temporary .roadmap/ directory seeded with the
sample roadmap, so entity ids are known up front.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from roadmapper.cli import cli
from roadmapper.core import RoadmapCore
from roadmapper.managers.storage_manager import StorageManager


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def storage(data_dir, sample_roadmap):
    storage = StorageManager(data_dir=data_dir)
    storage.save_roadmap(sample_roadmap)
    return storage


@pytest.fixture
def invoke(runner, data_dir, storage):
    """Invoke the CLI against the seeded data directory."""

    def _invoke(*args, **kwargs):
        return runner.invoke(cli, ["--data-dir", str(data_dir), *args], **kwargs)

    return _invoke


def _priorities(storage):
    return {g.id: g.priority for g in storage.load_roadmap().goals}


class TestGoalCommands:
    """Test goal add, list, edit, delete and priority."""

    def test_list_json(self, invoke):
        result = invoke("goal", "list", "--json")

        assert result.exit_code == 0, result.output
        goals = json.loads(result.output)
        assert [g["id"] for g in goals] == ["goal-1", "goal-2", "goal-3"]
        assert [g["initiativeCount"] for g in goals] == [2, 1, 0]

    def test_list_text(self, invoke):
        result = invoke("goal", "list")

        assert "P1  Grow revenue  [2 initiative(s)]  (goal-1)" in result.output

    def test_list_empty(self, runner, temp_dir):
        result = runner.invoke(cli, ["--data-dir", str(temp_dir / "fresh"), "goal", "list"])

        assert result.exit_code == 0
        assert "No goals yet" in result.output

    def test_add(self, invoke, storage):
        result = invoke("goal", "add", "Expand", "-o", "Two markets", "-d", "EU and APAC")

        assert result.exit_code == 0, result.output
        assert "created with priority 4" in result.output
        added = [g for g in storage.load_roadmap().goals if g.name == "Expand"]
        assert added[0].description == "EU and APAC"

    def test_add_requires_outcome(self, invoke):
        result = invoke("goal", "add", "Expand")

        assert result.exit_code == 2

    def test_edit(self, invoke, storage):
        result = invoke("goal", "edit", "goal-2", "-n", "Keep users")

        assert result.exit_code == 0, result.output
        assert storage.load_roadmap().get_goal("goal-2").name == "Keep users"

    def test_edit_without_changes(self, invoke):
        result = invoke("goal", "edit", "goal-2")

        assert result.exit_code == 1
        assert "No update parameters provided" in result.output

    def test_edit_missing_goal(self, invoke):
        result = invoke("goal", "edit", "goal-9", "-n", "x")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete_with_children_needs_cascade(self, invoke, storage):
        result = invoke("goal", "delete", "goal-1", "--yes")

        assert result.exit_code == 1
        assert "Operation Error" in result.output
        assert storage.load_roadmap().get_goal("goal-1") is not None

    def test_delete_cascade(self, invoke, storage):
        result = invoke("goal", "delete", "goal-1", "--cascade", "--yes")

        assert result.exit_code == 0, result.output
        roadmap = storage.load_roadmap()
        assert [i.id for i in roadmap.initiatives] == ["init-3"]
        assert [d.id for d in roadmap.deliverables] == ["D5"]
        assert _priorities(storage) == {"goal-2": 1, "goal-3": 2}

    def test_delete_prompts(self, invoke, storage):
        result = invoke("goal", "delete", "goal-3", input="n\n")

        assert result.exit_code == 1
        assert storage.load_roadmap().get_goal("goal-3") is not None

    def test_priority(self, invoke, storage):
        result = invoke("goal", "priority", "goal-3", "1")

        assert result.exit_code == 0, result.output
        assert _priorities(storage) == {"goal-1": 2, "goal-2": 3, "goal-3": 1}

    def test_priority_out_of_range(self, invoke):
        result = invoke("goal", "priority", "goal-1", "9")

        assert result.exit_code == 1
        assert "Validation Error" in result.output
        assert "between 1 and 3" in result.output


class TestInitiativeCommands:
    """Test initiative add, edit, delete and move."""

    def test_add(self, invoke, storage):
        result = invoke("initiative", "add", "goal-3", "Recruiting", "-o", "Pipeline of 50")

        assert result.exit_code == 0, result.output
        added = storage.load_roadmap().initiatives_for("goal-3")
        assert [i.name for i in added] == ["Recruiting"]

    def test_add_to_missing_goal(self, invoke):
        result = invoke("initiative", "add", "goal-9", "Nowhere", "-o", "x")

        assert result.exit_code == 1

    def test_edit(self, invoke, storage):
        result = invoke("initiative", "edit", "init-2", "-o", "Three clear tiers")

        assert result.exit_code == 0, result.output
        assert storage.load_roadmap().get_initiative("init-2").ideal_outcome == "Three clear tiers"

    def test_move(self, invoke, storage):
        result = invoke("initiative", "move", "init-2", "goal-3")

        assert result.exit_code == 0, result.output
        moved = storage.load_roadmap().get_initiative("init-2")
        assert moved.goal_id == "goal-3"
        assert moved.order == 0

    def test_delete_cascade(self, invoke, storage):
        result = invoke("initiative", "delete", "init-1", "--cascade", "--yes")

        assert result.exit_code == 0, result.output
        assert [d.id for d in storage.load_roadmap().deliverables] == ["D5"]


class TestDeliverableCommands:
    """Test deliverable add, edit, delete and move."""

    def test_add_parses_dates(self, invoke, storage):
        result = invoke(
            "deliverable", "add", "init-2", "Tier table",
            "-s", "in-progress", "--start", "31/12/2024", "--end", "January 15, 2025",
        )

        assert result.exit_code == 0, result.output
        (added,) = storage.load_roadmap().deliverables_for("init-2")
        assert added.start_date.isoformat() == "2024-12-31"
        assert added.end_date.isoformat() == "2025-01-15"
        assert added.status == "in-progress"

    def test_add_without_dates_warns(self, invoke):
        result = invoke("deliverable", "add", "init-2", "Someday")

        assert result.exit_code == 0
        assert "unscheduled" in result.output

    def test_add_bad_date(self, invoke):
        result = invoke("deliverable", "add", "init-2", "Broken", "--start", "soon")

        assert result.exit_code == 2
        assert "Invalid date format" in result.output

    def test_add_bad_status(self, invoke):
        result = invoke("deliverable", "add", "init-2", "Broken", "-s", "done")

        assert result.exit_code == 2

    def test_add_end_before_start(self, invoke, storage):
        result = invoke("deliverable", "add", "init-2", "Backwards", "--start", "2024-05-31", "--end", "2024-05-01")

        assert result.exit_code == 1
        assert "End date must not be before start date" in result.output
        assert storage.load_roadmap().deliverables_for("init-2") == []

    def test_edit_clear_dates(self, invoke, storage):
        result = invoke("deliverable", "edit", "D1", "--clear-dates")

        assert result.exit_code == 0, result.output
        assert not storage.load_roadmap().get_deliverable("D1").is_scheduled

    def test_edit_clear_dates_conflict(self, invoke):
        result = invoke("deliverable", "edit", "D1", "--clear-dates", "--start", "2024-01-01")

        assert result.exit_code == 2

    def test_edit_status(self, invoke, storage):
        result = invoke("deliverable", "edit", "D3", "-s", "shipped")

        assert result.exit_code == 0, result.output
        assert storage.load_roadmap().get_deliverable("D3").status == "shipped"

    def test_delete(self, invoke, storage):
        result = invoke("deliverable", "delete", "D4", "--yes")

        assert result.exit_code == 0, result.output
        assert storage.load_roadmap().get_deliverable("D4") is None

    def test_move(self, invoke, storage):
        result = invoke("deliverable", "move", "D5", "init-2")

        assert result.exit_code == 0, result.output
        assert storage.load_roadmap().get_deliverable("D5").initiative_id == "init-2"


class TestViewCommands:
    """Test edit, gantt and overview views."""

    def test_edit_view_json(self, invoke):
        result = invoke("view", "edit", "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["title"] == "Test Roadmap"
        assert data["counts"] == {"shipped": 1, "inProgress": 1, "planned": 3, "total": 5}
        assert data["goals"][0]["initiatives"][0]["deliverables"][0]["id"] == "D1"

    def test_edit_view_text(self, invoke):
        result = invoke("view", "edit")

        assert "[P1] Grow revenue  (goal-1)" in result.output
        assert "(no initiatives)" in result.output
        assert "5 deliverable(s): 1 shipped, 1 in progress, 3 planned" in result.output

    def test_gantt(self, invoke):
        result = invoke("view", "gantt", "--start", "2024-01-01", "--months", "3", "--width", "36")

        assert result.exit_code == 0, result.output
        assert "[P1] Grow revenue" in result.output
        assert "needs dates: D4" in result.output
        assert "|Q1 2024" in result.output

    def test_gantt_window_from_stored_roadmap(self, invoke, data_dir):
        """Test the roadmap's own window wins over the config.json default."""
        (data_dir / "config.json").write_text(json.dumps({"view_months": 3}))

        result = invoke("view", "gantt", "--start", "2024-01-01", "--width", "48")

        assert result.exit_code == 0, result.output
        assert "|Q4 2024" in result.output

    def test_gantt_window_defaults_to_config(self, runner, temp_dir):
        """Test a new roadmap takes its window from config.json."""
        fresh = temp_dir / "fresh"
        fresh.mkdir()
        (fresh / "config.json").write_text(json.dumps({"view_months": 3}))
        runner.invoke(cli, ["--data-dir", str(fresh), "goal", "add", "Grow", "-o", "More"])

        result = runner.invoke(
            cli, ["--data-dir", str(fresh), "view", "gantt", "--start", "2024-01-01", "--width", "48"]
        )

        assert result.exit_code == 0, result.output
        assert "|Q1 2024" in result.output
        assert "|Q2 2024" not in result.output
        assert StorageManager(data_dir=fresh).load_roadmap().settings.view_months == 3

    def test_gantt_empty(self, runner, temp_dir):
        result = runner.invoke(cli, ["--data-dir", str(temp_dir / "fresh"), "view", "gantt"])

        assert result.exit_code == 0
        assert "No goals to display." in result.output

    def test_overview_to_file(self, invoke, temp_dir):
        output = temp_dir / "overview.md"

        result = invoke("view", "overview", "-o", str(output))

        assert result.exit_code == 0, result.output
        assert output.read_text().startswith("# Test Roadmap")


class TestDataCommands:
    """Test export, import and reset."""

    def test_export_import_round_trip(self, invoke, runner, temp_dir):
        export_path = temp_dir / "roadmap.json"
        assert invoke("data", "export", str(export_path)).exit_code == 0

        other = StorageManager(data_dir=temp_dir / "other")
        result = runner.invoke(cli, ["--data-dir", str(other.data_dir), "data", "import", str(export_path)])

        assert result.exit_code == 0, result.output
        assert "Imported 'Test Roadmap'" in result.output
        assert len(other.load_roadmap().deliverables) == 5

    def test_import_invalid(self, invoke, temp_dir):
        bad = temp_dir / "bad.json"
        bad.write_text("{not json")

        result = invoke("data", "import", str(bad))

        assert result.exit_code == 1
        assert "Storage Error" in result.output

    def test_import_non_utf8(self, invoke, temp_dir):
        bad = temp_dir / "binary.json"
        bad.write_bytes(b'{"title": "\xff\xfe"}')

        result = invoke("data", "import", str(bad))

        assert result.exit_code == 1
        assert "Storage Error" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)

    def test_reset(self, invoke, storage):
        result = invoke("data", "reset", "--yes")

        assert result.exit_code == 0, result.output
        assert storage.load_roadmap() is None

    def test_import_is_local_only(self, runner, temp_dir):
        source = temp_dir / "roadmap.json"
        source.write_text("{}")

        result = runner.invoke(cli, [
            "--data-dir", str(temp_dir), "--remote", "http://roadmap.test", "data", "import", str(source),
        ])

        assert result.exit_code == 1
        assert "only works on local data" in result.output


class TestConfigCommand:
    """Test config show."""

    ENV = ["NOTION_TOKEN", "GOALS_DB_ID", "INITIATIVES_DB_ID", "DELIVERABLES_DB_ID", "API_KEY", "PORT"]

    def test_show_json(self, invoke, data_dir, monkeypatch):
        for name in self.ENV:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("NOTION_TOKEN", "secret_x")
        (data_dir / "config.json").write_text(json.dumps({"view_months": 6, "failure_policies": {"goal": "rollback"}}))

        result = invoke("config", "show", "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["environment"]["NOTION_TOKEN"] is True
        assert data["environment"]["GOALS_DB_ID"] is False
        assert data["configured"] is False
        assert data["apiKey"] is False
        assert data["project"]["viewMonths"] == 6
        assert data["project"]["failurePolicies"]["goal"] == "rollback"

    def test_set_value(self, invoke, data_dir):
        result = invoke("config", "set", "view_months", "6")

        assert result.exit_code == 0, result.output
        assert json.loads((data_dir / "config.json").read_text())["view_months"] == 6

    def test_set_failure_policy(self, invoke, data_dir):
        result = invoke("config", "set", "failure_policies.deliverable", "refetch")

        assert result.exit_code == 0, result.output
        policies = json.loads((data_dir / "config.json").read_text())["failure_policies"]
        assert policies == {"goal": "refetch", "initiative": "rollback", "deliverable": "refetch"}

    def test_set_rejects_invalid_value(self, invoke, data_dir):
        result = invoke("config", "set", "failure_policies.goal", "retry")

        assert result.exit_code == 1
        assert "Validation Error" in result.output
        assert not (data_dir / "config.json").exists()

    def test_set_unknown_key(self, invoke):
        result = invoke("config", "set", "colour", "red")

        assert result.exit_code == 1
        assert "Unknown setting: colour" in result.output

    def test_show_reports_invalid_config(self, invoke, data_dir):
        (data_dir / "config.json").write_text(json.dumps({"view_months": 0}))

        result = invoke("config", "show")

        assert result.exit_code == 1
        assert "Storage Error" in result.output

    def test_bad_port(self, invoke, monkeypatch):
        monkeypatch.setenv("PORT", "eighty")

        result = invoke("config", "show")

        assert result.exit_code == 1
        assert "PORT must be an integer" in result.output


class TestRoadmapCore:
    """Test the core against a mocked remote server."""

    def test_remote_create(self, temp_dir):
        requests = []

        def server(request):
            requests.append((request.method, request.url.path))
            if request.method == "GET":
                return httpx.Response(200, json=[])
            body = json.loads(request.content)
            return httpx.Response(201, json={"id": "page-1", **body})

        core = RoadmapCore(
            data_dir=temp_dir / ".roadmap",
            remote_url="http://roadmap.test",
            transport=httpx.MockTransport(server),
        )

        goal = core.run(lambda sync: sync.add_goal("Grow", desired_outcome="More"))

        assert core.is_remote
        assert goal.id == "page-1"
        assert goal.priority == 1
        assert ("POST", "/api/notion/goals") in requests
        # Remote mode never writes the local blob
        assert core.storage.load_roadmap() is None
        assert not (temp_dir / ".roadmap").exists()

    def test_local_load(self, data_dir, storage):
        core = RoadmapCore(data_dir=data_dir)

        roadmap = core.load()

        assert not core.is_remote
        assert roadmap.title == "Test Roadmap"
        assert len(roadmap.goals) == 3
