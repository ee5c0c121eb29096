"""
Tests for the topicmap command-line interface.
"""

import json

import pytest

from topicmap.cli import create_parser, main


@pytest.fixture
def workspace(tmp_path, monkeypatch, capsys):
    """Working directory holding a fresh config and topic file."""
    monkeypatch.chdir(tmp_path)
    assert main(["init", "--label", "Traffic"]) == 0
    capsys.readouterr()
    return tmp_path


def run(capsys, *argv):
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestParser:
    """Tests for create_parser()."""

    def test_edit_add_node_arguments(self):
        args = create_parser().parse_args(["edit", "add-node", "0", "child", "solution"])

        assert args.command == "edit"
        assert args.edit_action == "add-node"
        assert args.from_id == "0"
        assert args.node_type == "solution"
        assert args.relation is None

    def test_invalid_score_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["edit", "score", "1", "11"])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: topicmap" in capsys.readouterr().out


class TestInit:
    """Tests for `topicmap init`."""

    def test_creates_config_and_topic(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        code, out, _ = run(capsys, "init", "--label", "Housing")

        assert code == 0
        assert (tmp_path / ".topicmap.toml").is_file()
        data = json.loads((tmp_path / "topic.json").read_text())
        assert data["diagrams"]["root"]["nodes"][0]["data"]["label"] == "Housing"
        assert out.count("Created") == 2

    def test_existing_topic_kept(self, workspace, capsys):
        code, out, err = run(capsys, "init")

        assert code == 1
        assert "Config exists" in out
        assert "already exists" in err

    def test_force_replaces_topic(self, workspace, capsys):
        run(capsys, "edit", "add-node", "0", "child", "solution")

        code, _, _ = run(capsys, "init", "--force")

        assert code == 0
        data = json.loads((workspace / "topic.json").read_text())
        assert len(data["diagrams"]["root"]["nodes"]) == 1

    def test_file_option(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        code, _, _ = run(capsys, "--file", "maps/city.json", "init")

        assert code == 0
        assert (tmp_path / "maps" / "city.json").is_file()
        assert not (tmp_path / "topic.json").exists()


class TestEdit:
    """Tests for `topicmap edit`."""

    def test_add_node_then_show(self, workspace, capsys):
        code, out, _ = run(capsys, "edit", "add-node", "0", "child", "solution")
        assert code == 0
        assert out == "Added solution #1 (edge 0)\n"

        run(capsys, "edit", "label", "1", "Bike lanes")
        code, out, _ = run(capsys, "show")

        assert code == 0
        assert out == (
            "## Problem diagram `root` (active)\n"
            "\n"
            "- problem #0: Traffic\n"
            "  - (solves) solution #1: Bike lanes\n"
        )

    def test_criterion_links_existing_solutions(self, workspace, capsys):
        run(capsys, "edit", "add-node", "0", "child", "solution")

        code, out, _ = run(capsys, "edit", "add-node", "0", "child", "criterion")

        assert code == 0
        assert "Added criterion #2 (edge 1)" in out
        assert "Linked 1 criterion/solution pair(s)" in out

    def test_add_node_not_licensed(self, workspace, capsys):
        code, _, err = run(capsys, "edit", "add-node", "0", "child", "support")

        assert code == 1
        assert "cannot add a support as child of problem '0'" in err
        data = json.loads((workspace / "topic.json").read_text())
        assert data["nextNodeId"] == 1

    def test_connect_ignored_leaves_file_untouched(self, workspace, capsys):
        run(capsys, "edit", "add-node", "0", "child", "solution")
        run(capsys, "edit", "add-node", "0", "child", "solution")
        before = (workspace / "topic.json").read_text()

        code, _, err = run(capsys, "edit", "connect", "1", "2")

        assert code == 1
        assert "Connection ignored" in err
        assert (workspace / "topic.json").read_text() == before

    def test_unrestricted_connect_uses_generic_relation(self, workspace, capsys):
        run(capsys, "edit", "add-node", "0", "child", "solution")
        run(capsys, "edit", "add-node", "0", "child", "solution")

        code, out, _ = run(capsys, "edit", "--unrestricted", "connect", "1", "2")

        assert code == 0
        assert out == "Connected with edge 2 (relatesTo)\n"

    def test_score_and_claim_flow(self, workspace, capsys):
        run(capsys, "edit", "add-node", "0", "child", "solution")
        run(capsys, "edit", "label", "1", "Bike lanes")

        assert run(capsys, "edit", "score", "1", "7")[1] == "Scored node 1: 7\n"
        assert run(capsys, "edit", "claim", "1")[1] == "Created claim diagram node-1\n"
        code, out, _ = run(capsys, "edit", "add-node", "2", "child", "support")
        assert code == 0
        assert out.startswith("Added support #3")

        _, out, _ = run(capsys, "show", "--active")
        assert "## Claim diagram `node-1` (active)" in out
        assert '- rootClaim #2: "Bike lanes" is important [7]' in out

        assert run(capsys, "edit", "claim", "1")[1] == "Opened claim diagram node-1\n"
        assert run(capsys, "edit", "activate", "root")[1] == "Active diagram: root\n"
        assert run(capsys, "edit", "score", "--edge", "0", "8")[1] == "Scored edge 0: 8\n"

    def test_toggle_criteria(self, workspace, capsys):
        _, out, _ = run(capsys, "edit", "toggle-criteria", "0")

        assert out == "Criteria of problem 0 shown\n"

    def test_unknown_node_reports_error(self, workspace, capsys):
        code, _, err = run(capsys, "edit", "label", "99", "Nothing")

        assert code == 1
        assert err.startswith("Error:")

    def test_reset(self, workspace, capsys):
        run(capsys, "edit", "add-node", "0", "child", "solution")

        code, out, _ = run(capsys, "edit", "reset", "--label", "Air quality")

        assert code == 0
        assert out == "Topic reset\n"
        data = json.loads((workspace / "topic.json").read_text())
        assert [n["data"]["label"] for n in data["diagrams"]["root"]["nodes"]] == ["Air quality"]

    def test_missing_topic_file(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        code, _, err = run(capsys, "edit", "label", "0", "x")

        assert code == 1
        assert "Cannot read topic file" in err

    def test_edit_without_action(self, workspace, capsys):
        code, _, err = run(capsys, "edit")

        assert code == 1
        assert "Usage: topicmap edit" in err


class TestShow:
    """Tests for `topicmap show`."""

    def test_json_snapshot(self, workspace, capsys):
        code, out, _ = run(capsys, "show", "--format", "json")

        assert code == 0
        assert json.loads(out)["activeDiagramId"] == "root"

    def test_json_single_diagram(self, workspace, capsys):
        _, out, _ = run(capsys, "show", "--format", "json", "--diagram", "root")

        assert json.loads(out)["type"] == "Problem"


class TestRelations:
    """Tests for `topicmap relations`."""

    def test_lists_schema(self, capsys):
        code, out, _ = run(capsys, "relations")

        assert code == 0
        assert "problem -> solution: solves\n" in out
        assert "criterion -> solution: embodies  (automatic)\n" in out

    def test_extending_a_type(self, capsys):
        _, out, _ = run(capsys, "relations", "--from", "solution", "--direction", "parent")

        assert "problem (solves)" in out
        assert "criterion" not in out

    def test_nothing_to_add(self, capsys):
        _, out, _ = run(capsys, "relations", "--from", "rootClaim", "--direction", "parent")

        assert out == "No parent can be added to a rootClaim\n"

    def test_json_output(self, capsys):
        _, out, _ = run(capsys, "relations", "--from", "solution", "-j")

        assert {"type": "solutionComponent", "relation": "component of"} in json.loads(out)


class TestConfigCommand:
    """Tests for `topicmap config`."""

    def test_path(self, workspace, capsys):
        code, out, _ = run(capsys, "config", "path")

        assert code == 0
        assert out.strip().endswith(".topicmap.toml")

    def test_show_json(self, workspace, capsys):
        code, out, _ = run(capsys, "config", "show", "-j")

        assert code == 0
        assert json.loads(out)["storage"]["path"] == "topic.json"

    def test_show_toml(self, workspace, capsys):
        _, out, _ = run(capsys, "config", "show")

        assert "[layout]" in out

    def test_without_action(self, capsys):
        code, _, err = run(capsys, "config")

        assert code == 1
        assert "Usage" in err
