"""Integration tests for the pivotal-story command line."""

import pytest

from pivotal_story.cli import main


@pytest.fixture
def run(tmp_path, capsys):
    root = str(tmp_path / "tracker")

    def _run(*argv):
        code = main(["--tracker-dir", root, "--user", "alice", *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return _run


@pytest.fixture
def seeded(run):
    run("project-create", "acme", "--name", "Web app")
    run("--project", "1", "new", "Add login page")
    run("--project", "1", "new", "Crash on save", "--type", "bug")
    return run


class TestCli:
    def test_project_create_and_list(self, run):
        code, out, _ = run("project-create", "acme")
        assert code == 0
        assert out == "Created project 1 (acme)\n"
        _, out, _ = run("projects")
        assert out == "[1] acme\n"

    def test_new_story(self, seeded):
        code, out, _ = seeded("--project", "1", "new", "Third")
        assert code == 0
        assert out == "Created story 3\n"

    def test_show_by_id(self, seeded):
        code, out, _ = seeded("--project", "1", "show", "2")
        assert code == 0
        assert "Title: Crash on save" in out
        assert "Type: Bug" in out

    def test_select_single_type_auto_selects(self, seeded):
        code, out, _ = seeded("--project", "1", "select", "bug")
        assert code == 0
        assert out == "2\n"

    def test_assign_mark_estimate_comment(self, seeded):
        assert seeded("--project", "1", "assign", "1", "bob")[1] == "Story assigned to bob\n"
        assert seeded("--project", "1", "mark", "1", "started")[1] == "Changed state to started\n"
        code, out, _ = seeded("--project", "1", "estimate", "1", "3")
        assert (code, out) == (0, "")
        seeded("--project", "1", "comment", "1", "Needs design review")
        _, out, _ = seeded("--project", "1", "show", "1")
        assert "State: Started" in out
        assert "Estimate: 3" in out
        assert "Note 1: Needs design review" in out

    def test_rejected_estimate_exits_nonzero(self, seeded):
        code, out, _ = seeded("--project", "1", "estimate", "1", "-4")
        assert code == 1
        assert out == ""

    def test_unknown_story(self, seeded):
        code, _, err = seeded("--project", "1", "show", "42")
        assert code == 1
        assert "Error:" in err
        assert "42" in err

    def test_missing_project(self, run):
        code, _, err = run("show")
        assert code == 1
        assert "No project given" in err

    def test_menu_selection_from_stdin(self, seeded, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "2")
        code, out, _ = seeded("--project", "1", "select")
        assert code == 0
        assert "1. FEATURE Add login page" in out
        assert "2. BUG     Crash on save" in out
        assert out.endswith("\n\n2\n")
