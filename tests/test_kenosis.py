"""Tests for the Kenosis workflow and entry point."""

import argparse
from unittest.mock import MagicMock

import pytest

import kenosis
from kenosis import Kenosis, build_parser, main
from tests.conftest import ui_output, write_file


@pytest.fixture
def workspace(tmp_path):
    write_file(tmp_path / "web" / "package.json", 2)
    write_file(tmp_path / "web" / "node_modules" / "react" / "index.js", 10)
    write_file(tmp_path / "cli" / "Cargo.toml", 3)
    write_file(tmp_path / "cli" / "target" / "release" / "cli", 20)
    return tmp_path


def _app(ui, root):
    return Kenosis(argparse.Namespace(verbose=False, debug=False), ui=ui, root=str(root))


def test_run_with_nothing_found(tmp_path, quiet_ui):
    assert _app(quiet_ui, tmp_path).run() == 0
    assert "No build artifact directories found." in ui_output(quiet_ui)


def test_run_with_nothing_selected(workspace, quiet_ui):
    quiet_ui.select_matches = MagicMock(return_value=[])

    assert _app(quiet_ui, workspace).run() == 0

    assert "No projects selected." in ui_output(quiet_ui)
    assert (workspace / "web" / "node_modules").exists()


def test_run_declined_confirmation_keeps_everything(workspace, quiet_ui):
    quiet_ui.select_matches = MagicMock(side_effect=lambda matches: matches)
    quiet_ui.confirm = MagicMock(return_value=False)

    assert _app(quiet_ui, workspace).run() == 0

    assert "Operation cancelled." in ui_output(quiet_ui)
    assert (workspace / "web" / "node_modules").exists()
    assert (workspace / "cli" / "target").exists()


def test_run_deletes_confirmed_selection(workspace, quiet_ui):
    """Both artifact directories are found, selected and removed."""
    quiet_ui.select_matches = MagicMock(side_effect=lambda matches: matches)
    quiet_ui.confirm = MagicMock(return_value=True)

    assert _app(quiet_ui, workspace).run() == 0

    matches = quiet_ui.select_matches.call_args.args[0]
    assert [(m.project_path, m.size_bytes) for m in matches] == [
        (str(workspace / "cli"), 20),
        (str(workspace / "web"), 10),
    ]
    assert quiet_ui.confirm.call_args.kwargs["default"] is False
    assert not (workspace / "web" / "node_modules").exists()
    assert not (workspace / "cli" / "target").exists()
    assert (workspace / "cli" / "Cargo.toml").exists()
    assert "Successfully deleted" in ui_output(quiet_ui)


def test_run_reports_failed_deletions(workspace, quiet_ui, monkeypatch):
    quiet_ui.select_matches = MagicMock(side_effect=lambda matches: matches)
    quiet_ui.confirm = MagicMock(return_value=True)

    def refuse(project_path, project_type):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr("file_operations.delete_artifact", refuse)

    assert _app(quiet_ui, workspace).run() == 0
    assert "Failed to delete 2 directories" in ui_output(quiet_ui)


def test_interrupted_prompt_is_a_cancellation(workspace, quiet_ui):
    quiet_ui.select_matches = MagicMock(side_effect=KeyboardInterrupt)

    assert _app(quiet_ui, workspace).run() == 0
    assert "Operation cancelled." in ui_output(quiet_ui)


def test_closed_input_is_a_cancellation(workspace, quiet_ui):
    quiet_ui.select_matches = MagicMock(side_effect=lambda matches: matches)
    quiet_ui.confirm = MagicMock(side_effect=EOFError)

    assert _app(quiet_ui, workspace).run() == 0
    assert (workspace / "web" / "node_modules").exists()


def test_main_reports_unexpected_errors(monkeypatch, capsys):
    """Unhandled errors are shown and turn into exit code 1."""
    monkeypatch.setattr(kenosis, "setup_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(Kenosis, "run", MagicMock(side_effect=RuntimeError("boom")))

    assert main([]) == 1
    assert "boom" in capsys.readouterr().out


def test_parser_takes_no_positional_arguments():
    parser = build_parser()
    args = parser.parse_args([])
    assert args.verbose is False and args.debug is False

    with pytest.raises(SystemExit):
        parser.parse_args(["some/path"])


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["--version"])
    assert excinfo.value.code == 0
    assert kenosis.__version__ in capsys.readouterr().out
