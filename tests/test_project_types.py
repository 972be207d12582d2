"""Tests for the project type registry and ProjectMatch."""

import os
import pathlib

import pytest

from project_types import (
    ARTIFACT_BINDINGS,
    ProjectMatch,
    ProjectType,
    match_binding,
    primary_binding,
)
from tests.conftest import write_file


def test_bindings_check_node_modules_first():
    """node_modules is checked before the Rust binding."""
    assert [b.project_type for b in ARTIFACT_BINDINGS] == [ProjectType.NODE_MODULES, ProjectType.RUST_TARGET]


def test_primary_binding_prefers_registry_order(tmp_path):
    """A project with both artifact directories belongs to the first binding."""
    (tmp_path / "target").mkdir()
    assert primary_binding(str(tmp_path)) is None

    write_file(tmp_path / "Cargo.toml")
    assert primary_binding(str(tmp_path)).project_type is ProjectType.RUST_TARGET

    (tmp_path / "node_modules").mkdir()
    assert primary_binding(str(tmp_path)).project_type is ProjectType.NODE_MODULES


def test_project_type_properties():
    """Each type exposes its artifact directory and display tag."""
    assert ProjectType.NODE_MODULES.artifact_dir == "node_modules"
    assert ProjectType.RUST_TARGET.artifact_dir == "target"
    assert ProjectType.NODE_MODULES.tag == "node"
    assert ProjectType.RUST_TARGET.tag == "rust"


def test_node_modules_confirmed_by_name(tmp_path):
    """node_modules needs no project marker."""
    binding = match_binding("node_modules", str(tmp_path))
    assert binding is not None
    assert binding.project_type is ProjectType.NODE_MODULES


def test_rust_target_requires_cargo_toml(tmp_path):
    """target only matches next to a Cargo.toml file."""
    assert match_binding("target", str(tmp_path)) is None

    write_file(tmp_path / "Cargo.toml")
    binding = match_binding("target", str(tmp_path))
    assert binding is not None
    assert binding.project_type is ProjectType.RUST_TARGET


def test_cargo_toml_directory_does_not_confirm(tmp_path):
    """A directory named Cargo.toml is not a project marker."""
    (tmp_path / "Cargo.toml").mkdir()
    assert match_binding("target", str(tmp_path)) is None


def test_unknown_name_has_no_binding(tmp_path):
    assert match_binding("build", str(tmp_path)) is None


def test_project_match_paths(monkeypatch):
    """artifact_path joins the type's directory; display_path abbreviates home."""
    monkeypatch.setattr(pathlib.Path, "home", lambda: pathlib.Path("/home/ann"))
    match = ProjectMatch(project_path="/home/ann/src/app", size_bytes=42, project_type=ProjectType.RUST_TARGET)

    assert match.artifact_path == os.path.join("/home/ann/src/app", "target")
    if os.sep == "/":
        assert match.display_path == "~/src/app"


def test_project_match_is_immutable():
    match = ProjectMatch(project_path="/p", size_bytes=1, project_type=ProjectType.NODE_MODULES)
    with pytest.raises(AttributeError):
        match.size_bytes = 2
