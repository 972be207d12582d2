#!/usr/bin/env python3
"""
Project type registry for Kenosis

Each project type binds the name of the build-artifact directory it produces
and, optionally, a marker file that must sit next to that directory before
it is trusted. The scanner walks ARTIFACT_BINDINGS in order.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from auxiliary import format_path_for_display

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


class ProjectType(Enum):
    NODE_MODULES = "node_modules"
    RUST_TARGET = "rust_target"

    @property
    def binding(self) -> "ArtifactBinding":
        return BINDINGS_BY_TYPE[self]

    @property
    def artifact_dir(self) -> str:
        return self.binding.artifact_dir

    @property
    def tag(self) -> str:
        return self.binding.tag


@dataclass(frozen=True)
class ArtifactBinding:
    """Artifact directory name and confirmation rule for one project type"""

    project_type: ProjectType
    artifact_dir: str
    tag: str
    marker_file: Optional[str] = None

    def confirms(self, parent: str) -> bool:
        """Return True if *parent* satisfies this binding's project marker.

        Bindings without a marker file are confirmed by name alone.
        """
        if self.marker_file is None:
            return True
        return os.path.isfile(os.path.join(parent, self.marker_file))


@dataclass(frozen=True)
class ProjectMatch:
    """One discovered build-artifact directory, keyed by its project root"""

    project_path: str
    size_bytes: int
    project_type: ProjectType

    @property
    def artifact_path(self) -> str:
        return os.path.join(self.project_path, self.project_type.artifact_dir)

    @property
    def display_path(self) -> str:
        return format_path_for_display(self.project_path)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

# Checked in this order; node_modules first, then Rust.
ARTIFACT_BINDINGS: tuple[ArtifactBinding, ...] = (
    ArtifactBinding(
        project_type=ProjectType.NODE_MODULES,
        artifact_dir="node_modules",
        tag="node",
    ),
    ArtifactBinding(
        project_type=ProjectType.RUST_TARGET,
        artifact_dir="target",
        tag="rust",
        marker_file="Cargo.toml",
    ),
)

BINDINGS_BY_TYPE: dict[ProjectType, ArtifactBinding] = {b.project_type: b for b in ARTIFACT_BINDINGS}


def match_binding(
    name: str, parent: str, bindings: tuple[ArtifactBinding, ...] = ARTIFACT_BINDINGS
) -> Optional[ArtifactBinding]:
    """Return the first binding whose artifact name is *name* and whose marker holds in *parent*."""
    for binding in bindings:
        if binding.artifact_dir == name and binding.confirms(parent):
            return binding
    return None


def primary_binding(parent: str, bindings: tuple[ArtifactBinding, ...] = ARTIFACT_BINDINGS) -> Optional[ArtifactBinding]:
    """Return the first binding whose artifact directory exists and is confirmed in *parent*.

    A project holding several artifact directories is reported once, under
    this binding.
    """
    for binding in bindings:
        candidate = os.path.join(parent, binding.artifact_dir)
        if os.path.isdir(candidate) and not os.path.islink(candidate) and binding.confirms(parent):
            return binding
    return None
