#!/usr/bin/env python3
"""
Build Directory Scanner for Kenosis

Walks a directory tree looking for build-artifact directories (node_modules,
Cargo target, ...). A matched artifact directory is sized and treated as a
leaf; hidden directories and unconfirmed artifact-named directories are not
entered. Unreadable directories are logged and skipped.

Symlinks to directories are never followed, neither while walking nor while
sizing, so symlink cycles cannot keep the walk from terminating.
"""

import logging
import os
from typing import Callable, Iterator, Optional

from project_types import ARTIFACT_BINDINGS, ArtifactBinding, ProjectMatch, match_binding, primary_binding
from shutdown import OperationCancelled

logger = logging.getLogger("kenosis.build_scanner")

HIDDEN_PREFIX = "."

# Directories between two progress callbacks
PROGRESS_INTERVAL = 200


def _is_directory(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def compute_size(path: str, shutdown_requested: Optional[Callable[[], bool]] = None) -> int:
    """Return the recursive byte size of everything below *path*.

    Directories add nothing themselves; every other entry adds its lstat
    size. A directory that cannot be listed keeps whatever was summed from
    it before the error, and an entry that cannot be stat'ed adds zero.

    Args:
        path: Directory to measure
        shutdown_requested: Optional callable polled once per directory

    Returns:
        Size in bytes

    Raises:
        OperationCancelled: If shutdown_requested() turns true
    """
    total = 0
    pending = [path]

    while pending:
        if shutdown_requested and shutdown_requested():
            raise OperationCancelled()

        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    if _is_directory(entry):
                        pending.append(entry.path)
                        continue
                    try:
                        total += entry.stat(follow_symlinks=False).st_size
                    except OSError as e:
                        logger.warning("Cannot read size of %s: %s", entry.path, e)
        except OSError as e:
            logger.warning("Error reading directory %s: %s", current, e)

    return total


class BuildDirectoryScanner:
    """Pruned depth-first search for build-artifact directories"""

    def __init__(
        self,
        bindings: tuple[ArtifactBinding, ...] = ARTIFACT_BINDINGS,
        shutdown_requested: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ):
        """Initialize scanner

        Args:
            bindings: Project type bindings, checked in order
            shutdown_requested: Callable that returns True once the scan should stop
            progress_callback: Called with (directories_scanned, matches_found)
        """
        self.bindings = tuple(bindings)
        self.artifact_names = frozenset(b.artifact_dir for b in self.bindings)
        self.shutdown_requested = shutdown_requested
        self.progress_callback = progress_callback
        self.directories_scanned = 0
        self._recorded_parents: set[str] = set()

    def scan(self, root: str) -> list[ProjectMatch]:
        """Find every confirmed artifact directory below *root*

        Results are in traversal order: children are visited by name, and a
        directory's subtree is finished before its next sibling is looked at.

        Raises:
            OperationCancelled: If shutdown_requested() turns true
        """
        root = os.path.abspath(root)
        results: list[ProjectMatch] = []
        self.directories_scanned = 0
        self._recorded_parents = set()

        # One iterator per open directory; equivalent to recursion without the depth limit
        stack: list[Iterator[os.DirEntry]] = [self._list_children(root, results)]
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue
            if not _is_directory(entry):
                continue

            if self._record_if_artifact(entry, results):
                continue

            if self._should_descend(entry.name):
                stack.append(self._list_children(entry.path, results))
            else:
                logger.debug("Skipping %s", entry.path)

        logger.info("Scanned %d directories under %s, found %d matches", self.directories_scanned, root, len(results))
        return results

    def _list_children(self, path: str, results: list[ProjectMatch]) -> Iterator[os.DirEntry]:
        if self.shutdown_requested and self.shutdown_requested():
            raise OperationCancelled()

        self.directories_scanned += 1
        if self.progress_callback and self.directories_scanned % PROGRESS_INTERVAL == 0:
            self.progress_callback(self.directories_scanned, len(results))

        try:
            with os.scandir(path) as entries:
                children = sorted(entries, key=lambda e: e.name)
        except OSError as e:
            logger.warning("Error searching in %s: %s", path, e)
            return iter(())
        return iter(children)

    def _record_if_artifact(self, entry: os.DirEntry, results: list[ProjectMatch]) -> bool:
        if entry.name not in self.artifact_names:
            return False

        parent = os.path.dirname(entry.path)
        binding = match_binding(entry.name, parent, self.bindings)
        if binding is None:
            logger.debug("Unconfirmed %s in %s, not descending", entry.name, parent)
            return False

        # One match per project; the earliest binding in registry order wins
        if parent in self._recorded_parents or primary_binding(parent, self.bindings) is not binding:
            logger.debug("Skipping %s, %s is reported under another artifact directory", entry.path, parent)
            return True

        size = compute_size(entry.path, self.shutdown_requested)
        self._recorded_parents.add(parent)
        results.append(ProjectMatch(project_path=parent, size_bytes=size, project_type=binding.project_type))
        logger.debug("Found %s in %s (%d bytes)", entry.name, parent, size)

        if self.progress_callback:
            self.progress_callback(self.directories_scanned, len(results))
        return True

    def _should_descend(self, name: str) -> bool:
        # Unconfirmed artifact names (e.g. a target/ without Cargo.toml) are not entered either
        return not name.startswith(HIDDEN_PREFIX) and name not in self.artifact_names


def scan(
    root: str,
    shutdown_requested: Optional[Callable[[], bool]] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> list[ProjectMatch]:
    """Scan *root* with the default project type registry"""
    scanner = BuildDirectoryScanner(shutdown_requested=shutdown_requested, progress_callback=progress_callback)
    return scanner.scan(root)
