#!/usr/bin/env python3
"""
Artifact Deletion Module

Removes build-artifact directories. A batch of deletions runs on a thread
pool; the matches never nest, so the removals touch disjoint subtrees and
need no ordering between them. Failures are collected, never rolled back.
"""

import logging
import os
import shutil
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Optional

from project_types import ProjectMatch, ProjectType
from shutdown import OperationCancelled

logger = logging.getLogger("kenosis.file_operations")

DEFAULT_DELETE_WORKERS = 8

# Seconds between cancellation checks while waiting on the pool
WAIT_INTERVAL = 0.1


@dataclass
class DeletionResult:
    """Result of deleting one match's artifact directory"""

    match: ProjectMatch
    success: bool
    error_message: Optional[str] = None


def delete_artifact(project_path: str, project_type: ProjectType) -> bool:
    """Recursively remove the artifact directory of *project_type* under *project_path*

    A directory that is already gone counts as removed, so calling this twice
    is harmless.

    Returns:
        True once the directory no longer exists

    Raises:
        OSError: If the directory could not be removed
    """
    artifact_path = os.path.join(project_path, project_type.artifact_dir)
    try:
        shutil.rmtree(artifact_path)
    except FileNotFoundError:
        # Vanished before or during removal
        if os.path.lexists(artifact_path):
            raise
    return True


class FileOperations:
    """Parallel deletion of selected matches"""

    def __init__(
        self,
        max_workers: int = DEFAULT_DELETE_WORKERS,
        shutdown_requested: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ):
        """Initialize with optional cancellation check and progress callback

        Args:
            max_workers: Upper bound on concurrent deletions
            shutdown_requested: Callable that returns True once deletion should stop
            progress_callback: Called with (completed, total) after each deletion
        """
        self.max_workers = max_workers
        self.shutdown_requested = shutdown_requested
        self.progress_callback = progress_callback

    def execute_deletion(self, match: ProjectMatch) -> DeletionResult:
        """Delete one match, turning filesystem errors into a failed result"""
        try:
            delete_artifact(match.project_path, match.project_type)
        except OSError as e:
            logger.error("Failed to delete %s: %s", match.artifact_path, e)
            return DeletionResult(match=match, success=False, error_message=str(e))

        logger.info("Deleted %s", match.artifact_path)
        return DeletionResult(match=match, success=True)

    def execute_batch_deletions(
        self, matches: list[ProjectMatch]
    ) -> tuple[list[DeletionResult], list[DeletionResult]]:
        """Delete all matches concurrently and wait for every one of them

        Returns:
            (successful, failed) results, each in the order of *matches*

        Raises:
            OperationCancelled: If shutdown was requested before all finished.
                Queued deletions are dropped and this call returns at once,
                but deletions already running keep going in their worker
                threads. The interpreter joins those threads at exit, so the
                process only ends once they are done.
        """
        if not matches:
            return [], []

        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self.max_workers, len(matches))), thread_name_prefix="kenosis-delete"
        )
        futures: dict[Future, int] = {executor.submit(self.execute_deletion, m): i for i, m in enumerate(matches)}
        results: list[Optional[DeletionResult]] = [None] * len(matches)
        pending = set(futures)
        completed = 0

        try:
            while pending:
                if self.shutdown_requested and self.shutdown_requested():
                    raise OperationCancelled()

                done, pending = wait(pending, timeout=WAIT_INTERVAL, return_when=FIRST_COMPLETED)
                for future in done:
                    results[futures[future]] = future.result()
                    completed += 1
                    if self.progress_callback:
                        self.progress_callback(completed, len(matches))
        finally:
            executor.shutdown(wait=not pending, cancel_futures=True)

        successful = [r for r in results if r is not None and r.success]
        failed = [r for r in results if r is not None and not r.success]
        logger.info("Deleted %d of %d artifact directories", len(successful), len(matches))
        return successful, failed
