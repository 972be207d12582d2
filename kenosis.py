#!/usr/bin/env python3
"""
Kenosis, from Ancient Greek κένωσις (emptying)

A build artifact cleanup tool that scans the current directory for
regenerable build output (node_modules, Cargo target directories), shows how
much space each one takes, and deletes the ones you select.

Usage:
    kenosis            # Scan the current directory and pick what to delete
    kenosis -v         # Also log scan and delete summaries
    kenosis -X         # Debug logging, tracebacks for unexpected errors
"""

import argparse
import logging
import os
import sys
import time
from typing import Optional

from rich.logging import RichHandler

from auxiliary import format_bytes, format_path_for_display
from build_scanner import BuildDirectoryScanner
from console_ui import ConsoleUI
from file_operations import DeletionResult, FileOperations
from project_types import ProjectMatch
from shutdown import OperationCancelled, TerminalSession

__version__ = "0.1.0"

logger = logging.getLogger("kenosis")

SCAN_TEXT = "Searching for build artifact directories..."
DELETE_TEXT = "Deleting selected build artifacts..."


def setup_logging(verbose: bool = False, debug: bool = False, console=None) -> None:
    """Route log records through Rich so they print above a running spinner

    Args:
        verbose: Whether to enable verbose logging (INFO level)
        debug: Whether to enable debug logging (DEBUG level)
        console: Console shared with the UI
    """
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    handler = RichHandler(console=console, show_path=debug, markup=False, rich_tracebacks=debug)
    logging.basicConfig(level=log_level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True)


# ---------------------------------------------------------------------------
# Kenosis
# ---------------------------------------------------------------------------


class Kenosis:
    """Main application class for the Kenosis build artifact cleaner."""

    def __init__(self, args: argparse.Namespace, ui: Optional[ConsoleUI] = None, root: Optional[str] = None):
        self.args = args
        self.ui = ui or ConsoleUI()
        self.root = root or os.getcwd()

    # -- scanning ------------------------------------------------------------

    def scan(self, session: TerminalSession) -> list[ProjectMatch]:
        start = time.monotonic()

        with session.progress(SCAN_TEXT) as spinner:

            def on_progress(dirs_scanned: int, found: int):
                spinner.update(f"{SCAN_TEXT} {dirs_scanned:,} dirs, {found} found")

            scanner = BuildDirectoryScanner(shutdown_requested=session.token, progress_callback=on_progress)
            matches = scanner.scan(self.root)

        logger.info("Scan completed in %.1fs", time.monotonic() - start)
        return matches

    def report(self, matches: list[ProjectMatch]):
        total = sum(m.size_bytes for m in matches)
        self.ui.print_info(f"\nFound {len(matches)} build artifact directories, {format_bytes(total)} reclaimable\n")

    # -- selection -----------------------------------------------------------

    def select(self, session: TerminalSession, matches: list[ProjectMatch]) -> list[ProjectMatch]:
        with session.prompting():
            return self.ui.select_matches(matches)

    def confirm(self, session: TerminalSession, selected: list[ProjectMatch]) -> bool:
        size = format_bytes(sum(m.size_bytes for m in selected))
        with session.prompting():
            return self.ui.confirm(
                f"[red]Are you sure you want to delete the {len(selected)} selected "
                f"build artifact directories ({size})?[/red]",
                default=False,
            )

    # -- deletion ------------------------------------------------------------

    def delete(
        self, session: TerminalSession, selected: list[ProjectMatch]
    ) -> tuple[list[DeletionResult], list[DeletionResult]]:
        with session.progress(DELETE_TEXT) as spinner:

            def on_progress(completed: int, total: int):
                spinner.update(f"{DELETE_TEXT} {completed}/{total}")

            operations = FileOperations(shutdown_requested=session.token, progress_callback=on_progress)
            successful, failed = operations.execute_batch_deletions(selected)

            if failed:
                spinner.fail(f"Error deleting {len(failed)} of {len(selected)} build artifact directories.")
            else:
                spinner.succeed("Successfully deleted selected build artifact directories.")

        self.ui.show_deletion_summary(successful, failed)
        return successful, failed

    # -- main entry point ----------------------------------------------------

    def run(self) -> int:
        with TerminalSession(self.ui) as session:
            try:
                return self._run(session)
            except (OperationCancelled, KeyboardInterrupt, EOFError):
                session.close()
                self.ui.print_warning("\nOperation cancelled.")
                return 0

    def _run(self, session: TerminalSession) -> int:
        self.ui.print_header("🧹 Kenosis", f"Build artifact cleaner for {format_path_for_display(self.root)}")

        matches = self.scan(session)
        if not matches:
            self.ui.print_warning("\nNo build artifact directories found.")
            return 0

        self.report(matches)

        selected = self.select(session, matches)
        if not selected:
            self.ui.print_warning("\nNo projects selected.")
            return 0

        if not self.confirm(session, selected):
            self.ui.print_warning("\nOperation cancelled.")
            return 0

        self.delete(session, selected)
        return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kenosis",
        description="Kenosis: find and delete build artifact directories below the current directory",
    )
    parser.add_argument("--version", action="version", version=f"Kenosis {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging (INFO level)")
    parser.add_argument("-X", "--debug", action="store_true", help="Enable debug logging (DEBUG level)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    ui = ConsoleUI()
    setup_logging(args.verbose, args.debug, ui.console)

    app = Kenosis(args, ui)
    try:
        return app.run()
    except KeyboardInterrupt:
        ui.show_cursor()
        return 0
    except Exception as e:
        ui.show_cursor()
        ui.print_error(f"\nAn unexpected error occurred: {e}")
        logger.debug("Exception details:", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
