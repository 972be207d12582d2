#!/usr/bin/env python3
"""
Console UI Module using Rich

Styled output, the match table, the multi-select and confirmation prompts,
and a start/stop/succeed/fail spinner for the Kenosis workflow.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn
from rich.prompt import Confirm, Prompt
from rich.table import Table

from auxiliary import format_bytes
from project_types import ProjectMatch


def _parse_number(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"'{text}' is not a number") from None


def parse_selection(response: str, count: int) -> list[int]:
    """Parse a selection answer into sorted, zero-based indices

    Args:
        response: User input such as "1,3,5", "2-4", "all" or ""
        count: Number of selectable items

    Returns:
        Sorted list of unique indices; empty for an empty answer

    Raises:
        ValueError: If a part is not a number or range, or is out of range
    """
    text = response.strip().lower()
    if not text:
        return []
    if text == "all":
        return list(range(count))

    chosen: set[int] = set()
    for part in text.replace(" ", ",").split(","):
        if not part:
            continue
        if "-" in part:
            start_str, _, end_str = part.partition("-")
            if not start_str or not end_str:
                raise ValueError(f"'{part}' is an incomplete range, use e.g. 2-4")
            start, end = _parse_number(start_str), _parse_number(end_str)
            if start > end:
                start, end = end, start
            numbers = range(start, end + 1)
        else:
            number = _parse_number(part)
            numbers = range(number, number + 1)

        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"{number} is out of range (1-{count})")
            chosen.add(number - 1)

    return sorted(chosen)


class ProgressIndicator:
    """Activity spinner with start/update/stop/succeed/fail"""

    def __init__(self, console: Console, text: str):
        self.console = console
        self.text = text
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    @property
    def active(self) -> bool:
        return self._progress is not None

    def start(self, text: Optional[str] = None) -> "ProgressIndicator":
        if text:
            self.text = text
        if self._progress is not None:
            return self

        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        self._progress.start()
        self._task = self._progress.add_task(self.text, total=None)
        return self

    def update(self, text: str):
        self.text = text
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, description=text)

    def stop(self):
        if self._progress is None:
            return
        progress, self._progress, self._task = self._progress, None, None
        progress.stop()

    def succeed(self, text: Optional[str] = None):
        self.stop()
        self.console.print(f"[green]✔[/green] {text or self.text}")

    def fail(self, text: Optional[str] = None):
        self.stop()
        self.console.print(f"[red]✖ {text or self.text}[/red]")


class ConsoleUI:
    """Console UI handler using Rich for the Kenosis CLI"""

    def __init__(self, console: Optional[Console] = None):
        """Initialize with an existing console or a fresh one"""
        self.console = console or Console(highlight=False)

    # Basic styled output methods
    def print_success(self, message: str):
        """Print success message in green"""
        self.console.print(message, style="green")

    def print_error(self, message: str):
        """Print error message in red"""
        self.console.print(message, style="red bold")

    def print_warning(self, message: str):
        """Print warning message in yellow"""
        self.console.print(message, style="yellow")

    def print_info(self, message: str):
        """Print info message in cyan"""
        self.console.print(message, style="cyan")

    def print_header(self, title: str, subtitle: Optional[str] = None):
        """Print a header with optional subtitle"""
        if subtitle:
            header_text = f"[bold blue]{title}[/bold blue]\n[dim]{subtitle}[/dim]"
        else:
            header_text = f"[bold blue]{title}[/bold blue]"

        self.console.print(Panel(header_text, box=box.ROUNDED, padding=(0, 1), expand=False))

    def show_cursor(self):
        """Make sure the terminal cursor is visible"""
        self.console.show_cursor(True)

    def create_indicator(self, text: str) -> ProgressIndicator:
        """Create a (not yet started) spinner bound to this console"""
        return ProgressIndicator(self.console, text)

    # Match display
    def show_matches(self, matches: list[ProjectMatch], title: str = "Build Artifacts"):
        """Show discovered matches as a numbered table with a total row"""
        table = Table(title=title, box=box.ROUNDED, show_footer=True)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Project", style="green", footer="Total", min_width=30)
        table.add_column(
            "Size", justify="right", style="yellow", footer=format_bytes(sum(m.size_bytes for m in matches))
        )
        table.add_column("Type", justify="center", style="cyan")

        for i, match in enumerate(matches, 1):
            table.add_row(str(i), escape(match.display_path), format_bytes(match.size_bytes), match.project_type.tag)

        self.console.print(table)

    def show_deletion_summary(self, successful: list, failed: list):
        """Show what was removed and every deletion that failed"""
        if successful:
            reclaimed = sum(r.match.size_bytes for r in successful)
            self.print_success(f"Deleted {len(successful)} directories, reclaimed {format_bytes(reclaimed)}")

        if failed:
            self.print_error(f"Failed to delete {len(failed)} directories:")
            for result in failed:
                self.console.print(
                    f"[red dim]  • {escape(result.match.display_path)}: {escape(result.error_message or '')}[/red dim]"
                )

    # Interactive prompts
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask for yes/no confirmation"""
        return Confirm.ask(question, default=default, console=self.console)

    def prompt(self, question: str, default: Optional[str] = None, choices: Optional[list[str]] = None) -> str:
        """Ask for text input with optional default and choices"""
        return Prompt.ask(
            question, default=default, choices=choices, show_default=bool(default), console=self.console
        )

    def select_matches(self, matches: list[ProjectMatch], title: str = "Select projects to clean") -> list[ProjectMatch]:
        """Let the user pick any subset of matches; an empty answer selects nothing"""
        if not matches:
            return []

        self.show_matches(matches)
        self.console.print(f"\n[cyan]{title}:[/cyan]")

        while True:
            response = self.prompt("Numbers (e.g. 1,3,5 or 2-4), 'all', or Enter for none", default="")
            try:
                indices = parse_selection(response, len(matches))
            except ValueError as e:
                self.print_error(f"Invalid selection: {e}. Please try again.")
                continue
            return [matches[i] for i in indices]
