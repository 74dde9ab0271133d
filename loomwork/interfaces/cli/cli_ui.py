"""
Rich UI components for the CLI - consistent output across all commands.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from loomwork.helpers.dto.plan_dto import WeavingPlan
    from loomwork.helpers.dto.weave_dto import WeaveResult

console = Console()

# Color scheme constants
COLOR_SUCCESS = "green"
COLOR_ERROR = "red"
COLOR_WARNING = "yellow"
COLOR_INFO = "cyan"


class InfoPanel:
    """
    Simple panel for displaying status/info.
    """

    @staticmethod
    def show(title: str, content: str, border_style: str = COLOR_INFO):
        """Show a single info panel."""
        panel = Panel(content, title=f"[bold]{title}[/bold]", border_style=border_style, box=box.ROUNDED)
        console.print(panel)


class TableDisplay:
    """
    Formatted tables for plans and weave errors.
    """

    @staticmethod
    def show_plan(plan: WeavingPlan, title: str = "Generation Tasks"):
        """Display the tasks of a plan."""
        table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold")
        table.add_column("Export", style=COLOR_INFO)
        table.add_column("Outer")
        table.add_column("Inner")
        table.add_column("Source", width=8)

        for task in plan.tasks:
            source = "tie-up" if task.generator is not None else "matrix"
            table.add_row(task.export_name, task.outer_type, task.inner_type, source)

        console.print(table)

    @staticmethod
    def show_errors(result: WeaveResult, title: str = "Errors"):
        """Display recorded task errors."""
        table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold")
        table.add_column("Task", style=COLOR_INFO, overflow="fold")
        table.add_column("Phase", width=10)
        table.add_column("Type", width=24)
        table.add_column("Message", overflow="fold")

        for error in result.errors:
            table.add_row(error.task, error.phase, f"[{COLOR_ERROR}]{error.error_type}[/{COLOR_ERROR}]", error.message)

        console.print(table)


def print_success(message: str):
    """Print a success message."""
    console.print(f"[bold {COLOR_SUCCESS}]✓[/bold {COLOR_SUCCESS}] {message}")


def print_error(message: str):
    """Print an error message."""
    console.print(f"[bold {COLOR_ERROR}]✗[/bold {COLOR_ERROR}] {message}")


def print_warning(message: str):
    """Print a warning message."""
    console.print(f"[bold {COLOR_WARNING}]⚠[/bold {COLOR_WARNING}] {message}")


def print_info(message: str):
    """Print an info message."""
    console.print(f"[{COLOR_INFO}]ℹ[/{COLOR_INFO}] {message}")
