"""
Rendering functions for branchweight output.

This module handles all pretty-printing and table formatting.
Services return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Any, Dict, Optional, Sequence

from .domain import BranchDetail, BranchWeight
from .format_utils import format_size_mb

console = Console()


def render_branch_table(weights: Sequence[BranchWeight], limit: Optional[int] = None) -> None:
    """
    Render branch weights as a table, heaviest first.

    Args:
        weights: Branch weights in report order
        limit: Show at most this many rows
    """
    if not weights:
        console.print("[yellow]No unmerged branches with objects found.[/yellow]")
        return

    table = Table(
        title="Unmerged Branch Weight",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("#", justify="right", style="dim")
    table.add_column("Branch", style="cyan")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Unique", justify="right", style="green")
    table.add_column("Shared", justify="right", style="yellow")
    table.add_column("Objects", justify="right")
    table.add_column("Unique/Shared", justify="right", style="dim")

    shown = weights[:limit] if limit else weights
    for rank, weight in enumerate(shown, 1):
        table.add_row(
            str(rank),
            weight.branch,
            format_size_mb(weight.total_size),
            format_size_mb(weight.unique_size),
            format_size_mb(weight.shared_size),
            str(weight.object_count),
            f"{weight.unique_count}/{weight.shared_count}",
        )

    console.print(table)

    if limit and len(weights) > limit:
        console.print(f"[dim]... and {len(weights) - limit} more branches[/dim]")


def render_summary(summary: Dict[str, Any]) -> None:
    """Print the run summary."""
    console.print("[bold]Summary:[/bold]")
    console.print(f"  Branches: {summary['totalBranches']}")
    console.print(f"  Total unique size: [green]{summary['totalUniqueSizeMB']}[/green]")
    console.print(f"  Total shared size: [yellow]{summary['totalSharedSizeMB']}[/yellow]")


def render_detail_table(detail: BranchDetail, limit: int = 10) -> None:
    """Render the heaviest commits of one branch."""
    table = Table(
        title=f"{detail.branch} ({format_size_mb(detail.total_size)} across {len(detail.commits)} commits)",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Commit", style="cyan")
    table.add_column("Size", justify="right")

    for commit in detail.commits[:limit]:
        table.add_row(commit.commit[:12], format_size_mb(commit.size))

    console.print(table)
