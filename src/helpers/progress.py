"""Shared progress bar utilities for Rich console displays."""

from __future__ import annotations

from contextlib import contextmanager

from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from rich.console import Console


def create_standard_progress(
    console: Console | None = None, *, expand: bool = False
) -> Progress:
    """Create a standard progress bar with time remaining estimation.

    Args:
        console: Rich console instance (optional)
        expand: Whether to expand the progress bar to full width

    Returns:
        Configured Progress instance with spinner, description, bar,
        M of N counter, time elapsed and time remaining.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        console=console,
        expand=expand,
    )


@contextmanager
def track_progress(
    description: str,
    total: int,
    console: Console | None = None,
) -> Iterator[Callable[[int], None]]:
    """Context manager yielding an `advance(n)` callback for a new task.

    Example:
        ```python
        from src.helpers.progress import track_progress

        with track_progress("Fetching headers", total=1000) as advance:
            for chunk in chunks(0, 1000, 50):
                ...
                advance(len(chunk))
        ```
    """
    progress = create_standard_progress(console)

    with progress:
        task_id: TaskID = progress.add_task(description, total=total)

        def advance(count: int) -> None:
            progress.update(task_id, advance=count)

        yield advance


__all__ = [
    "create_standard_progress",
    "track_progress",
]
