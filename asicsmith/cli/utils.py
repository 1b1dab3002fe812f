# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""CLI output helpers.

Status goes to stdout through ``console``; diagnostics go to stderr through
``err_console``.
"""

from rich.console import Console

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def show_summary(rows: list[tuple[str, object]]) -> None:
    """Print 'label: value' lines with aligned values."""
    width = max((len(label) for label, _ in rows), default=0)
    for label, value in rows:
        console.print(f"[cyan]{label + ':':<{width + 1}}[/cyan] {value}", highlight=False)
