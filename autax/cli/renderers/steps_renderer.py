"""Rich renderer for calculation results.

Every SDK result carries a list of CalculationStep entries; these helpers
turn the step trail, key figures and warnings into Rich tables and panels.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from autax.sdk.schemas import CalculationStep


def format_money(value: float) -> str:
    if value < 0:
        return f"-${-value:,.2f}"
    return f"${value:,.2f}"


def render_notes(console: Console, warnings: list[str], title: str = "Note", style: str = "yellow") -> None:
    """Render each warning in its own panel."""
    for warning in warnings:
        console.print(Panel(
            f"[{style}]{warning}[/{style}]",
            title=title,
            border_style=style,
        ))


def render_steps(console: Console, title: str, steps: list[CalculationStep]) -> None:
    """Render a step trail as a table.

    Args:
        console: Rich Console instance
        title: Table title
        steps: CalculationStep entries in calculation order
    """
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("", width=1, style="dim")
    table.add_column("Step")
    table.add_column("Amount", justify="right")
    table.add_column("Detail", style="dim")

    for step in steps:
        amount = format_money(step.value)
        if step.operation == "=":
            amount = f"[bold]{amount}[/bold]"
        table.add_row(step.operation or "", step.label, amount, step.explanation or "")

    console.print(table)


def render_figures(console: Console, title: str, rows: list[tuple[str, str]]) -> None:
    """Render label/value pairs in a bordered panel."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("label", style="dim")
    table.add_column("value", justify="right")
    for label, value in rows:
        table.add_row(label, value)
    console.print(Panel(table, title=title, border_style="cyan"))
