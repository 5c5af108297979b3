"""Rich rendering of a CalculatorState.

Read-only: the renderer looks at display, expression, memory and history
and never touches the calculator.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from deskcalc.models import CalculatorState, Phase, format_number

_PHASE_STYLES = {
    Phase.ENTRY: "white",
    Phase.AWAITING_OPERAND: "cyan",
    Phase.RESULT: "green",
    Phase.ERROR: "red",
}


def display_panel(state: CalculatorState) -> Panel:
    """Expression line above the big display value, like an LCD."""
    body = Text(justify="right")
    body.append(state.expression or " ", style="dim")
    body.append("\n")
    body.append(state.display, style=f"bold {_PHASE_STYLES[state.phase]}")

    subtitle = None
    if state.memory != 0:
        subtitle = f"[dim]M = {format_number(state.memory)}[/dim]"
    return Panel(body, title="deskcalc", subtitle=subtitle, width=40)


def history_table(state: CalculatorState) -> Table:
    """Newest-first table of past evaluations."""
    table = Table(title="History", show_header=True, header_style="bold", width=40)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Expression", min_width=16)
    table.add_column("Result", style="green", justify="right")
    for i, entry in enumerate(state.history, 1):
        table.add_row(str(i), entry.expression, entry.result)
    return table


def render_state(state: CalculatorState, console: Console, show_history: bool = False) -> None:
    """Print the display panel, and the history table when asked."""
    console.print(display_panel(state))
    if show_history:
        if state.history:
            console.print(history_table(state))
        else:
            console.print("[yellow]No history yet.[/yellow]")
