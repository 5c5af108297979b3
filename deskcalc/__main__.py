"""CLI for the deskcalc desk calculator.

Usage:
    python -m deskcalc eval "2+3*4"              # Evaluate one expression
    python -m deskcalc keys 2 + 3 =              # Feed keys, show final state
    python -m deskcalc keys 9 sqrt MS C MR --json
    python -m deskcalc repl                      # Interactive session
"""

from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.markup import escape

from deskcalc.config import configure_logging, load_settings
from deskcalc.engine import evaluate
from deskcalc.errors import CalculatorError, UnknownKey
from deskcalc.keymap import dispatch, expand_keys
from deskcalc.machine import Calculator
from deskcalc.models import format_number
from deskcalc.render import render_state

app = typer.Typer(
    name="deskcalc",
    help="Desk calculator with a safe expression engine",
    no_args_is_help=True,
)
console = Console(stderr=True)
out = Console(highlight=False)

_QUIT_WORDS = ("quit", "exit", "q")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every transition"),
) -> None:
    """Desk calculator with a safe expression engine."""
    settings = load_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@app.command("eval")
def cmd_eval(
    expression: str = typer.Argument(help="Expression, e.g. '(2+3)*4'. Use -- before a leading '-'"),
) -> None:
    """Evaluate one expression and print the result."""
    try:
        value = evaluate(expression)
    except CalculatorError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    out.print(format_number(value))


@app.command("keys")
def cmd_keys(
    keys: list[str] = typer.Argument(help="Keys to press, e.g. 2 + 3 = or '12*(3+4)='"),
    show_history: bool = typer.Option(False, "--history", "-H", help="Show the history table"),
    as_json: bool = typer.Option(False, "--json", help="Print the final state as JSON"),
) -> None:
    """Press a sequence of keys on a fresh calculator and show the final state."""
    calc = Calculator(history_limit=load_settings().history_limit)
    for key in expand_keys(" ".join(keys)):
        try:
            dispatch(calc, key)
        except UnknownKey as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(calc.state.to_dict(), indent=2))
    else:
        render_state(calc.state, out, show_history=show_history)


@app.command("repl")
def cmd_repl() -> None:
    """Interactive session. Type keys per line; 'history' toggles the log, 'quit' exits."""
    calc = Calculator(history_limit=load_settings().history_limit)
    show_history = False
    render_state(calc.state, out)

    while True:
        try:
            line = console.input("[bold]>[/bold] ")
        except (EOFError, KeyboardInterrupt):
            break
        word = line.strip().lower()
        if word in _QUIT_WORDS:
            break
        if word == "history":
            show_history = not show_history
            render_state(calc.state, out, show_history=show_history)
            continue

        for key in expand_keys(line):
            try:
                dispatch(calc, key)
            except UnknownKey as e:
                console.print(f"  [yellow]Skipped:[/yellow] {escape(str(e))}")
        render_state(calc.state, out, show_history=show_history)


if __name__ == "__main__":
    app()
