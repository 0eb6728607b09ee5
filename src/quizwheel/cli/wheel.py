"""Wheel subcommand: show outcomes."""

from __future__ import annotations

import typer

from quizwheel.wheel.layouts import build_outcomes

app = typer.Typer(help="Wheel layout")


@app.command("show")
def show(ctx: typer.Context) -> None:
    """List outcomes, payout ratios and weights for the configured wheel."""
    settings = ctx.obj["settings"]
    try:
        outcomes = build_outcomes(settings)
    except ValueError as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    typer.echo(f"Wheel: {settings.wheel_type}  Selection: {settings.wheel_selection}")
    for o in outcomes:
        typer.echo(f"  {o.id:>6}  {o.color or '':<8} {o.payout_ratio}:1  weight {o.weight:g}")
    typer.echo(f"Total: {len(outcomes)} outcomes")
