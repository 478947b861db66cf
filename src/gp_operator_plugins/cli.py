"""Command-line utilities for inspecting and validating custom operators."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from . import get_version
from .context import OperatorContext
from .dsl import (
    DEFAULT_CONFIG_PATH,
    SLOT_NAMES,
    MutationWeights,
    OperatorConfig,
    load_operator_config,
)
from .loader import CALL_CONTRACTS, OperatorLoadError
from .slots import setup_custom_mutations

app = typer.Typer(help="Custom evolutionary operator utilities")
console = Console()

ConfigOption = Annotated[Path, typer.Option(help="Operator weight config (YAML or JSON).")]


def _parse_mutation_arg(raw: str) -> tuple[str, Path, float]:
    """Split ``NAME=PATH[:WEIGHT]``; weight defaults to 1.0."""
    name, sep, rest = raw.partition("=")
    if not sep or not name or not rest:
        raise typer.BadParameter(f"expected NAME=PATH[:WEIGHT], got '{raw}'")
    weight = 1.0
    head, colon, tail = rest.rpartition(":")
    if colon and head:
        try:
            weight = float(tail)
        except ValueError:
            head = rest
        rest = head
    return name, Path(rest), weight


def _load_config(config: Path) -> OperatorConfig:
    try:
        return load_operator_config(config)
    except ValueError as exc:
        console.print(f"[bold red]Failed:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _load_mutations(ctx: OperatorContext, mutation: list[str]) -> None:
    for raw in mutation:
        name, path, weight = _parse_mutation_arg(raw)
        try:
            ctx.mutations.load_from_file(name, path, weight=weight)
        except (OperatorLoadError, FileNotFoundError) as exc:
            console.print(f"[bold red]Failed:[/] {exc}")
            raise typer.Exit(code=1) from exc


@app.command()
def version() -> None:
    """Print the installed package version."""
    typer.echo(get_version())


@app.command("list")
def list_cmd(config: ConfigOption = DEFAULT_CONFIG_PATH) -> None:
    """Show registered operators and their configured weights."""
    cfg = _load_config(config)
    ctx = OperatorContext(config_path=config)
    ctx.reload(cfg)
    weights = ctx.mutations.weights()
    table = Table(title=f"Operators ({config})")
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("Weight")
    table.add_column("Status")
    for name in ctx.mutations.list_available():
        weight = weights.get(name)
        status = "enabled" if weight else "disabled"
        table.add_row("mutation", name, f"{weight:.4g}" if weight else "-", status)
    available = set(ctx.mutations.list_available())
    for name, weight in cfg.custom_mutations.items():
        if weight > 0 and name not in available:
            table.add_row("mutation", name, f"{weight:.4g}", "configured, not loaded")
    table.add_row("selection", "(default) tournament", "-", "active")
    table.add_row("survival", "(default) oldest member", "-", "active")
    console.print(table)


@app.command()
def check(
    source: Annotated[Path, typer.Argument(exists=True, readable=True, dir_okay=False)],
    kind: Annotated[str, typer.Option(help="mutation, selection or survival.")] = "mutation",
    name: Annotated[str | None, typer.Option(help="Function name (defaults to file stem).")] = None,
) -> None:
    """Compile an operator source file and verify its call signature."""
    if kind not in CALL_CONTRACTS:
        raise typer.BadParameter(f"unknown operator kind '{kind}'")
    fn_name = name or source.stem
    ctx = OperatorContext()
    registry = {
        "mutation": ctx.mutations,
        "selection": ctx.selection,
        "survival": ctx.survival,
    }[kind]
    try:
        registry.load_from_file(fn_name, source)
    except OperatorLoadError as exc:
        console.print(f"[bold red]Invalid {kind}:[/] {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"[bold green]OK:[/] {kind} '{fn_name}' loaded from {source}")


@app.command()
def slots(
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    mutation: Annotated[
        list[str] | None,
        typer.Option(help="Dynamic mutation to load, as NAME=PATH[:WEIGHT]. Repeatable."),
    ] = None,
) -> None:
    """Show how enabled custom mutations map onto the five weight slots."""
    cfg = _load_config(config)
    ctx = OperatorContext(config_path=config)
    _load_mutations(ctx, mutation or [])
    ctx.reload(cfg)
    names: dict[str, str] = {}
    weights = MutationWeights()
    enabled = setup_custom_mutations(names, weights, ctx.mutations)
    table = Table(title="Custom mutation slots")
    table.add_column("Slot")
    table.add_column("Operator")
    table.add_column("Weight")
    for slot in SLOT_NAMES:
        table.add_row(slot, names[slot], f"{getattr(weights, slot):.4g}")
    console.print(table)
    console.print(f"[bold]Enabled:[/] {len(enabled)} ({', '.join(enabled) or '-'})")
    overrides = ctx.mutations.builtin_overrides()
    if overrides:
        console.print("[bold]Builtin overrides:[/]")
        for key, value in overrides.items():
            applied = "applied" if key in MutationWeights.model_fields else "skipped"
            console.print(f"- {key} = {value:.4g} ({applied})")
