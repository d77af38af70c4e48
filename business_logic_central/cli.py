from __future__ import annotations

import importlib
import json
from collections.abc import Sequence
from typing import Any

import typer

from .config import Settings, get_settings
from .logging import configure_logging
from .registry import BusinessLogicCentral

app = typer.Typer(help="Business logic central utility")


def _load_instruction(ref: str) -> Any:
    module_name, _, attr = ref.partition(":")
    if not module_name or not attr:
        raise typer.BadParameter(
            f"expected module:attribute, got {ref!r}", param_hint="--instruction"
        )
    try:
        target: Any = importlib.import_module(module_name)
        for part in attr.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        raise typer.BadParameter(f"cannot load {ref!r}: {exc}", param_hint="--instruction") from exc
    if not callable(target):
        raise typer.BadParameter(f"{ref!r} is not callable", param_hint="--instruction")
    return target


def _decode_param(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _setup_logging(settings: Settings, verbose: bool) -> None:
    configure_logging("DEBUG" if verbose or settings.debug else settings.log_level)


@app.command()
def fire(
    event_name: str = typer.Argument(..., help="Event to fire"),
    instruction: list[str] | None = typer.Option(
        None, "--instruction", "-i", help="Instruction as module:attribute, in priority order"
    ),
    param: list[str] | None = typer.Option(
        None, "--param", "-p", help="Parameter passed to every instruction (JSON or raw string)"
    ),
    strict: bool = typer.Option(False, help="Validate instructions and their results"),
    verbose: bool = typer.Option(False, help="Log registry activity"),
) -> None:
    """Register instructions and fire an event once."""
    settings = get_settings()
    _setup_logging(settings, verbose)

    central = BusinessLogicCentral(strict=strict or settings.strict)
    for ref in instruction or []:
        central.add_instruction_to_event(_load_instruction(ref), event_name)

    parameters = [_decode_param(p) for p in param or []] or None
    processed = central.do_event(event_name, parameters)
    typer.echo("processed" if processed else "unrecognized")


@app.command()
def demo() -> None:
    """Fire the route guard example and show which instructions ran."""

    ran: list[str] = []

    def is_over_14_days(args: Sequence[Any] | None = None) -> bool:
        ran.append("is_over_14_days")
        return bool(args) and args[0] > 14

    def is_logged_out(args: Sequence[Any] | None = None) -> bool:
        ran.append("is_logged_out")
        return bool(args) and not args[0]

    central = BusinessLogicCentral()
    central.add_instruction_to_event(is_over_14_days, "routeX")
    central.add_instruction_to_event(is_logged_out, "routeX")

    for event_name, params in (("routeX", [20]), ("routeX", [3]), ("unregisteredX", [3])):
        ran.clear()
        processed = central.do_event(event_name, params)
        status = "processed" if processed else "unrecognized"
        typer.echo(f"{event_name} {params}: {status}; ran {', '.join(ran) or 'nothing'}")


@app.command("settings")
def show_settings() -> None:
    """Print the effective settings."""
    typer.echo(get_settings().model_dump_json(indent=2))


if __name__ == "__main__":  # pragma: no cover
    app()
