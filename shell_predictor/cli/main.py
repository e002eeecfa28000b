#!/usr/bin/env python3
"""Main entry point for the shell-predictor CLI."""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..core.config import Settings
from ..core.strategies import LocalModelStrategy, StrategyKind
from ..host import ClientInfo, PredictorHost
from .console_app import ConsoleApp

STRATEGY_CHOICES = [kind.value for kind in StrategyKind]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(show_time=False, show_path=False)],
        force=True,
    )


def _build_host(strategy: str | None, model_dir: str | None) -> PredictorHost:
    overrides: dict[str, object] = {}
    if strategy is not None:
        overrides["strategy"] = strategy
    if model_dir is not None:
        overrides["model_dir"] = model_dir
    config = Settings(**overrides)  # type: ignore[arg-type]
    configure_logging(config.log_level)
    return PredictorHost(config)


@click.group()
def cli():
    """shell-predictor - inline command-line suggestions

    Examples:
        shell-predictor suggest "git st"
        shell-predictor suggest "scoop al" --strategy completer
        shell-predictor interactive --strategy local_model
    """


@cli.command()
@click.argument("text")
@click.option("--strategy", type=click.Choice(STRATEGY_CHOICES), help="Strategy to use (overrides config)")
@click.option("--model-dir", help="Directory holding the local ONNX model")
def suggest(text: str, strategy: str | None, model_dir: str | None):
    """Print suggestions for TEXT and exit."""
    host = _build_host(strategy, model_dir)
    host.on_load()
    try:
        # One-shot requests wait for the model instead of racing the background load
        active = host.active
        if isinstance(active, LocalModelStrategy):
            active.resource.ensure_loaded()

        suggestions = host.get_suggestion(ClientInfo(name="shell-predictor.cli"), text)
    finally:
        host.on_unload()

    if not suggestions:
        sys.exit(1)

    table = Table(show_header=False, box=None)
    for candidate in suggestions:
        table.add_row(candidate.text, f"[dim]{candidate.tooltip}[/dim]" if candidate.tooltip else "")
    Console().print(table)


@cli.command()
@click.option("--strategy", type=click.Choice(STRATEGY_CHOICES), help="Strategy to use (overrides config)")
@click.option("--model-dir", help="Directory holding the local ONNX model")
def interactive(strategy: str | None, model_dir: str | None):
    """Start a prompt that shows suggestions while you type."""
    try:
        host = _build_host(strategy, model_dir)
        host.on_load()
        ConsoleApp(host).run()
    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as e:
        print(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
