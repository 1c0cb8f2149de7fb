"""
echo-node CLI — run the node on stdin/stdout.

  echo-node [--node-id ID] [--log-level LEVEL] [--config PATH]

Protocol messages go to stdout only; logs and diagnostics go to stderr.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from echo_node import __version__
from echo_node.errors import EchoNodeError
from echo_node.node import DEFAULT_NODE_ID, EchoNode
from echo_node.runner import run

console = Console(stderr=True)
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _load_config(path: Optional[Path]) -> dict:
    if path is None:
        return {}
    try:
        cfg = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise click.BadParameter(f"cannot read config {path}: {e}", param_hint="--config")
    if not isinstance(cfg, dict):
        raise click.BadParameter(f"config {path} must hold a JSON object", param_hint="--config")
    return cfg


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.command()
@click.option("--node-id", envvar="ECHO_NODE_ID", default=None, help=f"Node identity (default {DEFAULT_NODE_ID})")
@click.option("--log-level", envvar="ECHO_NODE_LOG_LEVEL", default=None,
              type=click.Choice(LOG_LEVELS, case_sensitive=False), help="Log level (default WARNING)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="JSON file with node_id / log_level")
@click.version_option(__version__)
def main(node_id: Optional[str], log_level: Optional[str], config_path: Optional[Path]):
    """Echo node — reply to every echo request with echo_ok."""
    cfg = _load_config(config_path)
    level = str(log_level or cfg.get("log_level") or "WARNING").upper()
    if level not in LOG_LEVELS:
        raise click.BadParameter(f"unknown log level {level!r}", param_hint="--config")
    _setup_logging(level)

    node = EchoNode(node_id=str(node_id or cfg.get("node_id") or DEFAULT_NODE_ID))
    try:
        run(node, sys.stdin, sys.stdout)
    except EchoNodeError as e:
        console.print(f"[red]{e.stage or 'run'} failed ({e.code}):[/red] {escape(str(e))}", highlight=False)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
