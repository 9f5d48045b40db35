"""CLI entry point for editlens.

Commands:
  prepare  — compute edit metrics and prompts for a review request
  generate — compute metrics and obtain validated model feedback
  submit   — append a submitted review action to the analytics log
  init     — interactive setup wizard
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console

from editlens_cli.commands.generate import generate_cmd
from editlens_cli.commands.init import init_cmd
from editlens_cli.commands.prepare import prepare_cmd
from editlens_cli.commands.submit import submit_cmd

console = Console()


def _build_audit_log(config: dict):
    """Instantiate the configured audit log from .editlens.yml settings.

      audit_log: jsonl → JsonlAuditLog (default; paths from review_pair_log_path / analytics_log_path)
      audit_log: none  → NoOpAuditLog
    """
    from editlens_store.noop import NoOpAuditLog

    log_type = config.get("audit_log", "jsonl")

    if log_type == "jsonl":
        from editlens_store.jsonl import JsonlAuditLog

        return JsonlAuditLog(
            review_pair_path=config["review_pair_log_path"],
            analytics_path=config["analytics_log_path"],
        )

    if log_type not in ("none", None):
        console.print(f"[yellow]Unknown audit_log {log_type!r}. Falling back to no audit log.[/yellow]")
    return NoOpAuditLog()


@click.group()
@click.version_option(
    version=importlib.metadata.version("editlens"),
    prog_name="editlens",
)
@click.option(
    "--config",
    "config_path",
    default=".editlens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="EDITLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Measure transcript review edits and get AI feedback on them."""
    from editlens_core.config import load_config, load_env_files

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)

    load_env_files()
    config = load_config(config_path)

    audit_log = _build_audit_log(config)
    ctx.obj["audit_log"] = audit_log
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path
    ctx.call_on_close(audit_log.close)


main.add_command(prepare_cmd)
main.add_command(generate_cmd)
main.add_command(submit_cmd)
main.add_command(init_cmd)
