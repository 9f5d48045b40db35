"""init command — interactive setup wizard.

Writes .editlens.yml with the provider, model, note language and audit log
settings, and optionally a .env.runtime template listing the API key the
chosen provider needs.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from editlens_core.config import DEFAULT_CONFIG, PROVIDER_KEY_ENV

console = Console()

_ENV_TEMPLATE = """\
# Loaded by editlens on start-up. Variables already set in the shell win.
{api_key_env}=
# EDITLENS_MODEL=
# EDITLENS_TEST_MODE=false
"""


@click.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing files without asking.")
@click.pass_context
def init_cmd(ctx, force: bool):
    """Set up editlens in the current directory.

    Creates .editlens.yml and, optionally, a .env.runtime template.
    """
    console.print("\n[bold cyan]editlens init[/bold cyan] — setup wizard\n")

    provider = click.prompt(
        "Model provider",
        type=click.Choice(list(PROVIDER_KEY_ENV)),
        default=DEFAULT_CONFIG["provider"],
    )
    api_key_env = PROVIDER_KEY_ENV[provider]

    model = click.prompt("Model (leave empty for the provider default)", default="", show_default=False)
    note_language = click.prompt("Language for feedback notes", default=DEFAULT_CONFIG["note_language"])

    console.print("\nAudit log:")
    console.print("  [bold]jsonl[/bold]  — append review pairs and analytics events to logs/*.jsonl (default)")
    console.print("  [bold]none[/bold]   — keep nothing on disk")
    audit_log = click.prompt(
        "Audit log",
        type=click.Choice(["jsonl", "none"]),
        default=DEFAULT_CONFIG["audit_log"],
    )

    config: dict = {"provider": provider, "note_language": note_language, "audit_log": audit_log}
    if model.strip():
        config["model"] = model.strip()

    config_path = Path(ctx.obj["config_path"])
    _write_config(config, config_path, merge=not force)
    console.print(f"[green]Wrote {config_path}[/green]")

    if click.confirm("\nGenerate a .env.runtime template?", default=True):
        env_path = Path(".env.runtime")
        if env_path.exists() and not force:
            console.print("[yellow].env.runtime already exists, not touched[/yellow]")
        else:
            env_path.write_text(_ENV_TEMPLATE.format(api_key_env=api_key_env))
            console.print("[green]Created .env.runtime[/green]")
        console.print(f"\n[yellow]Fill in [bold]{api_key_env}[/bold] before running a review.[/yellow]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Run a review with: [bold]editlens generate <request.json>[/bold]")


def _write_config(config: dict, path: Path, merge: bool = True) -> None:
    """Write or update the config file, preserving any existing keys unless merge is False."""
    existing: dict = {}
    if merge and path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False, allow_unicode=True))
