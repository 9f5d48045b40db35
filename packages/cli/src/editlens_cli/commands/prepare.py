"""prepare command — compute edit metrics and prompts without calling a model."""

from __future__ import annotations

import json

import click
from rich.console import Console

from editlens_cli.commands.display import print_stats
from editlens_cli.payload import load_request
from editlens_core.errors import InputError
from editlens_core.service import prepare_review

console = Console()


@click.command("prepare")
@click.argument("request_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the full prepared payload as JSON.")
@click.pass_context
def prepare_cmd(ctx, request_path: str, as_json: bool):
    """Compute stats, feature packet and prompts for REQUEST_PATH.

    REQUEST_PATH is a JSON file holding reviewActionId, original and current.
    """
    config = ctx.obj["config"]
    try:
        request = load_request(request_path)
    except InputError as e:
        raise click.UsageError(str(e))

    prepared = prepare_review(request, config.get("note_language", "English"))

    if as_json:
        click.echo(json.dumps(prepared.to_dict(), ensure_ascii=False, indent=2))
        return

    console.print(f"\n[bold]Review action [cyan]{request.review_action_id}[/cyan][/bold]")
    print_stats(console, prepared.stats)
