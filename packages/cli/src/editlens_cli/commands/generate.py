"""generate command — compute metrics and obtain validated AI feedback."""

from __future__ import annotations

import json
import logging

import click
from rich.console import Console

from editlens_cli.commands.display import print_feedback, print_stats
from editlens_cli.payload import load_request
from editlens_cli.records import to_analytics_record, to_review_pair_record
from editlens_core.errors import EditLensError
from editlens_core.service import generate_feedback, get_critic
from editlens_store.models import EVENT_REVIEW_GENERATE

console = Console()
logger = logging.getLogger(__name__)


@click.command("generate")
@click.argument("request_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--provider",
    type=click.Choice(["openrouter", "openai", "anthropic"]),
    default=None,
    help="Model provider. Overrides config file.",
)
@click.option("--model", default=None, help="Model identifier. Overrides config file.")
@click.option("--test-mode", "test_mode", is_flag=True, help="Use canned feedback; no network calls.")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON.")
@click.pass_context
def generate_cmd(ctx, request_path: str, provider: str | None, model: str | None, test_mode: bool, as_json: bool):
    """Generate AI feedback for the edit described in REQUEST_PATH.

    \b
    Required environment variables (unless --test-mode):
      OPENROUTER_API_KEY   when using --provider openrouter (default)
      OPENAI_API_KEY       when using --provider openai
      ANTHROPIC_API_KEY    when using --provider anthropic
    """
    config = dict(ctx.obj["config"])
    for key, value in {"provider": provider, "model": model}.items():
        if value is not None:
            config[key] = value
    if test_mode:
        config["test_mode"] = True

    try:
        critic = get_critic(config)
        request = load_request(request_path)
    except ValueError as e:
        raise click.UsageError(str(e))
    except ImportError as e:
        raise click.ClickException(str(e))

    audit_log = ctx.obj["audit_log"]
    try:
        audit_log.log_review_pair(to_review_pair_record(request))
    except OSError as e:
        # Log failures never abort the review.
        logger.warning("Failed to write review pair log: %s", e)
        console.print(f"[yellow]Warning: could not write review pair log ({e})[/yellow]")

    try:
        result = generate_feedback(request, config, critic=critic)
    except EditLensError as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")

    llm = result.critique.to_dict()
    try:
        audit_log.log_analytics(to_analytics_record(EVENT_REVIEW_GENERATE, request, result.prepared, ai_review=llm))
    except OSError as e:
        logger.warning("Failed to write analytics log: %s", e)
        console.print(f"[yellow]Warning: could not write analytics log ({e})[/yellow]")

    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    console.print(f"\n[bold]Review action [cyan]{request.review_action_id}[/cyan][/bold]")
    print_stats(console, result.prepared.stats)
    print_feedback(console, llm)
