"""submit command — record a submitted review action in the analytics log."""

from __future__ import annotations

import click
from rich.console import Console

from editlens_cli.payload import load_request, read_json, read_json_object
from editlens_cli.records import to_analytics_record
from editlens_core.errors import InputError
from editlens_core.service import prepare_review
from editlens_store.models import EVENT_SUBMIT_REVIEW_ACTION

console = Console()


@click.command("submit")
@click.argument("request_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--ai-review",
    "ai_review_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON file with the AI review shown to the reviewer.",
)
@click.option(
    "--input-boxes",
    "input_boxes_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON object with the reviewer's form inputs.",
)
@click.option(
    "--metadata",
    "metadata_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON object with free-form event metadata.",
)
@click.pass_context
def submit_cmd(ctx, request_path: str, ai_review_path: str | None, input_boxes_path: str | None, metadata_path: str | None):
    """Append a submit_transcript_review_action event for REQUEST_PATH.

    The event carries both review states, their metrics analysis and any
    AI review, form inputs and metadata supplied.
    """
    from editlens_store.noop import NoOpAuditLog

    audit_log = ctx.obj["audit_log"]
    if isinstance(audit_log, NoOpAuditLog):
        raise click.UsageError("No audit log configured. Set 'audit_log: jsonl' in .editlens.yml.")

    config = ctx.obj["config"]
    try:
        request = load_request(request_path)
        ai_review = read_json(ai_review_path) if ai_review_path else None
        input_boxes = read_json_object(input_boxes_path, "inputBoxes")
        metadata = read_json_object(metadata_path, "metadata")
    except InputError as e:
        raise click.UsageError(str(e))

    prepared = prepare_review(request, config.get("note_language", "English"))
    record = to_analytics_record(
        EVENT_SUBMIT_REVIEW_ACTION,
        request,
        prepared,
        ai_review=ai_review,
        input_boxes=input_boxes,
        metadata=metadata,
    )
    try:
        audit_log.log_analytics(record)
    except OSError as e:
        raise click.ClickException(f"Could not write analytics log: {e}")

    console.print(f"[green]Recorded review action {request.review_action_id}.[/green]")
