"""Rich rendering shared by the prepare and generate commands."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

_SCORE_STYLE = {1: "green", 2: "yellow", 3: "red"}


def print_stats(console: Console, stats: dict) -> None:
    sides = Table(title="Annotations", show_header=True, header_style="bold cyan")
    sides.add_column("State")
    sides.add_column("Segments", justify="right")
    sides.add_column("Words", justify="right")
    sides.add_column("Lint errors", justify="right")
    for label in ("original", "current"):
        side = stats[label]
        sides.add_row(label, str(side["annotations"]), str(side["words"]), str(side["lintErrors"]))
    console.print(sides)

    changes = stats["changes"]
    table = Table(title="Changes", show_header=True, header_style="bold cyan")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Matched segments", str(changes["matched"]))
    table.add_row("Changed segments", str(changes["changedSegments"]))
    table.add_row("New segments", str(changes["newSegments"]))
    table.add_row("Removed segments", str(changes["removedSegments"]))
    table.add_row("Mean start shift (ms)", f"{changes['startShiftMeanMs']:.2f}")
    table.add_row("Mean end shift (ms)", f"{changes['endShiftMeanMs']:.2f}")
    table.add_row("Timestamp pattern", changes["timestampPrimaryPattern"])
    table.add_row("Segmentation pattern", changes["segmentationDominantPattern"])
    console.print(table)


def print_feedback(console: Console, llm: dict) -> None:
    table = Table(title="Feedback", show_header=True, header_style="bold cyan")
    table.add_column("Category", style="bold")
    table.add_column("Score", justify="center", width=6)
    table.add_column("Note")
    for item in llm["feedback"]:
        style = _SCORE_STYLE.get(item["score"], "white")
        table.add_row(item["category"], f"[{style}]{item['score']}[/{style}]", item["note"])
    console.print(table)

    suffix = " · repaired" if llm.get("repaired") else ""
    console.print(f"[dim]{llm['modelIdentifier']} · {llm['latencyMs']} ms{suffix}[/dim]")
