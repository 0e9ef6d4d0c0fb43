"""Gemeinsamer Renderer für die Terminal-Anzeige der Klassenlisten.

Wird von cmd_distribute und cmd_show verwendet.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.class_roster import AllocationResult, ClassRoster


def render_class_rows(roster: "ClassRoster", grouped: set[str] | None = None) -> list[list[str]]:
    """Gibt Tabellenzeilen für eine Klassenliste zurück.

    Jede Zeile: [Nr., Vorname, Nachname, Geschlecht, Grundschule, BG-Gutachten, Regel]
    """
    grouped = grouped or set()
    rows: list[list[str]] = []
    for n, s in enumerate(roster.students, 1):
        rows.append(
            [str(n)] + s.as_row() + ["●" if s.full_name in grouped else ""]
        )
    return rows


def print_allocation(result: "AllocationResult") -> None:
    """Gibt alle nicht-leeren Klassen als Rich-Tabellen aus."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table
    from rich import box

    from config.defaults import STUDENT_TABLE_HEADERS
    from export.helpers import grouped_names, strategy_label

    console = Console()
    grouped = grouped_names(result)

    console.print(Panel(
        f"Strategie: [bold]{strategy_label(result)}[/bold] | "
        f"Klassen: {result.num_classes} | Schüler: {result.total_students}\n"
        f"Klassengrößen: {', '.join(str(s) for s in result.class_sizes)}"
        + (f" | Seed: {result.seed}" if result.seed is not None else ""),
        title="Klasseneinteilung",
        border_style="cyan",
    ))

    for roster in result.non_empty_classes():
        table = Table(title=f"{roster.label} ({roster.size})", box=box.ROUNDED)
        table.add_column("Nr.", justify="right", width=4)
        for header in STUDENT_TABLE_HEADERS:
            table.add_column(header)
        table.add_column("Regel", justify="center", width=5)
        for row in render_class_rows(roster, grouped):
            table.add_row(*row)
        console.print(table)

    for w in result.warnings:
        console.print(f"[yellow]⚠[/yellow]  {w.message} ({w.rule.describe()})")
