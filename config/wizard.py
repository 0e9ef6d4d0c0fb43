"""Interaktiver Setup-Wizard für die Ersteinrichtung der Klasseneinteilung.

Führt den Nutzer Schritt für Schritt durch alle Konfigurationsbereiche.
Nutzt rich für schöne Konsolenausgabe.
"""

from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import CostWeights, DistributionConfig, ImportColumns
from config.defaults import default_cost_weights, default_import_columns

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def _show_columns_table(ic: ImportColumns) -> None:
    """Zeigt die erwarteten Spaltenüberschriften als rich-Tabelle an."""
    table = Table(title="Import-Spalten", box=box.ROUNDED)
    table.add_column("Feld", style="bold")
    table.add_column("Spaltenüberschrift")
    for field, header in ic.as_mapping().items():
        table.add_row(field, header)
    console.print(table)


# ─── SCHRITT 1: Schule & Klassen ───

def _wizard_school(current: Optional[DistributionConfig] = None) -> tuple[str, int, str]:
    _header("Schritt 1 — Schule & Klassen")
    _info("Bitte geben Sie die Schuldaten ein.")

    name = Prompt.ask(
        "Name der Schule",
        default=current.school_name if current else "Muster-Schule",
    )
    while True:
        num_classes = IntPrompt.ask(
            "Anzahl Klassen",
            default=current.num_classes if current else 5,
        )
        if num_classes >= 1:
            break
        _warn("Die Klassenanzahl muss mindestens 1 sein.")
    prefix = Prompt.ask(
        "Bezeichnung der Klassen",
        default=current.class_label_prefix if current else "Klasse",
    )
    return name, num_classes, prefix


# ─── SCHRITT 2: Zufall ───

def _wizard_seed(current: Optional[int] = None) -> Optional[int]:
    _header("Schritt 2 — Zufalls-Seed")
    _info(
        "Ohne Seed fällt die Einteilung ohne Regeln bei jedem Lauf anders aus.\n"
        "Mit Seed ist sie reproduzierbar."
    )
    if not Confirm.ask("Festen Seed verwenden?", default=current is not None):
        return None
    return IntPrompt.ask("Seed", default=current if current is not None else 42)


# ─── SCHRITT 3: Kostengewichte ───

def _wizard_weights(current: Optional[CostWeights] = None) -> CostWeights:
    _header("Schritt 3 — Kostengewichte")
    _info(
        "Gewichte steuern, wie stark gleiche Merkmale in einer Klasse vermieden werden.\n"
        "Höher = wichtiger. 0 = deaktiviert."
    )
    base = current or default_cost_weights()
    if Confirm.ask("Standard-Gewichte übernehmen (3 / 2 / 1)?", default=current is None):
        _success("Standard-Gewichte übernommen.")
        return default_cost_weights()

    school = FloatPrompt.ask("Gewicht gleiche Grundschule", default=base.school)
    gender = FloatPrompt.ask("Gewicht gleiches Geschlecht", default=base.gender)
    category = FloatPrompt.ask("Gewicht gleiches BG-Gutachten", default=base.category)
    try:
        weights = CostWeights(school=school, gender=gender, category=category)
    except ValidationError as e:
        _warn(f"Validierungsfehler: {e}")
        _warn("Standard-Gewichte werden verwendet.")
        return default_cost_weights()
    _success("Kostengewichte konfiguriert.")
    return weights


# ─── SCHRITT 4: Import-Spalten ───

def _wizard_columns() -> ImportColumns:
    _header("Schritt 4 — Import-Spalten")
    default_ic = default_import_columns()
    _show_columns_table(default_ic)

    if Confirm.ask("Standard-Spalten übernehmen?", default=True):
        _success("Standard-Spalten übernommen.")
        return default_ic

    values = {
        field: Prompt.ask(f"Spalte für '{field}'", default=header)
        for field, header in default_ic.as_mapping().items()
    }
    return ImportColumns(**values)


# ─── ZUSAMMENFASSUNG ───

def _show_summary(config: DistributionConfig) -> None:
    _header("Zusammenfassung")
    table = Table(box=box.ROUNDED, title="Konfigurationsübersicht")
    table.add_column("Bereich", style="bold cyan")
    table.add_column("Wert")

    table.add_row("Schule", config.school_name)
    table.add_row("Klassen", f"{config.num_classes} ({config.class_label(0)} …)")
    table.add_row("Seed", "zufällig" if config.seed is None else str(config.seed))
    cw = config.cost_weights
    table.add_row(
        "Gewichte",
        f"Grundschule {cw.school:g} | Geschlecht {cw.gender:g} | BG {cw.category:g}",
    )
    table.add_row("Spalten", ", ".join(config.import_columns.as_mapping().values()))
    console.print(table)


# ─── HAUPT-WIZARD ───

def run_wizard() -> Optional[DistributionConfig]:
    """Führt den vollständigen interaktiven Setup-Wizard aus.

    Returns:
        Fertige DistributionConfig oder None, wenn der Nutzer abbricht.
    """
    console.print()
    console.print(Panel(
        "[bold]Willkommen bei der Klasseneinteilung![/bold]\n\n"
        "Der Wizard legt fest, wie viele Klassen gebildet werden und\n"
        "wie stark Grundschule, Geschlecht und BG-Gutachten verteilt werden.\n"
        "[dim]Standard-Werte können mit Enter übernommen werden.[/dim]",
        title="[bold cyan]Klasseneinteilung[/bold cyan]",
        border_style="cyan",
    ))

    if not Confirm.ask("\nMöchten Sie jetzt die Einteilung einrichten?", default=True):
        console.print("[yellow]Einrichtung abgebrochen.[/yellow]")
        return None

    try:
        name, num_classes, prefix = _wizard_school()
        seed = _wizard_seed()
        weights = _wizard_weights()
        columns = _wizard_columns()

        config = DistributionConfig(
            school_name=name,
            num_classes=num_classes,
            seed=seed,
            class_label_prefix=prefix,
            cost_weights=weights,
            import_columns=columns,
        )

        _show_summary(config)

        if not Confirm.ask("\nKonfiguration speichern?", default=True):
            console.print("[yellow]Konfiguration wird nicht gespeichert.[/yellow]")
            return None

        _success("Konfiguration wird gespeichert...")
        return config

    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard abgebrochen.[/yellow]")
        return None
    except ValidationError as e:
        console.print(f"\n[red]Fehler während der Konfiguration: {e}[/red]")
        return None
