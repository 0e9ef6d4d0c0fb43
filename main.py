"""Klasseneinteilung — Haupt-CLI.

Verwendung:
  python main.py setup                        Ersteinrichtung (Wizard)
  python main.py config edit                  Konfiguration bearbeiten
  python main.py config show                  Konfiguration anzeigen
  python main.py generate                     Test-Schülerliste erzeugen
  python main.py template                     Excel-Import-Vorlage erzeugen
  python main.py distribute <liste.csv>       Klassen einteilen
  python main.py distribute <liste> --rule "Anna Alt=Ben Berg" --excel out.xlsx
  python main.py show <einteilung.json>       Gespeicherte Einteilung anzeigen
  python main.py stats <einteilung.json>      Klassenstatistik anzeigen
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfad für gespeicherte Einteilungen
DEFAULT_RESULT_JSON = Path("output/einteilung.json")


def _setup_logging(verbose: bool) -> None:
    """Installiert den RichHandler; WARNING standardmäßig, DEBUG mit --verbose."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.addHandler(RichHandler(console=console, show_path=False, markup=False))
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_config_or_abort():
    """ConfigManager und geladene Konfiguration; Exit 1 ohne gültige Datei."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load()
    except FileNotFoundError:
        console.print(
            f"[red]Keine Konfiguration unter {mgr.DEFAULT_CONFIG}.[/red] "
            "Zuerst [bold]python main.py setup[/bold] ausführen."
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
    sys.exit(1)


def _load_result_or_abort(path: Path):
    from models.class_roster import AllocationResult
    try:
        return AllocationResult.load_json(path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Einteilung ungültig: {path}[/red]\n{e}")
        sys.exit(1)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration überschreiben.")
def cmd_setup(force: bool):
    """Ersteinrichtung: Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not (force or mgr.first_run_check()):
        console.print(
            f"[yellow]{mgr.DEFAULT_CONFIG} existiert schon.[/yellow] "
            "Ändern mit [bold]config edit[/bold] oder neu anlegen mit [bold]setup --force[/bold]."
        )
        return

    config = run_wizard()
    if config is None:
        return
    mgr.save(config)
    console.print(
        "[bold green]Fertig.[/bold green] Als Nächstes: "
        "[bold]python main.py template[/bold] für die Import-Vorlage."
    )


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder bearbeiten."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()

    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  "
        f"{config.num_classes} Klassen  |  "
        f"Seed: {'zufällig' if config.seed is None else config.seed}",
        title="Konfiguration",
        border_style="cyan",
    ))

    cw = config.cost_weights
    table = Table(title="Kostengewichte", box=box.ROUNDED)
    table.add_column("Merkmal")
    table.add_column("Gewicht", justify="right")
    table.add_row("Grundschule", f"{cw.school:g}")
    table.add_row("Geschlecht", f"{cw.gender:g}")
    table.add_row("BG-Gutachten", f"{cw.category:g}")
    console.print(table)

    table2 = Table(title="Import-Spalten", box=box.ROUNDED)
    table2.add_column("Feld")
    table2.add_column("Spaltenüberschrift")
    for field, header in config.import_columns.as_mapping().items():
        table2.add_row(field, header)
    console.print(table2)

    console.print(
        f"\n[bold]Klassenbezeichnung:[/bold] {config.class_label(0)}, "
        f"{config.class_label(1)}, …"
    )


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    mgr, config = _load_config_or_abort()
    mgr.edit_interactive(config)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--count", "-n", default=120, help="Anzahl Schüler.")
@click.option("--rules", "rule_count", default=10, help="Anzahl Freundes-Regeln.")
@click.option("--output", "-o", default="output/schueler.csv",
              help="Ausgabepfad der Schülerliste (CSV).")
@click.option("--rules-output", default="output/regeln.csv",
              help="Ausgabepfad der Regeln (CSV).")
def cmd_generate(seed: int, count: int, rule_count: int, output: str, rules_output: str):
    """Erzeugt eine Test-Schülerliste mit Freundes-Regeln."""
    from config.manager import ConfigManager
    from data.fake_data import FakeRosterGenerator
    from data.roster_import import write_rules_csv

    config = ConfigManager().load_or_default()

    console.print("[bold]Testdaten werden generiert...[/bold]")
    gen = FakeRosterGenerator(seed=seed)
    try:
        students = gen.generate_students(count)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    rules = gen.generate_rules(students, rule_count)
    gen.print_summary(students, rules)

    gen.write_csv(students, Path(output), config.import_columns)
    console.print(f"[green]✓[/green] Schülerliste gespeichert: {output}")
    write_rules_csv(rules, Path(rules_output))
    console.print(f"[green]✓[/green] Regeln gespeichert: {rules_output}")


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

@click.command("template")
@click.option("--output", "-o", default="output/import_vorlage.xlsx",
              help="Ausgabepfad für die Excel-Vorlage.")
def cmd_template(output: str):
    """Erzeugt eine leere Excel-Import-Vorlage."""
    from config.manager import ConfigManager
    from data.roster_import import generate_template

    config = ConfigManager().load_or_default()
    out_path = Path(output)
    console.print("[bold]Excel-Vorlage wird erzeugt...[/bold]")
    generate_template(config, out_path)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")
    console.print(
        "\nBlätter in der Vorlage:\n"
        "  [cyan]Schüler[/cyan]  – Vorname, Nachname, Geschlecht, Grundschule, BG-Gutachten\n"
        "  [cyan]Regeln[/cyan]   – je Zeile zwei Schüler, die in dieselbe Klasse sollen"
    )


# ─── DISTRIBUTE ───────────────────────────────────────────────────────────────

@click.command("distribute")
@click.argument("roster", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--rules", "rules_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Regeldatei (CSV/Excel, zwei Namensspalten).")
@click.option("--rule", "rule_texts", multiple=True,
              help='Einzelne Regel "Vorname Nachname=Vorname Nachname" (mehrfach möglich).')
@click.option("--classes", "num_classes", type=int, default=None,
              help="Anzahl Klassen (überschreibt die Konfiguration).")
@click.option("--seed", type=int, default=None,
              help="Zufalls-Seed (überschreibt die Konfiguration).")
@click.option("--excel", "excel_path", type=click.Path(path_type=Path), default=None,
              help="Einteilung als Excel-Datei speichern.")
@click.option("--pdf", "pdf_path", type=click.Path(path_type=Path), default=None,
              help="Klassenlisten als PDF speichern.")
@click.option("--json", "json_path", type=click.Path(path_type=Path), default=None,
              help="Einteilung als JSON speichern (für show/stats).")
def cmd_distribute(
    roster: Path,
    rules_file: Optional[Path],
    rule_texts: tuple[str, ...],
    num_classes: Optional[int],
    seed: Optional[int],
    excel_path: Optional[Path],
    pdf_path: Optional[Path],
    json_path: Optional[Path],
):
    """Teilt die Schülerliste ROSTER in Klassen ein."""
    from config.manager import ConfigManager
    from data.roster_import import RosterImportError, import_roster, import_rules
    from models.pairing_rule import PairingRule
    from models.session import AllocationSession
    from solver.allocator import EmptyRosterError, InvalidClassCountError
    from analysis.allocation_validator import AllocationValidator
    from analysis.class_stats import StatsReporter
    from export.tui_renderer import print_allocation

    try:
        config = ConfigManager().load_or_default()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    try:
        students = import_roster(roster, config.import_columns)
        rules = import_rules(rules_file) if rules_file else []
        rules += [PairingRule.parse(t) for t in rule_texts]
    except RosterImportError as e:
        console.print(f"[red bold]Keine Daten:[/red bold] {e}")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red bold]Regel ungültig:[/red bold] {e}")
        sys.exit(1)

    session = AllocationSession(
        students,
        num_classes if num_classes is not None else config.num_classes,
        rules,
        weights=config.cost_weights,
        label_prefix=config.class_label_prefix,
    )
    try:
        result = session.allocate(seed=seed if seed is not None else config.seed)
    except EmptyRosterError as e:
        console.print(f"[red bold]Keine Daten:[/red bold] {e}")
        sys.exit(1)
    except InvalidClassCountError as e:
        console.print(f"[red bold]Klassenanzahl:[/red bold] {e}")
        sys.exit(1)

    print_allocation(result)

    report = AllocationValidator().validate(result, session.students, session.rules)
    if report.violations:
        report.print_rich()

    stats = StatsReporter().summarize(result)

    if json_path:
        result.save_json(json_path)
        console.print(f"[green]✓[/green] JSON gespeichert: {json_path}")
    if excel_path:
        from export.excel_export import ExcelExporter
        ExcelExporter(result, stats, school_name=config.school_name).export(excel_path)
        console.print(f"[green]✓[/green] Excel gespeichert: {excel_path}")
    if pdf_path:
        from export.pdf_export import PdfExporter
        PdfExporter(result, stats, school_name=config.school_name).export(pdf_path)
        console.print(f"[green]✓[/green] PDF gespeichert: {pdf_path}")


# ─── SHOW / STATS ─────────────────────────────────────────────────────────────

@click.command("show")
@click.argument("result_json", type=click.Path(path_type=Path), default=str(DEFAULT_RESULT_JSON))
def cmd_show(result_json: Path):
    """Zeigt eine gespeicherte Einteilung an."""
    from export.tui_renderer import print_allocation

    print_allocation(_load_result_or_abort(result_json))


@click.command("stats")
@click.argument("result_json", type=click.Path(path_type=Path), default=str(DEFAULT_RESULT_JSON))
@click.option("--text", "as_text", is_flag=True, default=False,
              help="Klassischen Textbericht statt Tabelle ausgeben.")
def cmd_stats(result_json: Path, as_text: bool):
    """Gibt die Klassenstatistik einer gespeicherten Einteilung aus."""
    from analysis.class_stats import StatsReporter

    result = _load_result_or_abort(result_json)
    reporter = StatsReporter()
    stats = reporter.summarize(result)
    if not stats:
        console.print("[yellow]Die Einteilung enthält keine Schüler.[/yellow]")
        return
    if as_text:
        click.echo(reporter.format_report(stats))
    else:
        reporter.print_rich(stats)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliche Log-Ausgabe (DEBUG).")
def cli(verbose: bool):
    """Klasseneinteilung: Schüler ausgewogen auf Klassen verteilen.

    Starten Sie mit: python main.py setup
    """
    _setup_logging(verbose)


def main():
    """Einstiegspunkt; ohne Argumente und ohne Konfiguration startet der Wizard."""
    from config.manager import ConfigManager

    if len(sys.argv) == 1 and ConfigManager().first_run_check():
        console.print("[cyan]Noch keine Konfiguration vorhanden, der Setup-Wizard startet.[/cyan]")
        sys.argv.append("setup")
    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_template)
cli.add_command(cmd_distribute)
cli.add_command(cmd_show)
cli.add_command(cmd_stats)


if __name__ == "__main__":
    main()
