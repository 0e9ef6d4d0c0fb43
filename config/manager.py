"""Laden, Speichern und Bearbeiten der Einteilungs-Konfiguration.

Die Datei ist YAML (ruamel.yaml) mit Abschnittskommentaren, damit sie
auch von Hand gepflegt werden kann. Validiert wird über DistributionConfig.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import CostWeights, DistributionConfig, ImportColumns

logger = logging.getLogger(__name__)

console = Console()


def _yaml() -> YAML:
    y = YAML()
    y.default_flow_style = False
    y.indent(mapping=2, sequence=4, offset=2)
    y.width = 100
    return y


# Feld → (Abschnitt, Erläuterung) für die Kommentare in der YAML-Datei
_FIELD_NOTES: dict[str, tuple[str, str]] = {
    "school_name": ("Schule", "Erscheint in Excel- und PDF-Exporten."),
    "num_classes": ("Klassen", "Anzahl der zu bildenden Klassen (mindestens 1)."),
    "seed": ("Zufall", "null = jede Einteilung ohne Regeln fällt anders aus."),
    "cost_weights": ("Kostenmodell", "Höher = gleiche Merkmale in einer Klasse werden stärker vermieden."),
    "import_columns": ("Import-Spalten", "Überschriften der Schülerliste, Groß-/Kleinschreibung egal."),
}

_WEIGHT_NOTES: dict[str, str] = {
    "school": "Grundschul-Cliquen aufbrechen",
    "gender": "Geschlechter mischen",
    "category": "BG-Gutachten verteilen",
}


def _format_errors(err: ValidationError) -> str:
    lines = []
    for e in err.errors():
        where = ".".join(str(p) for p in e["loc"]) or "(gesamt)"
        lines.append(f"  - {where}: {e['msg']}")
    return "\n".join(lines)


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "klassen_config.yaml"

    def first_run_check(self) -> bool:
        """True, solange unter DEFAULT_CONFIG noch keine Datei liegt."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Lesen ───

    def load(self, path: Optional[Path] = None) -> DistributionConfig:
        """Liest und validiert die Konfiguration.

        Raises:
            FileNotFoundError: Datei fehlt.
            ValueError: Inhalt verletzt das Schema (alle Fehler aufgelistet).
        """
        source = Path(path) if path else self.DEFAULT_CONFIG
        if not source.is_file():
            raise FileNotFoundError(
                f"Keine Konfiguration unter {source}. "
                f"Bitte zuerst 'python main.py setup' ausführen."
            )
        raw = _yaml().load(source.read_text(encoding="utf-8")) or {}
        try:
            config = DistributionConfig.model_validate(dict(raw))
        except ValidationError as e:
            raise ValueError(
                f"Konfiguration {source} ist ungültig:\n{_format_errors(e)}"
            ) from e
        logger.debug(f"Konfiguration aus {source} gelesen ({config.num_classes} Klassen)")
        return config

    def load_or_default(self, path: Optional[Path] = None) -> DistributionConfig:
        """Wie load(), ohne Datei aber mit den eingebauten Defaults."""
        source = Path(path) if path else self.DEFAULT_CONFIG
        if source.is_file():
            return self.load(source)
        from config.defaults import default_distribution_config
        logger.info(f"{source} fehlt, Standardwerte werden verwendet")
        return default_distribution_config()

    # ─── Schreiben ───

    def save(self, config: DistributionConfig, path: Optional[Path] = None) -> None:
        """Schreibt die Konfiguration mit Kommentaren als YAML."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        header = (
            "# Klasseneinteilung: Konfiguration\n"
            f"# {config.school_name}, gespeichert am {date.today().strftime('%d.%m.%Y')}\n\n"
        )
        with open(target, "w", encoding="utf-8") as f:
            f.write(header)
            _yaml().dump(self._to_commented_map(config), f)

        logger.debug(f"Konfiguration nach {target} geschrieben")
        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _to_commented_map(self, config: DistributionConfig) -> CommentedMap:
        data = config.model_dump(mode="json")
        weights = CommentedMap(data.pop("cost_weights"))
        for key, note in _WEIGHT_NOTES.items():
            weights.yaml_add_eol_comment(note, key)

        cm = CommentedMap(data)
        cm["cost_weights"] = weights
        cm["import_columns"] = CommentedMap(cm["import_columns"])
        for key, (section, note) in _FIELD_NOTES.items():
            cm.yaml_set_comment_before_after_key(key, before=f"\n{section}: {note}")
        return cm

    # ─── Interaktiv ───

    def edit_interactive(self, config: DistributionConfig) -> DistributionConfig:
        """Menü zum Ändern einzelner Bereiche; "0" speichert und beendet."""
        menu: dict[str, tuple[str, Callable[[DistributionConfig], DistributionConfig]]] = {
            "1": ("Schule & Klassenanzahl", self._edit_school),
            "2": ("Zufalls-Seed", self._edit_seed),
            "3": ("Kostengewichte", self._edit_weights),
            "4": ("Import-Spalten", self._edit_columns),
        }
        while True:
            console.print(Panel("[bold]Konfiguration bearbeiten[/bold]", border_style="cyan"))
            for key, (title, _) in menu.items():
                console.print(f"  [bold]{key}.[/bold] {title}")
            console.print("  [bold]0.[/bold] Speichern und beenden")

            choice = Prompt.ask("Auswahl", choices=["0", *menu], default="0")
            if choice == "0":
                self.save(config)
                return config
            _, handler = menu[choice]
            try:
                config = handler(config)
            except ValidationError as e:
                console.print(f"[red]Eingabe verworfen:[/red]\n{_format_errors(e)}")

    def _edit_school(self, config: DistributionConfig) -> DistributionConfig:
        from config.wizard import _wizard_school
        name, num_classes, prefix = _wizard_school(config)
        return DistributionConfig.model_validate({
            **config.model_dump(),
            "school_name": name,
            "num_classes": num_classes,
            "class_label_prefix": prefix,
        })

    def _edit_seed(self, config: DistributionConfig) -> DistributionConfig:
        from config.wizard import _wizard_seed
        return config.model_copy(update={"seed": _wizard_seed(config.seed)})

    def _edit_weights(self, config: DistributionConfig) -> DistributionConfig:
        from config.wizard import _wizard_weights
        cw: CostWeights = config.cost_weights
        table = Table(title="Aktuelle Gewichte", box=box.SIMPLE)
        table.add_column("Merkmal", style="bold")
        table.add_column("Gewicht", justify="right")
        for key, value in cw.model_dump().items():
            table.add_row(_WEIGHT_NOTES.get(key, key), f"{value:g}")
        console.print(table)
        return config.model_copy(update={"cost_weights": _wizard_weights(cw)})

    def _edit_columns(self, config: DistributionConfig) -> DistributionConfig:
        current: ImportColumns = config.import_columns
        answers = {
            field: Prompt.ask(f"Spalte für '{field}'", default=header)
            for field, header in current.as_mapping().items()
        }
        return config.model_copy(update={"import_columns": ImportColumns(**answers)})
