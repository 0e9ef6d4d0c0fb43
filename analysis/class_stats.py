"""Klassenstatistik für fertige Einteilungen.

Zählt pro Klasse Geschlecht (nur "m"/"w"), Grundschulen und
BG-Gutachten. Die Zählungen sind als dicts zugänglich; format_text()
erzeugt den Textbericht.
"""

from typing import Sequence

from pydantic import BaseModel

from config.defaults import GENDER_VALUES, UNKNOWN_LABEL
from models.class_roster import AllocationResult, ClassRoster
from models.student import StudentRecord


# ─── Metriken-Modelle ─────────────────────────────────────────────────────────

class ClassStatistics(BaseModel):
    """Häufigkeiten einer einzelnen Klasse."""

    label: str
    size: int
    gender: dict[str, int]               # immer {"m": .., "w": ..}
    unrecognized_gender: int = 0         # weder m noch w (inkl. leer)
    elementary_school: dict[str, int]    # Reihenfolge = erstes Auftreten
    assessment_category: dict[str, int]

    def format_text(self) -> str:
        """Textbericht im Format der Klassenstatistik-Ansicht."""
        lines = [
            f"Gender distribution: m = {self.gender['m']}, w = {self.gender['w']}",
            "",
            "Grundschule distribution:",
        ]
        lines += [f"  {k}: {v}" for k, v in self.elementary_school.items()]
        lines += ["", "BG Gutachten distribution:"]
        lines += [f"  {k}: {v}" for k, v in self.assessment_category.items()]
        return "\n".join(lines) + "\n"


def _frequency(values: Sequence[str]) -> dict[str, int]:
    """Case-insensitive Häufigkeiten; Label = erste Schreibweise, leer → Unknown."""
    labels: dict[str, str] = {}
    counts: dict[str, int] = {}
    for raw in values:
        value = raw or UNKNOWN_LABEL
        key = value.lower()
        if key not in labels:
            labels[key] = value
            counts[value] = 0
        counts[labels[key]] += 1
    return counts


# ─── Reporter ─────────────────────────────────────────────────────────────────

class StatsReporter:
    """Berechnet Klassenstatistiken für eine oder alle Klassen."""

    def compute(self, roster: ClassRoster) -> ClassStatistics:
        """Statistik einer Klasse."""
        return self.compute_students(roster.label, roster.students)

    def compute_students(
        self, label: str, students: Sequence[StudentRecord]
    ) -> ClassStatistics:
        gender = {g: 0 for g in GENDER_VALUES}
        unrecognized = 0
        for s in students:
            if s.gender_key in gender:
                gender[s.gender_key] += 1
            else:
                unrecognized += 1

        return ClassStatistics(
            label=label,
            size=len(students),
            gender=gender,
            unrecognized_gender=unrecognized,
            elementary_school=_frequency([s.elementary_school for s in students]),
            assessment_category=_frequency([s.assessment_category for s in students]),
        )

    def summarize(self, result: AllocationResult) -> list[ClassStatistics]:
        """Eine Statistik pro nicht-leerer Klasse, in Klassenreihenfolge."""
        return [self.compute(c) for c in result.non_empty_classes()]

    def format_report(self, stats: Sequence[ClassStatistics]) -> str:
        """Gesamtbericht aller Klassen als Text."""
        parts = []
        for st in stats:
            parts.append(f"\n{st.label}:\n{st.format_text()}")
        return "".join(parts)

    def print_rich(self, stats: Sequence[ClassStatistics]) -> None:
        """Gibt die Statistiken formatiert über Rich aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()

        overview = Table(title="Klassenstatistiken", box=box.ROUNDED)
        overview.add_column("Klasse", style="bold")
        overview.add_column("Schüler", justify="right")
        overview.add_column("m", justify="right")
        overview.add_column("w", justify="right")
        overview.add_column("sonst.", justify="right")
        overview.add_column("Grundschulen")
        overview.add_column("BG-Gutachten")
        for st in stats:
            overview.add_row(
                st.label,
                str(st.size),
                str(st.gender["m"]),
                str(st.gender["w"]),
                f"[yellow]{st.unrecognized_gender}[/yellow]" if st.unrecognized_gender else "0",
                ", ".join(f"{k} {v}" for k, v in st.elementary_school.items()),
                ", ".join(f"{k} {v}" for k, v in st.assessment_category.items()),
            )
        console.print(overview)
