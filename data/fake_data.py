"""Testdaten-Generator für die Klasseneinteilung.

Erzeugt realistische Anmeldelisten eines 5. Jahrgangs mit absichtlichen
Häufungen, an denen sich das Kostenmodell beweisen muss:
  1. Grundschul-Cluster: zwei große Zubringer-Grundschulen stellen ~50 %
  2. Einige Einträge ohne Grundschule (→ "Unknown")
  3. BG-Gutachten nur bei ~15 % der Kinder, in wenigen Kategorien
  4. Freundes-Regeln bevorzugt innerhalb derselben Grundschule
"""

import csv
import random
from pathlib import Path
from typing import Optional

from config.schema import ImportColumns
from models.pairing_rule import PairingRule
from models.student import StudentRecord

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES_M = [
    "Ben", "Paul", "Leon", "Finn", "Elias", "Jonas", "Luis", "Noah",
    "Felix", "Lukas", "Henry", "Emil", "Anton", "Theo", "Jakob", "Max",
    "Yusuf", "Mats", "Karl", "Oskar", "Levi", "Milan", "Tom", "Moritz",
]

_FIRST_NAMES_F = [
    "Mia", "Emma", "Hannah", "Sofia", "Lina", "Emilia", "Marie", "Lea",
    "Clara", "Ella", "Ida", "Lena", "Frieda", "Mila", "Greta", "Lotta",
    "Zoe", "Nele", "Paula", "Amelie", "Luisa", "Romy", "Elif", "Johanna",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch",
    "Bauer", "Richter", "Klein", "Wolf", "Schröder", "Neumann",
    "Schwarz", "Zimmermann", "Braun", "Krüger", "Hofmann", "Hartmann",
    "Lange", "Schmitt", "Werner", "Schmitz", "Krause", "Meier",
    "Lehmann", "Yilmaz", "Kaiser", "Fuchs", "Berger", "Roth",
]

# ─── Grundschulen (gewichtet) ─────────────────────────────────────────────────

_SCHOOLS: list[tuple[str, int]] = [
    ("GS Am Park", 25),
    ("GS Lindenweg", 22),
    ("GS Sonnenschein", 12),
    ("GS Kirchplatz", 10),
    ("Montessori-GS", 8),
    ("GS Rheinaue", 8),
    ("", 5),            # keine Angabe
]

# ─── BG-Gutachten (gewichtet, leer = kein Gutachten) ─────────────────────────

_CATEGORIES: list[tuple[str, int]] = [
    ("", 85),
    ("LRS", 6),
    ("ESE", 4),
    ("Sprache", 3),
    ("Lernen", 2),
]


class FakeRosterGenerator:
    """Generiert Schülerlisten und Freundes-Regeln für Demos und Tests."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)

    def _weighted(self, options: list[tuple[str, int]]) -> str:
        values = [v for v, _ in options]
        weights = [w for _, w in options]
        return self.rng.choices(values, weights=weights, k=1)[0]

    def generate_students(self, count: int = 120) -> list[StudentRecord]:
        """Erzeugt count Schüler mit eindeutigen vollen Namen."""
        max_unique = (len(_FIRST_NAMES_M) + len(_FIRST_NAMES_F)) * len(_LAST_NAMES)
        if count > max_unique:
            raise ValueError(f"Höchstens {max_unique} eindeutige Namen möglich.")

        used: set[str] = set()
        students: list[StudentRecord] = []
        while len(students) < count:
            gender = self.rng.choice(["m", "w"])
            first = self.rng.choice(_FIRST_NAMES_M if gender == "m" else _FIRST_NAMES_F)
            last = self.rng.choice(_LAST_NAMES)
            full = f"{first} {last}"
            if full in used:
                continue
            used.add(full)
            students.append(StudentRecord(
                first_name=first,
                last_name=last,
                gender=gender,
                elementary_school=self._weighted(_SCHOOLS),
                assessment_category=self._weighted(_CATEGORIES),
            ))
        return students

    def generate_rules(
        self, students: list[StudentRecord], count: int = 10
    ) -> list[PairingRule]:
        """Erzeugt Freundes-Regeln, bevorzugt zwischen Kindern derselben Grundschule."""
        if len(students) < 2:
            return []
        rules: list[PairingRule] = []
        seen: set[frozenset[str]] = set()
        attempts = 0
        while len(rules) < count and attempts < count * 20:
            attempts += 1
            a = self.rng.choice(students)
            same_school = [
                s for s in students
                if s is not a and s.school_key == a.school_key
            ]
            pool = same_school if same_school and self.rng.random() < 0.7 else students
            b = self.rng.choice(pool)
            key = frozenset((a.full_name, b.full_name))
            if a.full_name == b.full_name or key in seen:
                continue
            seen.add(key)
            rules.append(PairingRule(student_a=a.full_name, student_b=b.full_name))
        return rules

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def write_csv(
        self,
        students: list[StudentRecord],
        path: Path,
        columns: Optional[ImportColumns] = None,
    ) -> None:
        """Schreibt die Liste im Importformat (UTF-8, Komma-getrennt)."""
        columns = columns or ImportColumns()
        mapping = columns.as_mapping()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(list(mapping.values()))
            for s in students:
                writer.writerow([getattr(s, field) for field in mapping])

    def print_summary(self, students: list[StudentRecord], rules: list[PairingRule]) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from collections import Counter
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Testdaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        genders = Counter(s.gender for s in students)
        schools = Counter(s.elementary_school or "Unknown" for s in students)
        with_bg = sum(1 for s in students if s.assessment_category)
        table.add_row("Schüler", str(len(students)),
                      f"{genders.get('m', 0)} m, {genders.get('w', 0)} w")
        table.add_row("Grundschulen", str(len(schools)),
                      ", ".join(f"{k} {v}" for k, v in schools.most_common(3)))
        table.add_row("BG-Gutachten", str(with_bg), "")
        table.add_row("Regeln", str(len(rules)), "")
        console.print(table)
