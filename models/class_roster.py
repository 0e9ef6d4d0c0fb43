"""Ergebnis-Modelle der Klasseneinteilung (Pydantic v2)."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel

from models.pairing_rule import PairingRule
from models.student import StudentRecord


class ClassRoster(BaseModel):
    """Eine fertige Klasse: einer der num_classes Ausgabe-Plätze."""

    index: int                     # 0-basiert
    label: str                     # "Klasse 1"
    students: list[StudentRecord] = []

    @property
    def size(self) -> int:
        return len(self.students)

    @property
    def full_names(self) -> list[str]:
        return [s.full_name for s in self.students]


class RuleResolutionWarning(BaseModel):
    """Eine Regel, die nicht aufgelöst werden konnte und verworfen wurde."""

    rule: PairingRule
    reason: Literal["unknown_name", "ambiguous_name"]
    names: list[str]      # betroffene Namen der Regel
    message: str


class AllocationResult(BaseModel):
    """Vollständige Einteilung: genau num_classes Klassen (evtl. leere)."""

    strategy: Literal["unconstrained", "constrained"]
    classes: list[ClassRoster]
    groups: list[list[str]] = []   # Regel-Gruppen in Platzierungsreihenfolge
    warnings: list[RuleResolutionWarning] = []
    seed: Optional[int] = None

    @property
    def num_classes(self) -> int:
        return len(self.classes)

    @property
    def class_sizes(self) -> list[int]:
        return [c.size for c in self.classes]

    @property
    def total_students(self) -> int:
        return sum(self.class_sizes)

    def non_empty_classes(self) -> list[ClassRoster]:
        return [c for c in self.classes if c.students]

    def class_of(self, full_name: str) -> Optional[int]:
        """Index der Klasse, in der der Schüler gelandet ist (None = nicht gefunden)."""
        for c in self.classes:
            if full_name in c.full_names:
                return c.index
        return None

    def save_json(self, path: Path) -> None:
        """Speichert die Einteilung als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "AllocationResult":
        """Lädt eine gespeicherte Einteilung aus JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Einteilung nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
