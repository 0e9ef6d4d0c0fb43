"""Affinitäts-Kostenmodell für die Platzierung in eine Klasse.

cost = w_schule·(gleiche Grundschule) + w_geschlecht·(gleiches Geschlecht)
     + w_bg·(gleiches BG-Gutachten)

Vergleiche sind case-insensitive. Leere Grundschule/Gutachten zählen als
"Unknown", leeres Geschlecht wird nie verglichen.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from config.schema import CostWeights
from models.student import StudentRecord


@dataclass
class ClassTally:
    """Laufende Merkmals-Zählung einer Klasse während der Einteilung.

    Wird bei jeder Aufnahme aktualisiert; Kostenabfragen sind damit
    Tabellen-Lookups statt Scans über alle Mitglieder.
    """

    students: list[StudentRecord] = field(default_factory=list)
    schools: Counter = field(default_factory=Counter)
    genders: Counter = field(default_factory=Counter)
    categories: Counter = field(default_factory=Counter)

    @property
    def size(self) -> int:
        return len(self.students)

    def add(self, student: StudentRecord) -> None:
        self.students.append(student)
        self.schools[student.school_key] += 1
        if student.gender_key:
            self.genders[student.gender_key] += 1
        self.categories[student.category_key] += 1

    def extend(self, students: Iterable[StudentRecord]) -> None:
        for s in students:
            self.add(s)


Members = Union[ClassTally, Sequence[StudentRecord]]


class CostModel:
    """Bewertet, wie gut ein Schüler (oder eine Gruppe) in eine Klasse passt.

    Niedriger = besser (weniger Gleichartigkeit).
    """

    def __init__(self, weights: Optional[CostWeights] = None) -> None:
        self.weights = weights or CostWeights()

    def cost(self, student: StudentRecord, members: Members) -> float:
        """Kosten, student zu den bisherigen Mitgliedern hinzuzufügen."""
        if isinstance(members, ClassTally):
            return self.cost_from_tally(student, members)
        same_school = same_gender = same_category = 0
        for other in members:
            if student.school_key == other.school_key:
                same_school += 1
            if student.gender_key and other.gender_key \
                    and student.gender_key == other.gender_key:
                same_gender += 1
            if student.category_key == other.category_key:
                same_category += 1
        return self._weighted(same_school, same_gender, same_category)

    def cost_from_tally(self, student: StudentRecord, tally: ClassTally) -> float:
        """Wie cost(), aber in O(1) über die laufende Zählung."""
        same_gender = tally.genders[student.gender_key] if student.gender_key else 0
        return self._weighted(
            tally.schools[student.school_key],
            same_gender,
            tally.categories[student.category_key],
        )

    def group_cost(self, group: Iterable[StudentRecord], members: Members) -> float:
        """Summe der Einzelkosten aller Gruppenmitglieder (nicht normiert).

        Die Mitglieder werden gegen den Klassenstand VOR der Aufnahme
        bewertet, nicht gegeneinander.
        """
        return sum(self.cost(s, members) for s in group)

    def _weighted(self, school: int, gender: int, category: int) -> float:
        w = self.weights
        return w.school * school + w.gender * gender + w.category * category
