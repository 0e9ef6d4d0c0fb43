"""Klasseneinteilung: zwei austauschbare Strategien.

  - UnconstrainedAllocator: zufällige Reihenfolge, jeweils in die kleinste
    Klasse (Klassengrößen unterscheiden sich um höchstens 1).
  - ConstrainedAllocator:  Regel-Gruppen (größte zuerst) geschlossen in die
    Klasse mit minimaler Größe und minimalen Gruppenkosten.

Beide liefern entweder eine vollständige Einteilung in genau num_classes
Klassen oder werfen vorher einen InputError – nie ein Teilergebnis.
"""

import logging
import random
import time
from typing import Optional, Sequence

from config.schema import CostWeights
from models.class_roster import AllocationResult, ClassRoster, RuleResolutionWarning
from models.pairing_rule import PairingRule
from models.student import StudentRecord
from solver.cost import ClassTally, CostModel
from solver.grouping import ConstraintGrouper

logger = logging.getLogger(__name__)


# ─── Fehler ───────────────────────────────────────────────────────────────────

class InputError(ValueError):
    """Ungültige Eingabe; die Einteilung wurde nicht begonnen."""


class EmptyRosterError(InputError):
    """Keine Schülerdaten vorhanden."""

    def __init__(self, message: str = "Keine Schülerdaten verfügbar.") -> None:
        super().__init__(message)


class InvalidClassCountError(InputError):
    """Klassenanzahl ist keine positive ganze Zahl."""

    def __init__(self, num_classes) -> None:
        super().__init__(
            f"Ungültige Klassenanzahl: {num_classes!r}. Erlaubt sind ganze Zahlen ≥ 1."
        )
        self.num_classes = num_classes


def validate_input(students: Sequence[StudentRecord], num_classes: int) -> None:
    """Prüft die Vorbedingungen; wirft EmptyRosterError / InvalidClassCountError."""
    if not students:
        raise EmptyRosterError()
    if isinstance(num_classes, bool) or not isinstance(num_classes, int) or num_classes < 1:
        raise InvalidClassCountError(num_classes)


# ─── Basisklasse ──────────────────────────────────────────────────────────────

class Allocator:
    """Gemeinsamer Rahmen beider Strategien."""

    strategy: str = ""

    def __init__(self, num_classes: int, label_prefix: str = "Klasse") -> None:
        self.num_classes = num_classes
        self.label_prefix = label_prefix

    def _new_tallies(self) -> list[ClassTally]:
        return [ClassTally() for _ in range(self.num_classes)]

    def _build_result(
        self,
        tallies: list[ClassTally],
        groups: Optional[list[list[str]]] = None,
        warnings: Optional[list[RuleResolutionWarning]] = None,
        seed: Optional[int] = None,
    ) -> AllocationResult:
        classes = [
            ClassRoster(
                index=i,
                label=f"{self.label_prefix} {i + 1}",
                students=list(t.students),
            )
            for i, t in enumerate(tallies)
        ]
        return AllocationResult(
            strategy=self.strategy,
            classes=classes,
            groups=groups or [],
            warnings=warnings or [],
            seed=seed,
        )


# ─── Ohne Regeln ──────────────────────────────────────────────────────────────

class UnconstrainedAllocator(Allocator):
    """Ausgeglichene Zufallsverteilung.

    Verwendung:
        allocator = UnconstrainedAllocator(num_classes=3, seed=42)
        result = allocator.allocate(students)

    Ohne rng und seed wird bei jedem Aufruf aus der Uhrzeit geseedet; der
    verwendete Seed steht im Ergebnis, damit sich der Lauf wiederholen lässt.
    Mit injiziertem rng bleibt der Seed im Ergebnis leer.
    """

    strategy = "unconstrained"

    def __init__(
        self,
        num_classes: int,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        label_prefix: str = "Klasse",
    ) -> None:
        super().__init__(num_classes, label_prefix)
        self.rng = rng
        self.seed = seed

    def allocate(self, students: Sequence[StudentRecord]) -> AllocationResult:
        validate_input(students, self.num_classes)

        rng, seed = self._random_source()
        order = list(students)
        rng.shuffle(order)

        tallies = self._new_tallies()
        for student in order:
            # kleinste Klasse, bei Gleichstand niedrigster Index
            target = min(range(self.num_classes), key=lambda i: (tallies[i].size, i))
            tallies[target].add(student)

        logger.info(
            f"Einteilung ohne Regeln: {len(order)} Schüler → {self.num_classes} Klassen "
            f"(Seed {seed if seed is not None else 'extern'})"
        )
        return self._build_result(tallies, seed=seed)

    def _random_source(self) -> tuple[random.Random, Optional[int]]:
        # ein fremder Generator lässt sich nicht über einen Seed wiederholen
        if self.rng is not None:
            return self.rng, None
        seed = self.seed if self.seed is not None else time.time_ns() % (2 ** 32)
        return random.Random(seed), seed


# ─── Mit Regeln ───────────────────────────────────────────────────────────────

class ConstrainedAllocator(Allocator):
    """Gruppenbewusste Verteilung mit Kostenminimierung.

    Jede Regel-Gruppe wird geschlossen platziert; Kandidaten sind alle
    Klassen mit aktuell minimaler Größe, davon gewinnt die mit den
    geringsten Gruppenkosten (bei Gleichstand die mit kleinstem Index).
    Große Gruppen können eine Klasse deutlich überfüllen; nachträglich
    ausgeglichen wird nicht.
    """

    strategy = "constrained"

    def __init__(
        self,
        num_classes: int,
        weights: Optional[CostWeights] = None,
        label_prefix: str = "Klasse",
    ) -> None:
        super().__init__(num_classes, label_prefix)
        self.cost_model = CostModel(weights)

    def allocate(
        self, students: Sequence[StudentRecord], rules: Sequence[PairingRule]
    ) -> AllocationResult:
        validate_input(students, self.num_classes)

        grouper = ConstraintGrouper(students)
        groups = grouper.build(rules)

        tallies = self._new_tallies()
        placed_groups: list[list[str]] = []
        for group in groups:
            members = group.students(grouper.students)
            target = self.choose_class(members, tallies)
            tallies[target].extend(members)
            if group.size > 1:
                placed_groups.append([s.full_name for s in members])
                logger.debug(
                    f"Gruppe ({group.size}) → {self.label_prefix} {target + 1}: "
                    f"{', '.join(s.full_name for s in members)}"
                )

        logger.info(
            f"Einteilung mit Regeln: {len(students)} Schüler, {len(groups)} Gruppen "
            f"({len(placed_groups)} verbunden) → {self.num_classes} Klassen"
        )
        return self._build_result(
            tallies, groups=placed_groups, warnings=grouper.warnings,
        )

    def choose_class(self, members: Sequence[StudentRecord], tallies: list[ClassTally]) -> int:
        """Index der Zielklasse für eine Gruppe beim aktuellen Stand."""
        min_size = min(t.size for t in tallies)
        candidates = [i for i, t in enumerate(tallies) if t.size == min_size]
        # min() liefert bei Gleichstand den ersten Kandidaten
        return min(candidates, key=lambda i: self.cost_model.group_cost(members, tallies[i]))


# ─── Einstiegspunkt ───────────────────────────────────────────────────────────

def allocate_classes(
    students: Sequence[StudentRecord],
    rules: Sequence[PairingRule],
    num_classes: int,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    weights: Optional[CostWeights] = None,
    label_prefix: str = "Klasse",
) -> AllocationResult:
    """Wählt die Strategie: sobald Regeln existieren, wird mit Regeln eingeteilt.

    Das gilt auch, wenn sich keine Regel auflösen lässt – dann ist jede
    Gruppe ein Einzelschüler und die Verteilung deterministisch.
    """
    if rules:
        return ConstrainedAllocator(
            num_classes, weights=weights, label_prefix=label_prefix,
        ).allocate(students, rules)
    return UnconstrainedAllocator(
        num_classes, rng=rng, seed=seed, label_prefix=label_prefix,
    ).allocate(students)
