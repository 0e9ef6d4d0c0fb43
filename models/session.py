"""AllocationSession: expliziter Kontext für eine Einteilungs-Sitzung."""

import random
from typing import Iterable, Optional

from config.schema import CostWeights
from models.class_roster import AllocationResult
from models.pairing_rule import PairingRule
from models.student import StudentRecord


class AllocationSession:
    """Hält Schülerliste, Regeln und Klassenanzahl einer Sitzung.

    Die Schülerliste ist nach dem Anlegen unveränderlich. Regeln dürfen
    zwischen zwei Einteilungen ergänzt werden, nicht während einer läuft.
    Jede Einteilung rechnet Gruppen und Klassen komplett neu.
    """

    def __init__(
        self,
        students: Iterable[StudentRecord],
        num_classes: int,
        rules: Iterable[PairingRule] = (),
        weights: Optional[CostWeights] = None,
        label_prefix: str = "Klasse",
    ) -> None:
        self._students = tuple(students)
        self._rules = list(rules)
        self.num_classes = num_classes
        self.weights = weights
        self.label_prefix = label_prefix
        self._running = False

    @property
    def students(self) -> tuple[StudentRecord, ...]:
        return self._students

    @property
    def rules(self) -> tuple[PairingRule, ...]:
        return tuple(self._rules)

    @property
    def full_names(self) -> list[str]:
        return [s.full_name for s in self._students]

    def add_rule(self, rule: PairingRule) -> None:
        if self._running:
            raise RuntimeError("Regeln können während einer Einteilung nicht geändert werden.")
        self._rules.append(rule)

    def remove_rule(self, index: int) -> PairingRule:
        if self._running:
            raise RuntimeError("Regeln können während einer Einteilung nicht geändert werden.")
        return self._rules.pop(index)

    def allocate(
        self, rng: Optional[random.Random] = None, seed: Optional[int] = None
    ) -> AllocationResult:
        """Führt eine vollständige Einteilung mit dem aktuellen Stand aus."""
        from solver.allocator import allocate_classes

        if self._running:
            raise RuntimeError("Es läuft bereits eine Einteilung in dieser Sitzung.")
        self._running = True
        try:
            return allocate_classes(
                self._students,
                self.rules,
                self.num_classes,
                rng=rng,
                seed=seed,
                weights=self.weights,
                label_prefix=self.label_prefix,
            )
        finally:
            self._running = False
