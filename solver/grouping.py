"""Regel-Gruppierung per Union-Find.

Fasst alle Paar-Regeln transitiv zu maximalen Gruppen zusammen, die
geschlossen in eine Klasse müssen. Wird bei jeder Einteilung neu berechnet.
"""

import logging
from collections import defaultdict
from typing import Sequence

from pydantic import BaseModel

from models.pairing_rule import PairingRule
from models.student import StudentRecord
from models.class_roster import RuleResolutionWarning

logger = logging.getLogger(__name__)


class ConstraintGroup(BaseModel):
    """Maximale Menge von Schüler-Indizes, die über Regeln verbunden sind."""

    members: list[int]     # Indizes in die Schülerliste, aufsteigend

    @property
    def size(self) -> int:
        return len(self.members)

    def students(self, roster: Sequence[StudentRecord]) -> list[StudentRecord]:
        return [roster[i] for i in self.members]


class UnionFind:
    """Disjunkte Mengen über 0..n-1 mit Pfadkompression und Union-by-Size.

    find() ist iterativ, damit große Listen keine Rekursionstiefe erreichen.
    """

    def __init__(self, n: int) -> None:
        self.parent = list(range(n))
        self.size = [1] * n

    def find(self, i: int) -> int:
        root = i
        while self.parent[root] != root:
            root = self.parent[root]
        # Pfadkompression
        while self.parent[i] != root:
            self.parent[i], i = root, self.parent[i]
        return root

    def union(self, i: int, j: int) -> None:
        root_i = self.find(i)
        root_j = self.find(j)
        if root_i == root_j:
            return
        if self.size[root_i] < self.size[root_j]:
            root_i, root_j = root_j, root_i
        self.parent[root_j] = root_i
        self.size[root_i] += self.size[root_j]


class ConstraintGrouper:
    """Löst Regeln gegen die Schülerliste auf und bildet die Regel-Gruppen.

    Verwendung:
        grouper = ConstraintGrouper(students)
        groups = grouper.build(rules)
        grouper.warnings   # verworfene Regeln
    """

    def __init__(self, students: Sequence[StudentRecord]) -> None:
        self.students = list(students)
        self.warnings: list[RuleResolutionWarning] = []
        self._name_index: dict[str, list[int]] = defaultdict(list)
        for idx, s in enumerate(self.students):
            self._name_index[s.full_name].append(idx)

    def resolve(self, name: str) -> list[int]:
        """Alle Indizes mit exakt diesem vollen Namen (case-sensitive)."""
        return list(self._name_index.get(name, []))

    def build(self, rules: Sequence[PairingRule]) -> list[ConstraintGroup]:
        """Bildet die Gruppen, größte zuerst.

        Gleich große Gruppen behalten die Reihenfolge ihres ersten Mitglieds
        in der Schülerliste. Nicht auflösbare Regeln werden verworfen und
        in self.warnings gesammelt.
        """
        self.warnings = []
        uf = UnionFind(len(self.students))

        for rule in rules:
            pair = self._resolve_rule(rule)
            if pair is not None:
                uf.union(*pair)

        by_root: dict[int, list[int]] = {}
        for idx in range(len(self.students)):
            by_root.setdefault(uf.find(idx), []).append(idx)

        # dict-Reihenfolge = erstes Auftreten; sorted() ist stabil
        groups = sorted(by_root.values(), key=len, reverse=True)
        linked = sum(1 for g in groups if len(g) > 1)
        logger.debug(
            f"Gruppierung: {len(groups)} Gruppen, davon {linked} mit Regeln, "
            f"{len(self.warnings)} Regeln verworfen"
        )
        return [ConstraintGroup(members=g) for g in groups]

    def _resolve_rule(self, rule: PairingRule):
        unknown: list[str] = []
        ambiguous: list[str] = []
        indices: list[int] = []
        for name in (rule.student_a, rule.student_b):
            hits = self.resolve(name)
            if not hits:
                unknown.append(name)
            elif len(hits) > 1:
                ambiguous.append(name)
            else:
                indices.append(hits[0])

        if unknown:
            self._warn(rule, "unknown_name", unknown,
                       f"Regel verworfen: {', '.join(unknown)} nicht in der Schülerliste")
            return None
        if ambiguous:
            self._warn(rule, "ambiguous_name", ambiguous,
                       f"Regel verworfen: {', '.join(ambiguous)} mehrfach in der Schülerliste")
            return None
        return indices[0], indices[1]

    def _warn(self, rule: PairingRule, reason: str, names: list[str], message: str) -> None:
        logger.warning(f"{message} ({rule.describe()})")
        self.warnings.append(RuleResolutionWarning(
            rule=rule, reason=reason, names=names, message=message,
        ))


def build_groups(
    students: Sequence[StudentRecord], rules: Sequence[PairingRule]
) -> tuple[list[ConstraintGroup], list[RuleResolutionWarning]]:
    """Kurzform: Gruppen und Warnungen in einem Aufruf."""
    grouper = ConstraintGrouper(students)
    groups = grouper.build(rules)
    return groups, grouper.warnings
