"""Nachprüfung einer fertigen Einteilung.

Sicherheitsnetz unabhängig vom Algorithmus: Vollständigkeit,
Ausgeglichenheit und Einhaltung aller auflösbaren Regeln.
"""

from collections import Counter
from typing import Literal, Sequence

from pydantic import BaseModel

from models.class_roster import AllocationResult
from models.pairing_rule import PairingRule
from models.student import StudentRecord
from solver.grouping import ConstraintGrouper


class ValidationViolation(BaseModel):
    """Eine einzelne Verletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "pairing"
    description: str
    entity: str          # Klasse oder Schülername


class ValidationReport(BaseModel):
    """Ergebnis der Nachprüfung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Einteilung-Prüfung", border_style="cyan"))

        if not self.violations:
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Prüfung", width=14)
        table.add_column("Betrifft", width=20)
        table.add_column("Beschreibung")
        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class AllocationValidator:
    """Prüft ein AllocationResult gegen Schülerliste und Regeln."""

    def validate(
        self,
        result: AllocationResult,
        students: Sequence[StudentRecord],
        rules: Sequence[PairingRule] = (),
    ) -> ValidationReport:
        violations: list[ValidationViolation] = []
        violations.extend(self._check_completeness(result, students))
        violations.extend(self._check_balance(result))
        violations.extend(self._check_pairing(result, students, rules))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_completeness(
        self, result: AllocationResult, students: Sequence[StudentRecord]
    ) -> list[ValidationViolation]:
        """Jeder Schüler genau einmal, Summe der Klassengrößen = Listengröße."""
        violations: list[ValidationViolation] = []
        expected = Counter(students)
        placed = Counter(s for c in result.classes for s in c.students)

        for student, n in expected.items():
            got = placed.get(student, 0)
            if got != n:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="completeness",
                    entity=student.full_name,
                    description=f"{n}× in der Liste, aber {got}× eingeteilt",
                ))
        for student in placed.keys() - expected.keys():
            violations.append(ValidationViolation(
                severity="error",
                constraint="completeness",
                entity=student.full_name,
                description="eingeteilt, aber nicht in der Schülerliste",
            ))
        return violations

    def _check_balance(self, result: AllocationResult) -> list[ValidationViolation]:
        """Größenunterschied ≤ 1 (ohne Regeln Pflicht, mit Regeln nur Hinweis)."""
        sizes = result.class_sizes
        if not sizes or max(sizes) - min(sizes) <= 1:
            return []
        severity = "error" if result.strategy == "unconstrained" else "warning"
        return [ValidationViolation(
            severity=severity,
            constraint="balance",
            entity="alle Klassen",
            description=(
                f"Klassengrößen {sizes}: Unterschied {max(sizes) - min(sizes)} > 1"
            ),
        )]

    def _check_pairing(
        self,
        result: AllocationResult,
        students: Sequence[StudentRecord],
        rules: Sequence[PairingRule],
    ) -> list[ValidationViolation]:
        """Jede auflösbare Regel: beide Schüler in derselben Klasse."""
        violations: list[ValidationViolation] = []
        grouper = ConstraintGrouper(students)
        for rule in rules:
            if len(grouper.resolve(rule.student_a)) != 1 \
                    or len(grouper.resolve(rule.student_b)) != 1:
                continue
            ca = result.class_of(rule.student_a)
            cb = result.class_of(rule.student_b)
            if ca is None or ca != cb:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="pairing",
                    entity=f"{rule.student_a} / {rule.student_b}",
                    description=f"{rule.describe()}, eingeteilt in {ca} und {cb}",
                ))
        return violations
