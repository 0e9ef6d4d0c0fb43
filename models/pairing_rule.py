"""Datenmodell für Paar-Regeln "muss in dieselbe Klasse" (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class PairingRule(BaseModel):
    """Zwei Schüler (per vollem Namen), die in dieselbe Klasse müssen.

    Die Namen werden erst bei der Einteilung gegen die Liste aufgelöst.
    """

    model_config = ConfigDict(frozen=True)

    student_a: str   # "Vorname Nachname"
    student_b: str

    @field_validator("student_a", "student_b")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name in einer Regel darf nicht leer sein.")
        return v

    @model_validator(mode="after")
    def _distinct(self):
        if self.student_a == self.student_b:
            raise ValueError(
                f"Regel verbindet '{self.student_a}' mit sich selbst."
            )
        return self

    @classmethod
    def parse(cls, text: str) -> "PairingRule":
        """Parst die CLI-Form "Anna Alt=Bob Berg"."""
        if "=" not in text:
            raise ValueError(
                f"Regel '{text}' ungültig. Erwartet: \"Vorname Nachname=Vorname Nachname\"."
            )
        a, _, b = text.partition("=")
        return cls(student_a=a.strip(), student_b=b.strip())

    def describe(self) -> str:
        return f"{self.student_a} und {self.student_b} sollen in dieselbe Klasse"
