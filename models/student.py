"""Datenmodell für einen Schüler / eine Schülerin (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict, field_validator

from config.defaults import UNKNOWN_LABEL


class StudentRecord(BaseModel):
    """Ein Datensatz der Anmeldeliste. Nach dem Laden unveränderlich.

    Leere Angaben sind immer "" (nie None). Die Identität für Regeln ist
    der volle Name "Vorname Nachname" (exakt, Groß-/Kleinschreibung zählt).
    """

    model_config = ConfigDict(frozen=True)

    first_name: str = ""
    last_name: str = ""
    gender: str = ""                # kanonisch "m"/"w", aber frei
    elementary_school: str = ""     # Grundschule
    assessment_category: str = ""   # BG-Gutachten

    @field_validator("*", mode="before")
    @classmethod
    def _normalize(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    # ─── Vergleichsschlüssel (case-insensitive) ───

    @property
    def school_key(self) -> str:
        """Grundschule klein geschrieben; leer zählt als "Unknown"."""
        return (self.elementary_school or UNKNOWN_LABEL).lower()

    @property
    def category_key(self) -> str:
        """BG-Gutachten klein geschrieben; leer zählt als "Unknown"."""
        return (self.assessment_category or UNKNOWN_LABEL).lower()

    @property
    def gender_key(self) -> str:
        """Geschlecht klein geschrieben; leer bleibt leer (wird nie verglichen)."""
        return self.gender.lower()

    def as_row(self) -> list[str]:
        """Tabellenzeile in der Reihenfolge von STUDENT_TABLE_HEADERS."""
        return [
            self.first_name,
            self.last_name,
            self.gender,
            self.elementary_school,
            self.assessment_category,
        ]
