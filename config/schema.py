from pydantic import BaseModel, Field, field_validator
from typing import Optional


# ─── KOSTENMODELL ───

class CostWeights(BaseModel):
    """Gewichte des Affinitäts-Kostenmodells.

    Höheres Gewicht = gleiche Merkmale in einer Klasse werden stärker bestraft.
    Reihenfolge der Priorität: Grundschul-Cliquen aufbrechen, dann
    Geschlechterbalance, dann Verteilung der BG-Gutachten.
    """
    # Strafe pro Mitschüler derselben Grundschule
    school: float = Field(3.0, ge=0,
        description="Gewicht: gleiche Grundschule")
    # Strafe pro Mitschüler desselben Geschlechts
    gender: float = Field(2.0, ge=0,
        description="Gewicht: gleiches Geschlecht")
    # Strafe pro Mitschüler mit derselben Gutachten-Kategorie
    category: float = Field(1.0, ge=0,
        description="Gewicht: gleiche BG-Gutachten-Kategorie")


# ─── IMPORT-SPALTEN ───

class ImportColumns(BaseModel):
    """Spaltenüberschriften der Schülerliste (CSV/Excel).

    Der Abgleich erfolgt ohne Beachtung von Groß-/Kleinschreibung und
    führenden/abschließenden Leerzeichen.
    """
    first_name: str = Field("Vorname", description="Spalte Vorname")
    last_name: str = Field("Nachname", description="Spalte Nachname")
    gender: str = Field("m/w", description="Spalte Geschlecht")
    elementary_school: str = Field("Grundschule", description="Spalte Grundschule")
    assessment_category: str = Field("BG Gutachten", description="Spalte BG-Gutachten")

    @field_validator("*")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Spaltenname darf nicht leer sein.")
        return v.strip()

    def as_mapping(self) -> dict[str, str]:
        """Feldname → Spaltenüberschrift."""
        return self.model_dump()


# ─── GESAMT-CONFIG ───

class DistributionConfig(BaseModel):
    """Gesamtkonfiguration der Klasseneinteilung."""
    # Name der Schule (erscheint in Exporten)
    school_name: str = Field("Muster-Schule",
        description="Name der Schule")
    # Anzahl der zu bildenden Klassen
    num_classes: int = Field(5, ge=1, le=30,
        description="Anzahl Klassen")
    # Zufalls-Seed; None = bei jedem Lauf neu aus der Uhrzeit
    seed: Optional[int] = Field(None,
        description="Zufalls-Seed (leer = nicht reproduzierbar)")
    # Präfix für Klassenbezeichnungen ("Klasse 1", "Klasse 2", ...)
    class_label_prefix: str = Field("Klasse",
        description="Präfix der Klassenbezeichnung")
    # Gewichte des Kostenmodells
    cost_weights: CostWeights = Field(default_factory=CostWeights)
    # Spaltenüberschriften für den Import
    import_columns: ImportColumns = Field(default_factory=ImportColumns)

    def class_label(self, index: int) -> str:
        """Bezeichnung der Klasse mit 0-basiertem Index."""
        return f"{self.class_label_prefix} {index + 1}"
