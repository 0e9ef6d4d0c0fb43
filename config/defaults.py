from config.schema import (
    CostWeights,
    DistributionConfig,
    ImportColumns,
)


def default_cost_weights() -> CostWeights:
    """Standard-Gewichte: Grundschule 3, Geschlecht 2, BG-Gutachten 1."""
    return CostWeights(school=3.0, gender=2.0, category=1.0)


def default_import_columns() -> ImportColumns:
    """Spaltenüberschriften der üblichen Anmeldeliste."""
    return ImportColumns(
        first_name="Vorname",
        last_name="Nachname",
        gender="m/w",
        elementary_school="Grundschule",
        assessment_category="BG Gutachten",
    )


def default_distribution_config() -> DistributionConfig:
    """Komplette Default-Konfiguration (5 Klassen, keine feste Saat)."""
    return DistributionConfig(
        school_name="Muster-Schule",
        num_classes=5,
        seed=None,
        class_label_prefix="Klasse",
        cost_weights=default_cost_weights(),
        import_columns=default_import_columns(),
    )


# Platzhalter für leere Grundschul-/Gutachten-Angaben in Statistiken
UNKNOWN_LABEL = "Unknown"

# Anerkannte Geschlechtswerte in der Statistik (case-insensitive)
GENDER_VALUES: tuple[str, ...] = ("m", "w")

# Spaltenüberschriften für Regeldateien
RULE_COLUMNS: tuple[str, str] = ("Schüler A", "Schüler B")

# Spaltenüberschriften für Klassenlisten (Anzeige und Export)
STUDENT_TABLE_HEADERS: list[str] = [
    "Vorname", "Nachname", "Geschlecht", "Grundschule", "BG-Gutachten",
]
