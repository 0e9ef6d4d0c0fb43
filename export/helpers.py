"""Gemeinsame Hilfsfunktionen für Konsolen-, Excel- und PDF-Export."""

from datetime import date

from models.class_roster import AllocationResult

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "header":   "4472C4",
    "alt_row":  "D6E4F0",
    "group":    "FFF2B3",   # Schüler aus einer Regel-Gruppe
    "warning":  "FF9999",
    "stats":    "E0E0E0",
}


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Wandelt RRGGBB-String in (r, g, b)-Tupel um."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def grouped_names(result: AllocationResult) -> set[str]:
    """Alle Namen, die über Regeln mit mindestens einem anderen Schüler verbunden sind."""
    return {name for group in result.groups for name in group}


def strategy_label(result: AllocationResult) -> str:
    """Lesbarer Name der verwendeten Strategie."""
    if result.strategy == "constrained":
        return "mit Regeln"
    return "ohne Regeln (Zufall)"
