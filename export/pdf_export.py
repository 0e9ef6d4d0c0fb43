"""PDF-Export der Klassenlisten (fpdf2)."""

from pathlib import Path
from typing import Optional, Sequence

from fpdf import FPDF

from analysis.class_stats import ClassStatistics, StatsReporter
from config.defaults import STUDENT_TABLE_HEADERS
from models.class_roster import AllocationResult, ClassRoster

from export.helpers import COLORS, grouped_names, hex_to_rgb, strategy_label, today_str


def _pdf_safe(text: str) -> str:
    """Ersetzt nicht-latin-1-fähige Zeichen für fpdf2-Built-in-Fonts."""
    return (
        text
        .replace("—", " - ")
        .replace("–", "-")
        .replace("─", "-")
        .replace("●", "*")
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


# ─── A4-Hochformat ────────────────────────────────────────────────────────────
# Nutzbare Breite (Margin 10 links+rechts): 190 mm
# Nr.(10) + Vorname(36) + Nachname(40) + Geschlecht(20) + Grundschule(48) + BG(36)

_COL_WIDTHS = [10, 36, 40, 20, 48, 36]
_ROW_H       = 6.5   # mm
_FONT_HEADER = 9     # pt
_FONT_ROW    = 9     # pt
_FONT_STATS  = 8     # pt
_PAGE_BOTTOM = 260   # mm, danach neue Seite


class _ClassListPdf(FPDF):
    """A4-Hochformat mit Schulname/Klasse im Kopf und Seitenzahl im Fuß."""

    def __init__(self, school_name: str):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.school_name = school_name
        self.class_title = ""
        self.set_margins(left=10, top=22, right=10)
        self.set_auto_page_break(auto=True, margin=18)

    def header(self):
        self.set_xy(10, 8)
        self.set_font("Helvetica", "B", 11)
        self.cell(110, 7, _pdf_safe(self.school_name), align="L")
        self.cell(0, 7, _pdf_safe(self.class_title), align="R")
        self.set_draw_color(150, 150, 150)
        self.line(10, 17, self.w - 10, 17)

    def footer(self):
        self.set_y(-14)
        self.set_font("Helvetica", "I", 7)
        self.cell(0, 8, f"Stand {today_str()}  ·  Seite {self.page_no()}/{{nb}}", align="C")

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.output(str(path))

    def draw_row(
        self,
        y: float,
        values: list[str],
        bg_hex: Optional[str] = None,
        bold: bool = False,
        text_color: tuple[int, int, int] = (0, 0, 0),
    ) -> float:
        """Eine Tabellenzeile ab y; gibt die Y-Position der nächsten Zeile zurück."""
        if bg_hex:
            self.set_fill_color(*hex_to_rgb(bg_hex))
        self.set_draw_color(180, 180, 180)
        self.set_text_color(*text_color)
        self.set_font("Helvetica", "B" if bold else "", _FONT_HEADER if bold else _FONT_ROW)

        self.set_xy(10, y)
        for text, width in zip(values, _COL_WIDTHS):
            self.cell(width, _ROW_H, _pdf_safe(text)[:30], border=1, fill=bool(bg_hex))
        self.set_text_color(0, 0, 0)
        return y + _ROW_H

    def draw_text(self, y: float, text: str, size: int = _FONT_STATS, style: str = "") -> float:
        self.set_xy(10, y)
        self.set_font("Helvetica", style, size)
        self.multi_cell(0, 4, _pdf_safe(text))
        return self.get_y()


class PdfExporter:
    """Exportiert ein AllocationResult als PDF (eine Seite pro Klasse)."""

    def __init__(
        self,
        result: AllocationResult,
        stats: Optional[Sequence[ClassStatistics]] = None,
        school_name: str = "",
    ):
        self.result = result
        self.stats = list(stats) if stats is not None else StatsReporter().summarize(result)
        self.school_name = school_name or "Klasseneinteilung"
        self._grouped = grouped_names(result)

    def export(self, output_path: Path) -> None:
        """Schreibt alle nicht-leeren Klassen in eine PDF-Datei."""
        pdf = _ClassListPdf(self.school_name)
        by_label = {st.label: st for st in self.stats}
        for roster in self.result.non_empty_classes():
            self._draw_class_page(pdf, roster, by_label.get(roster.label))
        pdf.save(output_path)

    def _draw_class_page(
        self,
        pdf: _ClassListPdf,
        roster: ClassRoster,
        stats: Optional[ClassStatistics],
    ) -> None:
        pdf.class_title = f"{roster.label} ({roster.size} Schüler)"
        pdf.add_page()

        y = pdf.draw_text(22, f"Strategie: {strategy_label(self.result)}", size=8, style="I") + 2
        y = pdf.draw_row(
            y, ["Nr."] + STUDENT_TABLE_HEADERS,
            bg_hex=COLORS["header"], bold=True, text_color=(255, 255, 255),
        )
        for n, student in enumerate(roster.students, 1):
            if y > _PAGE_BOTTOM:
                pdf.add_page()
                y = 22
            color = None
            if student.full_name in self._grouped:
                color = COLORS["group"]
            elif n % 2 == 0:
                color = COLORS["alt_row"]
            y = pdf.draw_row(y, [str(n)] + student.as_row(), bg_hex=color)

        if stats is not None:
            pdf.draw_text(y + 4, stats.format_text())
