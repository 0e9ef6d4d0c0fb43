"""Excel-Export der Klasseneinteilung (openpyxl)."""

import re
from pathlib import Path
from typing import Optional, Sequence

from analysis.class_stats import ClassStatistics, StatsReporter
from config.defaults import STUDENT_TABLE_HEADERS
from models.class_roster import AllocationResult, ClassRoster

from export.helpers import COLORS, grouped_names, strategy_label, today_str

# In Blattnamen nicht erlaubt: \ / ? * [ ] :
_INVALID_TITLE_CHARS = re.compile(r"[\\/?*\[\]:]")


class ExcelExporter:
    """Exportiert ein AllocationResult in eine Excel-Datei.

    Blätter: "Übersicht", eine Klassenliste pro nicht-leerer Klasse,
    "Statistiken".
    """

    COL_NR_W   = 5
    COL_TEXT_W = 20
    ROW_HEADER_H = 20

    def __init__(
        self,
        result: AllocationResult,
        stats: Optional[Sequence[ClassStatistics]] = None,
        school_name: str = "",
    ):
        self.result = result
        self.stats = list(stats) if stats is not None else StatsReporter().summarize(result)
        self.school_name = school_name
        self._grouped = grouped_names(result)

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)
        for roster in self.result.non_empty_classes():
            self._sheet_klasse(wb, roster)
        self._sheet_statistiken(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header_row(self, ws, headers: list[str], row: int = 1) -> None:
        from openpyxl.styles import Alignment, Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    def _set_widths(self, ws, count: int, first_narrow: bool = True) -> None:
        from openpyxl.utils import get_column_letter
        for col in range(1, count + 1):
            width = self.COL_NR_W if first_narrow and col == 1 else self.COL_TEXT_W
            ws.column_dimensions[get_column_letter(col)].width = width

    @staticmethod
    def _sheet_title(roster: ClassRoster) -> str:
        """Blattname aus der Klassenbezeichnung, ohne die in Excel verbotenen Zeichen."""
        title = _INVALID_TITLE_CHARS.sub("", roster.label).strip(" '")[:31]
        return title or f"Klasse {roster.index + 1}"

    # ─── Sheets ───────────────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet("Übersicht")
        ws.cell(row=1, column=1, value=self.school_name or "Klasseneinteilung").font = Font(bold=True, size=13)
        ws.cell(row=2, column=1, value=f"Stand: {today_str()} | Strategie: {strategy_label(self.result)}")

        headers = ["Klasse", "Schüler", "m", "w", "Regel-Schüler"]
        self._write_header_row(ws, headers, row=4)
        by_label = {st.label: st for st in self.stats}
        border = self._thin_border()
        row = 5
        for roster in self.result.classes:
            st = by_label.get(roster.label)
            linked = sum(1 for n in roster.full_names if n in self._grouped)
            values = [
                roster.label,
                roster.size,
                st.gender["m"] if st else 0,
                st.gender["w"] if st else 0,
                linked,
            ]
            for col, v in enumerate(values, 1):
                ws.cell(row=row, column=col, value=v).border = border
            row += 1
        ws.cell(row=row, column=1, value="Gesamt").font = Font(bold=True)
        ws.cell(row=row, column=2, value=self.result.total_students).font = Font(bold=True)

        if self.result.warnings:
            row += 2
            ws.cell(row=row, column=1, value="Verworfene Regeln").font = Font(bold=True)
            for w in self.result.warnings:
                row += 1
                c = ws.cell(row=row, column=1, value=f"{w.rule.describe()}: {w.message}")
                c.fill = self._fill(COLORS["warning"])
        self._set_widths(ws, len(headers), first_narrow=False)

    def _sheet_klasse(self, wb, roster: ClassRoster) -> None:
        ws = wb.create_sheet(self._sheet_title(roster))
        headers = ["Nr."] + STUDENT_TABLE_HEADERS
        self._write_header_row(ws, headers)
        border = self._thin_border()
        for n, student in enumerate(roster.students, 1):
            values = [n] + student.as_row()
            for col, v in enumerate(values, 1):
                c = ws.cell(row=n + 1, column=col, value=v)
                c.border = border
                if student.full_name in self._grouped:
                    c.fill = self._fill(COLORS["group"])
                elif n % 2 == 0:
                    c.fill = self._fill(COLORS["alt_row"])
        ws.freeze_panes = "A2"
        self._set_widths(ws, len(headers))

    def _sheet_statistiken(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet("Statistiken")
        self._write_header_row(ws, ["Klasse", "Merkmal", "Wert", "Anzahl"])
        row = 2
        for st in self.stats:
            entries = [("Geschlecht", k, v) for k, v in st.gender.items()]
            if st.unrecognized_gender:
                entries.append(("Geschlecht", "sonstige", st.unrecognized_gender))
            entries += [("Grundschule", k, v) for k, v in st.elementary_school.items()]
            entries += [("BG-Gutachten", k, v) for k, v in st.assessment_category.items()]
            for attr, value, count in entries:
                ws.cell(row=row, column=1, value=st.label).font = Font(bold=True)
                ws.cell(row=row, column=2, value=attr)
                ws.cell(row=row, column=3, value=value)
                ws.cell(row=row, column=4, value=count)
                row += 1
        self._set_widths(ws, 4, first_narrow=False)
