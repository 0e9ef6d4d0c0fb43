"""Tests für Terminal-Renderer, Excel- und PDF-Export."""

from pathlib import Path

import openpyxl
import pytest

from analysis.class_stats import StatsReporter
from export.excel_export import ExcelExporter
from export.helpers import grouped_names, hex_to_rgb, strategy_label
from export.pdf_export import PdfExporter, _pdf_safe
from export.tui_renderer import print_allocation, render_class_rows
from models.pairing_rule import PairingRule
from models.student import StudentRecord
from solver.allocator import allocate_classes


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _students() -> list[StudentRecord]:
    schools = ["GS Am Park", "GS Lindenweg", ""]
    return [
        StudentRecord(
            first_name=f"Kind{i}",
            last_name="Müller",
            gender="m" if i % 2 else "w",
            elementary_school=schools[i % 3],
            assessment_category="LRS" if i == 4 else "",
        )
        for i in range(9)
    ]


@pytest.fixture(scope="module")
def result():
    rules = [
        PairingRule(student_a="Kind0 Müller", student_b="Kind1 Müller"),
        PairingRule(student_a="Kind2 Müller", student_b="Nie Mand"),
    ]
    # 4 Klassen für 9 Schüler: keine leere Klasse
    return allocate_classes(_students(), rules, 4)


@pytest.fixture(scope="module")
def sparse_result():
    """Mehr Klassen als Schüler: zwei Klassen bleiben leer."""
    return allocate_classes(_students()[:2], [], 4, seed=1)


# ─── HELPERS ──────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_hex_to_rgb(self):
        assert hex_to_rgb("4472C4") == (0x44, 0x72, 0xC4)
        assert hex_to_rgb("#FFFFFF") == (255, 255, 255)

    def test_grouped_names(self, result):
        """Nur Schüler aus verbundenen Gruppen."""
        assert grouped_names(result) == {"Kind0 Müller", "Kind1 Müller"}

    def test_strategy_label(self, result, sparse_result):
        assert strategy_label(result) == "mit Regeln"
        assert "Zufall" in strategy_label(sparse_result)

    def test_pdf_safe(self):
        """Nicht-latin-1-Zeichen werden ersetzt, Umlaute bleiben."""
        assert _pdf_safe("Müller – Klasse") == "Müller - Klasse"
        assert _pdf_safe("a ≥ b") == "a ? b"


# ─── TERMINAL ─────────────────────────────────────────────────────────────────

class TestTuiRenderer:
    def test_rows(self, result):
        """Eine Zeile pro Schüler mit Nummer, fünf Feldern und Regel-Markierung."""
        roster = result.classes[result.class_of("Kind0 Müller")]
        rows = render_class_rows(roster, grouped_names(result))
        assert len(rows) == roster.size
        assert all(len(r) == 7 for r in rows)
        assert rows[0][0] == "1"
        marked = {r[1] for r in rows if r[6]}
        assert marked == {"Kind0", "Kind1"}

    def test_rows_without_groups(self, result):
        rows = render_class_rows(result.classes[0])
        assert all(r[6] == "" for r in rows)

    def test_print_allocation(self, result, capsys):
        """Ausgabe enthält Klassen und verworfene Regeln."""
        print_allocation(result)
        out = capsys.readouterr().out
        assert "Klasse 1" in out
        assert "Nie Mand" in out


# ─── EXCEL ────────────────────────────────────────────────────────────────────

class TestExcelExport:
    def test_creates_file(self, tmp_path: Path, result):
        out = tmp_path / "einteilung.xlsx"
        ExcelExporter(result).export(out)
        assert out.exists()

    def test_sheets(self, tmp_path: Path, sparse_result):
        """Übersicht, ein Blatt pro nicht-leerer Klasse, Statistiken."""
        out = tmp_path / "sheets.xlsx"
        ExcelExporter(sparse_result).export(out)
        wb = openpyxl.load_workbook(out)
        labels = [c.label for c in sparse_result.non_empty_classes()]
        assert wb.sheetnames == ["Übersicht"] + labels + ["Statistiken"]

    def test_class_sheet_content(self, tmp_path: Path, result):
        """Klassenblatt: Kopfzeile und alle Schüler der Klasse."""
        out = tmp_path / "klasse.xlsx"
        ExcelExporter(result).export(out)
        ws = openpyxl.load_workbook(out)["Klasse 1"]
        assert [c.value for c in ws[1]] == [
            "Nr.", "Vorname", "Nachname", "Geschlecht", "Grundschule", "BG-Gutachten",
        ]
        names = [ws.cell(row=r, column=2).value for r in range(2, ws.max_row + 1)]
        assert names == [s.first_name for s in result.classes[0].students]

    def test_overview_sizes(self, tmp_path: Path, result):
        """Übersicht listet jede Klasse mit Größe und Gesamtsumme."""
        out = tmp_path / "uebersicht.xlsx"
        ExcelExporter(result, school_name="Testschule").export(out)
        ws = openpyxl.load_workbook(out)["Übersicht"]
        assert ws["A1"].value == "Testschule"
        sizes = [ws.cell(row=5 + i, column=2).value for i in range(result.num_classes)]
        assert sizes == result.class_sizes
        assert ws.cell(row=5 + result.num_classes, column=2).value == 9

    def test_sheet_title_strips_invalid_chars(self, tmp_path: Path):
        """Präfixe wie "5/" ergeben gültige Blattnamen."""
        res = allocate_classes(_students(), [], 2, seed=1, label_prefix="5/")
        out = tmp_path / "praefix.xlsx"
        ExcelExporter(res).export(out)
        wb = openpyxl.load_workbook(out)
        assert wb.sheetnames == ["Übersicht", "5 1", "5 2", "Statistiken"]
        ws = wb["Übersicht"]
        assert ws.cell(row=5, column=1).value == "5/ 1"

    def test_stats_sheet(self, tmp_path: Path, result):
        """Statistik-Blatt enthält Grundschul-Häufigkeiten."""
        out = tmp_path / "stats.xlsx"
        stats = StatsReporter().summarize(result)
        ExcelExporter(result, stats).export(out)
        ws = openpyxl.load_workbook(out)["Statistiken"]
        values = {ws.cell(row=r, column=3).value for r in range(2, ws.max_row + 1)}
        assert "GS Am Park" in values
        assert "Unknown" in values


# ─── PDF ──────────────────────────────────────────────────────────────────────

class TestPdfExport:
    def test_creates_pdf(self, tmp_path: Path, result):
        out = tmp_path / "sub" / "klassen.pdf"
        PdfExporter(result, school_name="Testschule").export(out)
        assert out.exists()
        assert out.read_bytes()[:4] == b"%PDF"

    def test_large_class(self, tmp_path: Path):
        """Klassen mit vielen Schülern laufen über mehrere Seiten."""
        students = [StudentRecord(first_name=f"K{i}", last_name="L") for i in range(80)]
        out = tmp_path / "gross.pdf"
        PdfExporter(allocate_classes(students, [], 1, seed=0)).export(out)
        assert out.stat().st_size > 0
