"""Import der Schülerliste (CSV/Excel), Regel-Import und Import-Vorlage.

Liefert eine nicht-leere Liste von StudentRecord mit allen fünf Feldern
(leere Angaben als ""). Ergibt eine Datei keinen einzigen gültigen
Datensatz, wird RosterImportError geworfen.
"""

import csv
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from config.schema import DistributionConfig, ImportColumns
from config.defaults import RULE_COLUMNS
from models.pairing_rule import PairingRule
from models.student import StudentRecord

logger = logging.getLogger(__name__)


class RosterImportError(Exception):
    """Fehler beim Import der Schülerliste oder der Regeln."""


# ─── Tabellen lesen ───────────────────────────────────────────────────────────

def _read_csv_rows(path: Path) -> list[tuple]:
    """CSV → Liste von Tupeln (erste Zeile = Header). Trennzeichen , ; oder Tab."""
    with open(path, encoding="utf-8-sig", newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        try:
            dialect = csv.Sniffer().sniff(sample, delimiters=",;\t")
        except csv.Error:
            dialect = csv.excel
        return [tuple(row) for row in csv.reader(f, dialect)]


def _read_xlsx_rows(path: Path, sheet_name: Optional[str] = None) -> list[tuple]:
    """Excel → Liste von Tupeln. Nimmt das genannte Blatt oder das erste."""
    import openpyxl

    try:
        wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    except Exception as e:
        raise RosterImportError(f"Fehler beim Öffnen der Excel-Datei: {e}") from e
    try:
        ws = wb[wb.sheetnames[0]]
        if sheet_name:
            for sn in wb.sheetnames:
                if sn.strip().lower() == sheet_name.strip().lower():
                    ws = wb[sn]
                    break
        return list(ws.iter_rows(values_only=True))
    finally:
        wb.close()


def _read_rows(path: Path, sheet_name: Optional[str] = None) -> list[tuple]:
    path = Path(path)
    if not path.exists():
        raise RosterImportError(f"Datei nicht gefunden: {path}")
    suffix = path.suffix.lower()
    if suffix == ".csv" or suffix == ".txt":
        return _read_csv_rows(path)
    if suffix in (".xlsx", ".xlsm"):
        return _read_xlsx_rows(path, sheet_name)
    raise RosterImportError(
        f"Unbekanntes Dateiformat: {path}. Erwartet: .csv oder .xlsx."
    )


def _cell(v) -> str:
    if v is None:
        return ""
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v).strip()


def _rows_to_dicts(rows: list[tuple]) -> tuple[list[str], list[dict[str, str]]]:
    """Header normalisieren (klein, getrimmt), leere Zeilen überspringen."""
    if not rows:
        return [], []
    headers = [_cell(h).lower() for h in rows[0]]
    result = []
    for row in rows[1:]:
        if all(_cell(v) == "" for v in row):
            continue
        result.append({
            headers[i]: _cell(v)
            for i, v in enumerate(row)
            if i < len(headers)
        })
    return headers, result


# ─── Schülerliste ─────────────────────────────────────────────────────────────

class RosterImporter:
    """Importiert die Schülerliste aus einer CSV- oder Excel-Datei."""

    SHEET_NAME = "Schüler"

    def __init__(self, path: Path, columns: Optional[ImportColumns] = None) -> None:
        self.path = Path(path)
        self.columns = columns or ImportColumns()
        self.warnings: list[str] = []

    def _resolve_columns(self, headers: list[str]) -> dict[str, str]:
        """Feldname → normalisierter Header. Fehlende Pflichtspalten → Fehler."""
        mapping = {}
        missing = []
        for field, header in self.columns.as_mapping().items():
            key = header.strip().lower()
            if key in headers:
                mapping[field] = key
            else:
                missing.append(header)
        if missing:
            raise RosterImportError(
                f"{self.path.name}: Pflichtspalten fehlen: {', '.join(missing)}. "
                f"Gefunden: {', '.join(h for h in headers if h) or 'keine'}"
            )
        return mapping

    def import_students(self) -> list[StudentRecord]:
        """Liest alle gültigen Datensätze.

        Raises:
            RosterImportError: Datei fehlt, Spalten fehlen oder kein gültiger Datensatz.
        """
        self.warnings = []
        rows = _read_rows(self.path, self.SHEET_NAME)
        headers, records = _rows_to_dicts(rows)
        logger.debug(f"{self.path.name}: {len(records)} Datenzeilen, Header {headers}")
        if not headers:
            raise RosterImportError(f"{self.path.name}: Datei ist leer.")

        mapping = self._resolve_columns(headers)
        students: list[StudentRecord] = []
        for line_no, rec in enumerate(records, start=2):
            values = {field: rec.get(key, "") for field, key in mapping.items()}
            if not values["first_name"] and not values["last_name"]:
                msg = f"Zeile {line_no}: kein Name – übersprungen"
                logger.warning(msg)
                self.warnings.append(msg)
                continue
            students.append(StudentRecord(**values))

        if not students:
            raise RosterImportError(
                f"{self.path.name}: Keine gültigen Schülerdatensätze gefunden."
            )
        logger.info(f"{len(students)} Schüler aus {self.path.name} geladen")
        return students


def import_roster(path: Path, columns: Optional[ImportColumns] = None) -> list[StudentRecord]:
    """Importiert die Schülerliste.

    Args:
        path:    .csv oder .xlsx
        columns: Spaltenüberschriften (Default: Vorname, Nachname, m/w, Grundschule, BG Gutachten)

    Raises:
        RosterImportError: Bei kritischen Import-Fehlern oder leerer Liste.
    """
    return RosterImporter(path, columns).import_students()


# ─── Regeln ───────────────────────────────────────────────────────────────────

def import_rules(path: Path) -> list[PairingRule]:
    """Liest Paar-Regeln aus einer Datei mit zwei Spalten ("Schüler A", "Schüler B").

    Fehlen die Überschriften, werden die ersten beiden Spalten verwendet.
    Ungültige Zeilen (leer, zweimal derselbe Name) werden mit Warnung übersprungen.
    """
    rows = _read_rows(Path(path), "Regeln")
    if not rows:
        return []
    header = [_cell(h).lower() for h in rows[0]]
    expected = [c.lower() for c in RULE_COLUMNS]
    if header[:2] == expected:
        rows = rows[1:]

    rules: list[PairingRule] = []
    for line_no, row in enumerate(rows, start=1):
        cells = [_cell(v) for v in row]
        if not any(cells):
            continue
        if len(cells) < 2:
            logger.warning(f"Regeldatei Zeile {line_no}: weniger als zwei Namen – übersprungen")
            continue
        try:
            rules.append(PairingRule(student_a=cells[0], student_b=cells[1]))
        except ValidationError as e:
            logger.warning(f"Regeldatei Zeile {line_no}: {e.errors()[0]['msg']} – übersprungen")
    logger.info(f"{len(rules)} Regeln aus {Path(path).name} geladen")
    return rules


def write_rules_csv(rules: list[PairingRule], path: Path) -> None:
    """Schreibt Regeln im Format von import_rules()."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(RULE_COLUMNS)
        for r in rules:
            writer.writerow([r.student_a, r.student_b])


# ─── TEMPLATE-GENERATOR ───────────────────────────────────────────────────────

def generate_template(config: DistributionConfig, path: Path) -> None:
    """Erzeugt eine Excel-Vorlage für Schülerliste und Regeln.

    Blätter:
      - Schüler: konfigurierte Spaltenüberschriften + Beispielzeile
      - Regeln:  "Schüler A", "Schüler B" + Beispielzeile
    """
    import openpyxl
    from openpyxl.styles import Alignment, Font, PatternFill
    from openpyxl.utils import get_column_letter

    wb = openpyxl.Workbook()

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")
    center = Alignment(horizontal="center", vertical="center")

    def write_sheet(ws, headers: list[str], example: list[str]) -> None:
        for col, h in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=h)
            cell.font = hdr_font
            cell.fill = hdr_fill
            cell.alignment = center
            ws.column_dimensions[get_column_letter(col)].width = 22
        for col, v in enumerate(example, 1):
            ws.cell(row=2, column=col, value=v).font = ex_font
        ws.freeze_panes = "A2"

    ws = wb.active
    ws.title = RosterImporter.SHEET_NAME
    write_sheet(
        ws,
        list(config.import_columns.as_mapping().values()),
        ["Anna", "Alt", "w", "GS Am Park", ""],
    )

    write_sheet(wb.create_sheet("Regeln"), list(RULE_COLUMNS), ["Anna Alt", "Ben Berg"])

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    logger.info(f"Import-Vorlage gespeichert: {path}")
