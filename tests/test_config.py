"""Tests für Konfigurationssystem und Datenmodelle."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.schema import CostWeights, DistributionConfig, ImportColumns
from config.defaults import (
    default_cost_weights,
    default_distribution_config,
    default_import_columns,
    STUDENT_TABLE_HEADERS,
)
from config.manager import ConfigManager
from models.class_roster import AllocationResult, ClassRoster
from models.pairing_rule import PairingRule
from models.student import StudentRecord


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_weights(self):
        """Standard-Gewichte 3 / 2 / 1."""
        cw = default_cost_weights()
        assert (cw.school, cw.gender, cw.category) == (3.0, 2.0, 1.0)

    def test_default_columns(self):
        """Spaltenüberschriften der üblichen Anmeldeliste."""
        ic = default_import_columns()
        assert ic.as_mapping() == {
            "first_name": "Vorname",
            "last_name": "Nachname",
            "gender": "m/w",
            "elementary_school": "Grundschule",
            "assessment_category": "BG Gutachten",
        }

    def test_default_config(self):
        """Vollständige Default-Config ist valide."""
        config = default_distribution_config()
        assert config.num_classes == 5
        assert config.seed is None
        assert config.class_label(0) == "Klasse 1"
        assert config == DistributionConfig()

    def test_table_headers_match_row(self):
        """Tabellenkopf passt zur Zeilenlänge von StudentRecord.as_row()."""
        assert len(STUDENT_TABLE_HEADERS) == len(StudentRecord().as_row())


# ─── VALIDIERUNG ──────────────────────────────────────────────────────────────

class TestConfigValidation:
    def test_num_classes_positive(self):
        """num_classes < 1 wird abgelehnt."""
        with pytest.raises(ValidationError):
            DistributionConfig(num_classes=0)

    def test_negative_weight_rejected(self):
        """Negative Gewichte sind nicht erlaubt."""
        with pytest.raises(ValidationError):
            CostWeights(school=-1)

    def test_blank_column_rejected(self):
        """Leere Spaltenüberschriften sind nicht erlaubt."""
        with pytest.raises(ValidationError):
            ImportColumns(first_name="  ")

    def test_column_stripped(self):
        """Spaltenüberschriften werden getrimmt."""
        assert ImportColumns(gender=" Geschlecht ").gender == "Geschlecht"


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load(self, tmp_path: Path):
        """Gespeicherte Config lässt sich unverändert wieder laden."""
        mgr = ConfigManager()
        config = DistributionConfig(
            school_name="Gesamtschule Test",
            num_classes=4,
            seed=123,
            class_label_prefix="5",
            cost_weights=CostWeights(school=5, gender=1, category=0.5),
        )
        path = tmp_path / "cfg.yaml"
        mgr.save(config, path)
        assert mgr.load(path) == config

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        """Die YAML-Datei enthält deutsche Abschnittskommentare."""
        path = tmp_path / "cfg.yaml"
        ConfigManager().save(default_distribution_config(), path)
        text = path.read_text(encoding="utf-8")
        assert "# Klasseneinteilung" in text
        assert "Kostenmodell" in text
        assert "num_classes: 5" in text

    def test_load_missing_file(self, tmp_path: Path):
        """Fehlende Datei → FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(tmp_path / "gibtsnicht.yaml")

    def test_load_invalid_file(self, tmp_path: Path):
        """Ungültige Werte → ValueError mit Hinweis auf die Datei."""
        path = tmp_path / "bad.yaml"
        path.write_text("num_classes: 0\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager().load(path)

    def test_load_partial_file_uses_defaults(self, tmp_path: Path):
        """Nicht angegebene Felder erhalten Default-Werte."""
        path = tmp_path / "partial.yaml"
        path.write_text("num_classes: 3\n", encoding="utf-8")
        config = ConfigManager().load(path)
        assert config.num_classes == 3
        assert config.cost_weights == default_cost_weights()

    def test_load_or_default(self, tmp_path: Path):
        """Ohne Datei liefert load_or_default die Defaults."""
        assert ConfigManager().load_or_default(tmp_path / "nix.yaml") == default_distribution_config()

    def test_first_run_check(self, tmp_path: Path, monkeypatch):
        """first_run_check erkennt fehlende Default-Config."""
        monkeypatch.chdir(tmp_path)
        mgr = ConfigManager()
        assert mgr.first_run_check()
        mgr.save(default_distribution_config())
        assert not mgr.first_run_check()


# ─── DATENMODELLE ─────────────────────────────────────────────────────────────

class TestStudentRecord:
    def test_none_becomes_empty(self):
        """None-Werte werden zu leeren Strings, Leerzeichen werden entfernt."""
        s = StudentRecord(first_name=" Anna ", last_name="Alt", gender=None)
        assert s.first_name == "Anna"
        assert s.gender == ""
        assert s.full_name == "Anna Alt"

    def test_frozen(self):
        """Datensätze sind unveränderlich."""
        s = StudentRecord(first_name="Anna", last_name="Alt")
        with pytest.raises(ValidationError):
            s.first_name = "Berta"

    def test_keys(self):
        """Vergleichsschlüssel sind klein geschrieben, leer → unknown."""
        s = StudentRecord(first_name="A", last_name="B", gender="W", elementary_school="GS Nord")
        assert s.school_key == "gs nord"
        assert s.category_key == "unknown"
        assert s.gender_key == "w"


class TestPairingRule:
    def test_parse(self):
        """CLI-Form "A=B" wird geparst und getrimmt."""
        rule = PairingRule.parse(" Anna Alt = Ben Berg ")
        assert (rule.student_a, rule.student_b) == ("Anna Alt", "Ben Berg")

    def test_parse_without_separator(self):
        """Fehlendes "=" → ValueError."""
        with pytest.raises(ValueError):
            PairingRule.parse("Anna Alt")

    def test_same_name_rejected(self):
        """Eine Regel darf einen Schüler nicht mit sich selbst verbinden."""
        with pytest.raises(ValidationError):
            PairingRule(student_a="Anna Alt", student_b="Anna Alt")

    def test_empty_name_rejected(self):
        """Leere Namen sind nicht erlaubt."""
        with pytest.raises(ValidationError):
            PairingRule(student_a="", student_b="Ben Berg")

    def test_describe(self):
        rule = PairingRule(student_a="Anna Alt", student_b="Ben Berg")
        assert rule.describe() == "Anna Alt und Ben Berg sollen in dieselbe Klasse"


class TestAllocationResult:
    def _result(self) -> AllocationResult:
        a = StudentRecord(first_name="Anna", last_name="Alt", gender="w")
        b = StudentRecord(first_name="Ben", last_name="Berg", gender="m")
        return AllocationResult(
            strategy="constrained",
            classes=[
                ClassRoster(index=0, label="Klasse 1", students=[a, b]),
                ClassRoster(index=1, label="Klasse 2", students=[]),
            ],
            groups=[["Anna Alt", "Ben Berg"]],
        )

    def test_helpers(self):
        """class_sizes, total_students, class_of, non_empty_classes."""
        result = self._result()
        assert result.class_sizes == [2, 0]
        assert result.total_students == 2
        assert result.class_of("Ben Berg") == 0
        assert result.class_of("Nie Mand") is None
        assert [c.label for c in result.non_empty_classes()] == ["Klasse 1"]

    def test_json_roundtrip(self, tmp_path: Path):
        """save_json / load_json erhalten die Einteilung vollständig."""
        result = self._result()
        path = tmp_path / "out" / "einteilung.json"
        result.save_json(path)
        assert AllocationResult.load_json(path) == result

    def test_load_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            AllocationResult.load_json(tmp_path / "fehlt.json")


# ─── INTERAKTIV ───────────────────────────────────────────────────────────────

class TestInteractive:
    def test_wizard_cancel(self, monkeypatch):
        """Abbruch in der ersten Frage liefert None."""
        from rich.prompt import Confirm
        from config.wizard import run_wizard
        monkeypatch.setattr(Confirm, "ask", classmethod(lambda cls, *a, **kw: False))
        assert run_wizard() is None

    def test_wizard_defaults(self, monkeypatch):
        """Enter bei allen Fragen ergibt die Default-Konfiguration."""
        from rich.prompt import Confirm, IntPrompt, Prompt
        from config.wizard import run_wizard
        answers = {"Festen Seed verwenden?": False}
        monkeypatch.setattr(
            Confirm, "ask", classmethod(lambda cls, q, **kw: answers.get(q, True)),
        )
        monkeypatch.setattr(Prompt, "ask", classmethod(lambda cls, q, **kw: kw["default"]))
        monkeypatch.setattr(IntPrompt, "ask", classmethod(lambda cls, q, **kw: kw["default"]))
        assert run_wizard() == default_distribution_config()

    def test_edit_menu_save(self, tmp_path: Path, monkeypatch):
        """Auswahl 0 speichert unverändert."""
        from rich.prompt import Prompt
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(Prompt, "ask", classmethod(lambda cls, *a, **kw: "0"))
        mgr = ConfigManager()
        config = default_distribution_config()
        assert mgr.edit_interactive(config) == config
        assert mgr.load() == config

    def test_edit_menu_seed(self, tmp_path: Path, monkeypatch):
        """Seed lässt sich über das Menü setzen."""
        from rich.prompt import Confirm, IntPrompt, Prompt
        monkeypatch.chdir(tmp_path)
        choices = iter(["2", "0"])
        monkeypatch.setattr(Prompt, "ask", classmethod(lambda cls, *a, **kw: next(choices)))
        monkeypatch.setattr(Confirm, "ask", classmethod(lambda cls, *a, **kw: True))
        monkeypatch.setattr(IntPrompt, "ask", classmethod(lambda cls, *a, **kw: 7))
        config = ConfigManager().edit_interactive(default_distribution_config())
        assert config.seed == 7
