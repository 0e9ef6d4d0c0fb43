"""Tests für die Kommandozeile (click CliRunner)."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from data.fake_data import FakeRosterGenerator
from main import cli
from models.class_roster import AllocationResult


_HEADER = "Vorname,Nachname,m/w,Grundschule,BG Gutachten"


@pytest.fixture
def runner(tmp_path: Path, monkeypatch) -> CliRunner:
    # ConfigManager arbeitet relativ zum Arbeitsverzeichnis
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def _roster_csv(tmp_path: Path, count: int = 20) -> Path:
    gen = FakeRosterGenerator(seed=11)
    path = tmp_path / "schueler.csv"
    gen.write_csv(gen.generate_students(count), path)
    return path


def _abc_csv(tmp_path: Path) -> Path:
    path = tmp_path / "abc.csv"
    path.write_text(
        f"{_HEADER}\nAnn,A,w,SchoolX,\nBob,B,m,SchoolX,\nCid,C,m,SchoolY,Cat1\n",
        encoding="utf-8",
    )
    return path


class TestDistribute:
    def test_distribute_json(self, runner, tmp_path: Path):
        """distribute teilt ein und speichert das Ergebnis als JSON."""
        roster = _roster_csv(tmp_path)
        out = tmp_path / "out.json"
        res = runner.invoke(cli, [
            "distribute", str(roster), "--classes", "3", "--seed", "5", "--json", str(out),
        ])
        assert res.exit_code == 0, res.output
        result = AllocationResult.load_json(out)
        assert result.num_classes == 3
        assert result.total_students == 20
        assert result.seed == 5
        assert max(result.class_sizes) - min(result.class_sizes) <= 1

    def test_distribute_with_rule(self, runner, tmp_path: Path):
        """--rule verbindet zwei Schüler."""
        out = tmp_path / "out.json"
        res = runner.invoke(cli, [
            "distribute", str(_abc_csv(tmp_path)), "--classes", "2",
            "--rule", "Ann A=Bob B", "--json", str(out),
        ])
        assert res.exit_code == 0, res.output
        result = AllocationResult.load_json(out)
        assert result.strategy == "constrained"
        assert result.classes[0].full_names == ["Ann A", "Bob B"]
        assert result.classes[1].full_names == ["Cid C"]

    def test_distribute_rules_file(self, runner, tmp_path: Path):
        """--rules liest eine Regeldatei."""
        rules = tmp_path / "regeln.csv"
        rules.write_text("Schüler A,Schüler B\nAnn A,Cid C\n", encoding="utf-8")
        out = tmp_path / "out.json"
        res = runner.invoke(cli, [
            "distribute", str(_abc_csv(tmp_path)), "--classes", "2",
            "--rules", str(rules), "--json", str(out),
        ])
        assert res.exit_code == 0, res.output
        result = AllocationResult.load_json(out)
        assert result.class_of("Ann A") == result.class_of("Cid C")

    def test_distribute_exports(self, runner, tmp_path: Path):
        """--excel und --pdf erzeugen Dateien."""
        xlsx = tmp_path / "e.xlsx"
        pdf = tmp_path / "e.pdf"
        res = runner.invoke(cli, [
            "distribute", str(_roster_csv(tmp_path)), "--classes", "2",
            "--excel", str(xlsx), "--pdf", str(pdf),
        ])
        assert res.exit_code == 0, res.output
        assert xlsx.exists()
        assert pdf.exists()

    @pytest.mark.parametrize("classes", ["0", "-2"])
    def test_invalid_class_count(self, runner, tmp_path: Path, classes):
        """Ungültige Klassenanzahl → Exit-Code 1 mit eigener Meldung."""
        res = runner.invoke(cli, ["distribute", str(_abc_csv(tmp_path)), "--classes", classes])
        assert res.exit_code == 1
        assert "Klassenanzahl" in res.output

    def test_no_data(self, runner, tmp_path: Path):
        """Liste ohne gültige Datensätze → Exit-Code 1, "Keine Daten"."""
        empty = tmp_path / "leer.csv"
        empty.write_text(f"{_HEADER}\n", encoding="utf-8")
        res = runner.invoke(cli, ["distribute", str(empty), "--classes", "2"])
        assert res.exit_code == 1
        assert "Keine Daten" in res.output

    def test_invalid_rule(self, runner, tmp_path: Path):
        res = runner.invoke(cli, ["distribute", str(_abc_csv(tmp_path)), "--rule", "Ann A"])
        assert res.exit_code == 1
        assert "Regel ungültig" in res.output

    def test_config_classes_used(self, runner, tmp_path: Path):
        """Ohne --classes gilt num_classes aus der Konfiguration."""
        cfg = tmp_path / "config" / "klassen_config.yaml"
        cfg.parent.mkdir()
        cfg.write_text("num_classes: 2\nseed: 3\n", encoding="utf-8")
        out = tmp_path / "out.json"
        res = runner.invoke(cli, ["distribute", str(_abc_csv(tmp_path)), "--json", str(out)])
        assert res.exit_code == 0, res.output
        result = AllocationResult.load_json(out)
        assert result.num_classes == 2
        assert result.seed == 3


class TestStatsAndShow:
    def _saved(self, runner, tmp_path: Path) -> Path:
        out = tmp_path / "out.json"
        runner.invoke(cli, [
            "distribute", str(_abc_csv(tmp_path)), "--classes", "2",
            "--rule", "Ann A=Bob B", "--json", str(out),
        ])
        return out

    def test_stats_text(self, runner, tmp_path: Path):
        """stats --text gibt den klassischen Bericht aus."""
        res = runner.invoke(cli, ["stats", str(self._saved(runner, tmp_path)), "--text"])
        assert res.exit_code == 0, res.output
        assert "Gender distribution: m = 1, w = 1" in res.output
        assert "SchoolX: 2" in res.output
        assert "Cat1: 1" in res.output

    def test_stats_table(self, runner, tmp_path: Path):
        res = runner.invoke(cli, ["stats", str(self._saved(runner, tmp_path))])
        assert res.exit_code == 0, res.output
        assert "Klassenstatistiken" in res.output

    def test_show(self, runner, tmp_path: Path):
        res = runner.invoke(cli, ["show", str(self._saved(runner, tmp_path))])
        assert res.exit_code == 0, res.output
        assert "Cid" in res.output

    def test_stats_missing_file(self, runner, tmp_path: Path):
        res = runner.invoke(cli, ["stats", str(tmp_path / "fehlt.json")])
        assert res.exit_code == 1


class TestOtherCommands:
    def test_generate(self, runner, tmp_path: Path):
        """generate schreibt Schülerliste und Regeln als CSV."""
        roster = tmp_path / "s.csv"
        rules = tmp_path / "r.csv"
        res = runner.invoke(cli, [
            "generate", "--count", "30", "--rules", "5",
            "--output", str(roster), "--rules-output", str(rules),
        ])
        assert res.exit_code == 0, res.output
        assert len(roster.read_text(encoding="utf-8").strip().splitlines()) == 31
        assert rules.exists()

    def test_template(self, runner, tmp_path: Path):
        out = tmp_path / "vorlage.xlsx"
        res = runner.invoke(cli, ["template", "--output", str(out)])
        assert res.exit_code == 0, res.output
        assert out.exists()

    def test_config_show_without_config(self, runner):
        """config show ohne Konfiguration bricht mit Hinweis ab."""
        res = runner.invoke(cli, ["config", "show"])
        assert res.exit_code == 1
        assert "setup" in res.output

    def test_config_show(self, runner, tmp_path: Path):
        cfg = tmp_path / "config" / "klassen_config.yaml"
        cfg.parent.mkdir()
        cfg.write_text("school_name: Testschule\nnum_classes: 4\n", encoding="utf-8")
        res = runner.invoke(cli, ["config", "show"])
        assert res.exit_code == 0, res.output
        assert "Testschule" in res.output

    def test_verbose_flag(self, runner, tmp_path: Path):
        res = runner.invoke(cli, [
            "--verbose", "distribute", str(_abc_csv(tmp_path)), "--classes", "2", "--seed", "1",
        ])
        assert res.exit_code == 0, res.output
