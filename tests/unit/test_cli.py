"""
Unit tests for the command-line interface (ethioreview/cli.py).
"""

import json

import pytest

from ethioreview.cli import build_parser, main


@pytest.fixture
def scans(tmp_path, clean_text):
    good = tmp_path / "good.txt"
    good.write_text(clean_text, encoding="utf-8")
    noisy = tmp_path / "noisy.txt"
    noisy.write_text("ሰላም #ታፖ", encoding="utf-8")
    return good, noisy


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_ignore_is_repeatable(self):
        args = build_parser().parse_args(["diff", "a.txt", "b.txt", "--ignore", "ሀ", "--ignore", "ለ"])
        assert args.ignore == ["ሀ", "ለ"]


class TestAnalyze:
    def test_summary_printed(self, scans, capsys):
        assert main(["analyze", *map(str, scans)]) == 0
        out = capsys.readouterr().out
        assert "Total Documents: 2" in out
        assert "noisy.txt" in out

    def test_exports(self, scans, tmp_path):
        json_path = tmp_path / "batch.json"
        csv_path = tmp_path / "documents.csv"
        corrections_path = tmp_path / "corrections.csv"
        code = main(
            [
                "analyze",
                *map(str, scans),
                "--parallel",
                "--workers",
                "2",
                "--json",
                str(json_path),
                "--csv",
                str(csv_path),
                "--corrections",
                str(corrections_path),
            ]
        )
        assert code == 0
        assert json.loads(json_path.read_text(encoding="utf-8"))["summary"]["total_documents"] == 2
        rows = csv_path.read_text(encoding="utf-8").splitlines()
        # Ranked: the clean document comes first
        assert rows[1].startswith("good.txt,")
        assert "#ታፖ" in corrections_path.read_text(encoding="utf-8")

    def test_unreadable_file(self, tmp_path, capsys):
        assert main(["analyze", str(tmp_path / "missing.txt")]) == 1
        assert "Cannot read" in capsys.readouterr().err


class TestSuggest:
    def test_apply_to_output(self, tmp_path, capsys):
        source = tmp_path / "page.txt"
        source.write_text("ሰላም#ታ", encoding="utf-8")
        output = tmp_path / "page.fixed.txt"

        assert main(["suggest", str(source), "--apply", "-o", str(output)]) == 0
        assert output.read_text(encoding="utf-8") == "ሰላምታ"
        assert "Remove ASCII noise characters" in capsys.readouterr().out

    def test_no_suggestions(self, scans, capsys):
        good, _ = scans
        assert main(["suggest", str(good)]) == 0
        assert "No suggestions." in capsys.readouterr().out


class TestDiff:
    def test_word_mode(self, tmp_path, capsys):
        original = tmp_path / "a.txt"
        current = tmp_path / "b.txt"
        original.write_text("ሰላም ዓለም", encoding="utf-8")
        current.write_text("ሰላም ዓለማት", encoding="utf-8")

        assert main(["diff", str(original), str(current)]) == 0
        out = capsys.readouterr().out
        assert "Outstanding changes: 1" in out
        assert "ዓለማት" in out

    def test_ignore(self, tmp_path, capsys):
        original = tmp_path / "a.txt"
        current = tmp_path / "b.txt"
        original.write_text("ሰላም ዓለም", encoding="utf-8")
        current.write_text("ሰላም ዓለማት", encoding="utf-8")

        main(["diff", str(original), str(current), "--ignore", "ዓለም"])
        assert "Outstanding changes: 0" in capsys.readouterr().out

    def test_line_mode(self, tmp_path, capsys):
        original = tmp_path / "a.txt"
        current = tmp_path / "b.txt"
        original.write_text("ሀ\nለ", encoding="utf-8")
        current.write_text("ሀ\nሉ", encoding="utf-8")

        assert main(["diff", str(original), str(current), "--mode", "line"]) == 0
        assert "Changed lines: 1" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["diff", str(tmp_path / "x.txt"), str(tmp_path / "y.txt")]) == 1
        assert "File not found" in capsys.readouterr().err


class TestConfigErrors:
    def test_invalid_config_reported(self, scans, tmp_path, capsys):
        config = tmp_path / "bad.yaml"
        config.write_text("batch:\n  max_workers: 0\n", encoding="utf-8")
        assert main(["--config", str(config), "analyze", str(scans[0])]) == 1
        assert "max_workers" in capsys.readouterr().err
