"""
Tests for the gos command line.
"""

import io
import json

import pytest

from gos.__main__ import main


class TestCli:

    def test_json_output(self, gos_file, capsys):
        path = gos_file("var { a = 1; };")
        assert main([str(path)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["statements"][0]["name"]["name"] == "a"
        assert data["span"]["start"]["line"] == 1

    def test_pretty_output_to_file(self, gos_file, tmp_path, capsys):
        path = gos_file("import a;")
        out = tmp_path / "ast.txt"
        assert main([str(path), "-f", "pretty", "-o", str(out)]) == 0
        assert out.read_text(encoding="utf-8") == '(module (import "a"))\n'
        assert capsys.readouterr().out == ""

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("import a;"))
        assert main(["-", "-f", "pretty"]) == 0
        assert capsys.readouterr().out.strip() == '(module (import "a"))'

    def test_parse_failure_exit_code_and_report(self, gos_file, capsys, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        path = gos_file("var { x = y; };", name="bad.gos")
        assert main([str(path)]) == 1
        err = capsys.readouterr().err
        assert "error[E0202]" in err
        assert "bad.gos:1:11" in err

    def test_error_flag_collects_everything(self, gos_file, capsys, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        path = gos_file("var { x = ; };\nvar { y = z; };")
        assert main([str(path), "--error"]) == 1
        assert "aborting due to 2 previous errors" in capsys.readouterr().err

    def test_strict_rejects_deprecated(self, gos_file, capsys):
        path = gos_file("meta { a = 1; }")
        assert main([str(path)]) == 0
        assert main([str(path), "--strict"]) == 1

    def test_debug_prints_cst(self, gos_file, capsys):
        path = gos_file("import a;")
        assert main([str(path), "--debug"]) == 0
        assert "import_stmt" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.gos")]) == 1
        assert "file not found" in capsys.readouterr().err

    def test_directory_is_not_a_file(self, tmp_path, capsys):
        assert main([str(tmp_path)]) == 1
        assert "not a file" in capsys.readouterr().err

    def test_unknown_format_rejected(self, gos_file):
        with pytest.raises(SystemExit):
            main([str(gos_file("import a;")), "-f", "yaml"])
