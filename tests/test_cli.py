"""Tests for the steptrace command-line entry point."""

from __future__ import annotations

import json

from steptrace.cli import main

SOURCE = """\
/** @param {Number} n = 3 */
function countdown(n) {
  while (n > 0) {
    n--;
  }
  return n;
}
"""


def _write(tmp_path, text: str):
    path = tmp_path / "sample.js"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestMain:
    def test_demo_mode(self, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "built-in demo" in out
        assert "═══ demo (completed) ═══" in out
        assert 'returned: "16px"' in out

    def test_text_output(self, tmp_path, capsys):
        assert main([_write(tmp_path, SOURCE)]) == 0
        out = capsys.readouterr().out
        assert "═══ countdown (completed) ═══" in out
        assert "returned: 0" in out

    def test_json_output(self, tmp_path, capsys):
        assert main([_write(tmp_path, SOURCE), "--json"]) == 0
        [result] = json.loads(capsys.readouterr().out)
        assert result["name"] == "countdown"
        assert result["status"] == "completed"
        outcomes = [e["outcome"] for e in result["trace"] if e["kind"] == "WhileStatement"]
        assert outcomes == [True, True, True, False]

    def test_function_filter(self, tmp_path, capsys):
        assert main([_write(tmp_path, SOURCE), "--function", "other"]) == 1
        assert "No annotated functions" in capsys.readouterr().err

    def test_step_limit_failure(self, tmp_path, capsys):
        assert main([_write(tmp_path, SOURCE), "--max-steps", "2"]) == 1
        assert "failed: Execution exceeded 2 steps" in capsys.readouterr().out

    def test_parse_error(self, tmp_path, capsys):
        assert main([_write(tmp_path, "function (")]) == 2
        assert capsys.readouterr().err.startswith("error:")
