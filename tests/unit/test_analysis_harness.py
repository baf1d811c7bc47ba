# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the clean-code analysis CLI harness."""

import io
import json
import re
from pathlib import Path

from cli.analysis_harness import line_end_offset, offset_for_line, run

MUTUAL_RECURSION = "\n".join(
    [
        "function foo() {",
        "  return bar();",
        "}",
        "",
        "function bar() {",
        "  return foo();",
        "}",
    ]
)


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _project(root: Path) -> Path:
    _write_file(root / "src" / "app.ts", MUTUAL_RECURSION)
    _write_file(root / "node_modules" / "lib" / "index.js", MUTUAL_RECURSION)
    _write_file(root / "dist" / "bundle.js", MUTUAL_RECURSION)
    _write_file(root / "README.md", "# readme\n")
    _write_file(root / ".gitignore", "dist/\n")
    return root


def test_ph6_cli_001_cli_requires_a_command() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run([], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_ph6_cli_002_analyze_fails_when_path_is_missing(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["analyze", "--path", str(tmp_path / "missing")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Path does not exist" in stderr.getvalue()


def test_ph6_cli_003_analyze_json_skips_ignored_and_vendored_sources(
    tmp_path: Path,
) -> None:
    project = _project(tmp_path / "project")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["analyze", "--path", str(project), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["errors"] == []
    assert {finding["file_path"] for finding in payload["findings"]} == {"src/app.ts"}
    assert [finding["rule_code"] for finding in payload["findings"]] == [
        "readability",
        "readability",
        "dependency-cycle",
        "duplication",
        "duplication",
    ]
    cycle = payload["findings"][2]
    assert cycle["start_line"] == 1
    assert cycle["end_line"] == 7
    assert cycle["severity"] == "warning"


def test_ph6_cli_004_analyze_table_groups_findings_by_file(tmp_path: Path) -> None:
    project = _project(tmp_path / "project")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["analyze", "--path", str(project)], stdout=stdout, stderr=stderr)

    assert exit_code == 0
    output = _strip_ansi(stdout.getvalue())
    assert "src/app.ts" in output
    assert "node_modules" not in output
    assert "findings=5" in output


def test_ph6_cli_005_strict_mode_fails_when_findings_exist(tmp_path: Path) -> None:
    project = _project(tmp_path / "project")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["analyze", "--path", str(project), "--format", "json", "--strict"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 1


def test_ph6_cli_006_strict_mode_passes_for_clean_sources(tmp_path: Path) -> None:
    _write_file(tmp_path / "clean.js", "const answer = 42;\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["analyze", "--path", str(tmp_path / "clean.js"), "--strict"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert "findings=0" in _strip_ansi(stdout.getvalue())


def test_ph6_cli_007_output_flag_writes_raw_json_file(tmp_path: Path) -> None:
    project = _project(tmp_path / "project")
    output_path = tmp_path / "reports" / "findings.json"
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "analyze",
            "--path",
            str(project),
            "--format",
            "json",
            "--output",
            str(output_path),
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == ""
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert len(payload["findings"]) == 5


def test_ph6_cli_008_invalid_threshold_is_rejected(tmp_path: Path) -> None:
    project = _project(tmp_path / "project")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["analyze", "--path", str(project), "--min-similarity", "1.5"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Invalid configuration" in stderr.getvalue()


def test_ph6_cli_009_severity_flag_changes_reported_severity(tmp_path: Path) -> None:
    source = tmp_path / "app.js"
    _write_file(source, MUTUAL_RECURSION)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["analyze", "--path", str(source), "--format", "json", "--severity", "info"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert {finding["severity"] for finding in payload["findings"]} == {"info"}
    assert {finding["file_path"] for finding in payload["findings"]} == {str(source)}


def test_ph6_cli_010_unit_command_analyzes_enclosing_unit(tmp_path: Path) -> None:
    source = tmp_path / "app.js"
    _write_file(source, MUTUAL_RECURSION)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["unit", "--path", str(source), "--line", "6", "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert [finding["rule_code"] for finding in payload["findings"]] == [
        "readability"
    ]
    assert payload["findings"][0]["start_line"] == 5
    assert payload["findings"][0]["end_line"] == 7


def test_ph6_cli_011_unit_command_rejects_out_of_range_line(tmp_path: Path) -> None:
    source = tmp_path / "app.js"
    _write_file(source, MUTUAL_RECURSION)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["unit", "--path", str(source), "--line", "99"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "outside the document" in stderr.getvalue()


def test_ph6_cli_012_unit_command_rejects_unsupported_file(tmp_path: Path) -> None:
    source = tmp_path / "notes.txt"
    _write_file(source, "plain text\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["unit", "--path", str(source), "--line", "1"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Unsupported source file type" in stderr.getvalue()


def test_ph6_cli_013_offset_for_line_points_at_first_non_blank() -> None:
    text = "a\n    b\nc"

    assert offset_for_line(text, 1) == 0
    assert offset_for_line(text, 2) == 6
    assert offset_for_line(text, 3) == 8


def test_ph6_cli_014_unit_command_accepts_explicit_line_range(
    tmp_path: Path,
) -> None:
    source = tmp_path / "app.js"
    _write_file(source, MUTUAL_RECURSION)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "unit",
            "--path",
            str(source),
            "--line",
            "5",
            "--end-line",
            "7",
            "--format",
            "json",
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["errors"] == []
    assert [finding["rule_code"] for finding in payload["findings"]] == [
        "readability"
    ]
    assert payload["findings"][0]["start_line"] == 5


def test_ph6_cli_015_unit_command_rejects_inverted_line_range(
    tmp_path: Path,
) -> None:
    source = tmp_path / "app.js"
    _write_file(source, MUTUAL_RECURSION)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["unit", "--path", str(source), "--line", "5", "--end-line", "2"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "before line 5" in stderr.getvalue()


def test_ph6_cli_016_line_end_offset_points_past_line_content() -> None:
    text = "a\n    b\nc"

    assert line_end_offset(text, 1) == 1
    assert line_end_offset(text, 2) == 7
    assert line_end_offset(text, 3) == len(text)


def test_ph6_cli_017_vendored_directories_are_skipped_with_their_gitignores(
    tmp_path: Path,
) -> None:
    project = tmp_path / "project"
    _write_file(project / "src" / "app.ts", MUTUAL_RECURSION)
    _write_file(
        project / "packages" / "web" / "node_modules" / "dep" / "index.js",
        MUTUAL_RECURSION,
    )
    broken_ignore = project / "node_modules" / "dep" / ".gitignore"
    broken_ignore.parent.mkdir(parents=True, exist_ok=True)
    broken_ignore.write_bytes(b"\xff\xfe\x00bad")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["analyze", "--path", str(project), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert {finding["file_path"] for finding in payload["findings"]} == {"src/app.ts"}
