# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI harness for clean-code analysis of TypeScript and JavaScript sources."""

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO

import pathspec
from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from cca.analyzer import AnalyzerError, LanguageHint
from cca.config import CALLER_SEVERITIES, Thresholds, parse_severity
from cca.engine import AnalysisEngine
from cca.model import Finding

logger = logging.getLogger(__name__)

LANGUAGE_BY_SUFFIX: dict[str, LanguageHint] = {
    ".ts": LanguageHint.TS,
    ".mts": LanguageHint.TS,
    ".cts": LanguageHint.TS,
    ".tsx": LanguageHint.TSX,
    ".js": LanguageHint.JS,
    ".mjs": LanguageHint.JS,
    ".cjs": LanguageHint.JS,
    ".jsx": LanguageHint.JSX,
}

SKIPPED_DIR_NAMES: frozenset[str] = frozenset({".git", "node_modules"})

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "rule_code": 2,
    "severity": 1,
    "start_line": 1,
    "end_line": 1,
    "message": 6,
}

THRESHOLD_FLAGS: dict[str, str] = {
    "max_lines": "--max-lines",
    "max_complexity": "--max-complexity",
    "max_methods": "--max-methods",
    "min_readability": "--min-readability",
    "min_unique_ratio": "--min-unique-ratio",
    "min_similarity": "--min-similarity",
}


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


@dataclass(frozen=True)
class LocatedFinding:
    """Represent one finding with 1-based line positions for output."""

    file_path: str
    rule_code: str
    message: str
    severity: str
    start_offset: int
    end_offset: int
    start_line: int
    end_line: int


class IgnoreMatcher:
    """Decide which project paths source discovery skips.

    Skipped directory names (`.git`, `node_modules`) are excluded at any
    depth, and their own `.gitignore` files are never read. Every other
    path is checked against the project's `.gitignore` patterns.
    """

    def __init__(
        self,
        spec: pathspec.GitIgnoreSpec,
        skipped_dir_names: frozenset[str] = SKIPPED_DIR_NAMES,
    ) -> None:
        """Initialize matcher.

        Args:
            spec: Compiled gitignore matcher.
            skipped_dir_names: Directory names excluded regardless of patterns.
        """
        self._spec = spec
        self._skipped_dir_names = skipped_dir_names

    @classmethod
    def from_project_root(cls, input_root: Path) -> "IgnoreMatcher":
        """Build matcher from the .gitignore files of a TS/JS project.

        Args:
            input_root: Project root.

        Returns:
            Configured ignore matcher.

        Raises:
            OSError: If .gitignore files cannot be read.
            UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
        """
        patterns: list[str] = []
        for ignore_path in sorted(input_root.rglob(".gitignore")):
            parent = ignore_path.parent.relative_to(input_root)
            if SKIPPED_DIR_NAMES.intersection(parent.parts):
                continue
            base = "" if parent == Path(".") else parent.as_posix()
            lines = ignore_path.read_text(encoding="utf-8").splitlines()
            for line in lines:
                patterns.append(_translate_gitignore_line(line=line, base=base))
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(patterns))

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        """Check whether a path should be ignored.

        Args:
            relative_path: Project-relative POSIX path.
            is_dir: Whether the path is a directory.

        Returns:
            True when path should be ignored.
        """
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        if is_dir and normalized.rsplit("/", 1)[-1] in self._skipped_dir_names:
            return True
        if self._spec.match_file(normalized):
            return True
        if is_dir and self._spec.match_file(f"{normalized}/"):
            return True
        return False


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="cca")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze")
    analyze_parser.add_argument(
        "--path", required=True, help="Source file or directory to analyze."
    )
    analyze_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    analyze_parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    analyze_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any finding is reported.",
    )
    _add_engine_arguments(analyze_parser)

    unit_parser = subparsers.add_parser("unit")
    unit_parser.add_argument("--path", required=True, help="Source file to analyze.")
    unit_parser.add_argument(
        "--line",
        type=int,
        required=True,
        help="1-based line inside the class or function to analyze.",
    )
    unit_parser.add_argument(
        "--end-line",
        type=int,
        required=False,
        help="1-based last line of the unit range to analyze.",
    )
    unit_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    _add_engine_arguments(unit_parser)
    return parser


def _add_engine_arguments(parser: argparse.ArgumentParser) -> None:
    defaults = Thresholds()
    parser.add_argument(
        "--severity",
        choices=tuple(sorted(CALLER_SEVERITIES)),
        default="warning",
        help="Severity reported for findings.",
    )
    parser.add_argument(
        "--max-lines",
        type=int,
        default=defaults.max_lines,
        help="Report units longer than this many lines.",
    )
    parser.add_argument(
        "--max-complexity",
        type=int,
        default=defaults.max_complexity,
        help="Report units above this cyclomatic complexity.",
    )
    parser.add_argument(
        "--max-methods",
        type=int,
        default=defaults.max_methods,
        help="Report classes with more methods than this.",
    )
    parser.add_argument(
        "--min-readability",
        type=int,
        default=defaults.min_readability,
        help="Report readability scores below this value.",
    )
    parser.add_argument(
        "--min-unique-ratio",
        type=float,
        default=defaults.min_unique_ratio,
        help="Report units whose distinct-line ratio is below this value.",
    )
    parser.add_argument(
        "--min-similarity",
        type=float,
        default=defaults.min_similarity,
        help="Report function pairs whose similarity exceeds this value.",
    )


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2

    try:
        engine = build_engine(args)
    except ValueError as exc:
        logger.warning(f"Invalid analysis configuration (error={exc})")
        stderr.write(f"Invalid configuration: {exc}\n")
        return 2

    if args.command == "analyze":
        return _run_analyze(args=args, engine=engine, stdout=stdout, stderr=stderr)
    if args.command == "unit":
        return _run_unit(args=args, engine=engine, stdout=stdout, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def build_engine(args: argparse.Namespace) -> AnalysisEngine:
    """Create the analysis engine from parsed CLI arguments.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Configured analysis engine.

    Raises:
        ValueError: If thresholds or severity are invalid.
    """
    thresholds = Thresholds(
        **{field_name: getattr(args, field_name) for field_name in THRESHOLD_FLAGS}
    )
    return AnalysisEngine(
        thresholds=thresholds, severity=parse_severity(args.severity)
    )


def _run_analyze(
    args: argparse.Namespace,
    engine: AnalysisEngine,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Run analyze command.

    Args:
        args: Parsed CLI arguments.
        engine: Configured analysis engine.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    root_path = Path(args.path)
    try:
        sources = discover_sources(root_path)
    except ValidationError as exc:
        logger.warning(f"Validation failed (error={exc})")
        stderr.write(f"{exc}\n")
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read .gitignore files (error={exc})")
        stderr.write(f"Failed to read .gitignore files: {exc}\n")
        return 2

    findings: list[LocatedFinding] = []
    errors: list[AnalyzerError] = []
    for source_path in sources:
        label = _display_path(root_path=root_path, source_path=source_path)
        try:
            text = source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                f"Skipping file due to read failure (file_path={label} error={exc})"
            )
            errors.append(AnalyzerError(file_path=label, message=str(exc)))
            continue
        file_findings, file_errors = engine.analyze_with_fallback(
            text, language_for_path(source_path), file_path=label
        )
        errors.extend(file_errors)
        findings.extend(_locate(label, text, finding) for finding in file_findings)

    logger.info(
        f"Analysis completed (path={root_path} files={len(sources)} "
        f"findings={len(findings)} errors={len(errors)})"
    )
    _write_errors(errors=errors, stderr=stderr)
    if args.format == "json":
        if args.output:
            try:
                _write_json_file(
                    findings=findings, errors=errors, output_path=Path(args.output)
                )
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return 2
        else:
            _write_json(findings=findings, errors=errors, stdout=stdout)
    else:
        _write_table(findings=findings, stdout=stdout)
    if args.strict and findings:
        return 1
    return 0


def _run_unit(
    args: argparse.Namespace,
    engine: AnalysisEngine,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Run unit command.

    Args:
        args: Parsed CLI arguments.
        engine: Configured analysis engine.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    source_path = Path(args.path)
    if not source_path.is_file():
        logger.warning(f"Path is not a file (path={source_path})")
        stderr.write(f"Path is not a file: {source_path}\n")
        return 2
    try:
        language = language_for_path(source_path)
        text = source_path.read_text(encoding="utf-8")
        offset = offset_for_line(text, args.line)
        if args.end_line is not None and args.end_line < args.line:
            raise ValidationError(
                f"End line {args.end_line} is before line {args.line}"
            )
        end_offset = (
            None if args.end_line is None else line_end_offset(text, args.end_line)
        )
    except ValidationError as exc:
        logger.warning(f"Validation failed (error={exc})")
        stderr.write(f"{exc}\n")
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read source file (path={source_path} error={exc})")
        stderr.write(f"Failed to read source file: {source_path}\n")
        return 2

    label = str(source_path)
    errors: list[AnalyzerError] = []
    if end_offset is None:
        unit_findings = engine.analyze_unit_at(text, language, offset)
    else:
        unit_findings, errors = engine.analyze_range(
            text, language, offset, end_offset, file_path=label
        )
    findings = [_locate(label, text, finding) for finding in unit_findings]
    _write_errors(errors=errors, stderr=stderr)
    if args.format == "json":
        _write_json(findings=findings, errors=errors, stdout=stdout)
    else:
        _write_table(findings=findings, stdout=stdout)
    return 0


def discover_sources(root_path: Path) -> list[Path]:
    """Collect analyzable source files beneath a path.

    Args:
        root_path: Source file or project directory.

    Returns:
        Sorted source file paths.

    Raises:
        ValidationError: If the path does not exist or is an unsupported file.
        OSError: If .gitignore files cannot be read.
        UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
    """
    if not root_path.exists():
        raise ValidationError(f"Path does not exist: {root_path}")
    if root_path.is_file():
        language_for_path(root_path)
        return [root_path]

    matcher = IgnoreMatcher.from_project_root(input_root=root_path)
    sources: list[Path] = []
    queue: list[Path] = [root_path]
    while queue:
        current = queue.pop(0)
        for child in sorted(current.iterdir(), key=lambda item: item.name):
            relative_child = child.relative_to(root_path).as_posix()
            is_dir = child.is_dir()
            if matcher.matches(relative_path=relative_child, is_dir=is_dir):
                continue
            if is_dir:
                queue.append(child)
            elif child.suffix.lower() in LANGUAGE_BY_SUFFIX:
                sources.append(child)
    return sorted(sources)


def language_for_path(source_path: Path) -> LanguageHint:
    """Select the language hint from a file suffix.

    Args:
        source_path: Source file path.

    Returns:
        Language hint for the suffix.

    Raises:
        ValidationError: If the suffix is not a supported source type.
    """
    suffix = source_path.suffix.lower()
    if suffix not in LANGUAGE_BY_SUFFIX:
        raise ValidationError(f"Unsupported source file type: {source_path}")
    return LANGUAGE_BY_SUFFIX[suffix]


def offset_for_line(text: str, line: int) -> int:
    """Return the offset of the first non-blank character on a line.

    Args:
        text: Document text.
        line: 1-based line number.

    Returns:
        Character offset into ``text``.

    Raises:
        ValidationError: If the line is outside the document.
    """
    lines = text.split("\n")
    if line < 1 or line > len(lines):
        raise ValidationError(f"Line {line} is outside the document (1-{len(lines)})")
    line_start = sum(len(previous) + 1 for previous in lines[: line - 1])
    content = lines[line - 1]
    return line_start + len(content) - len(content.lstrip())


def line_end_offset(text: str, line: int) -> int:
    """Return the offset just past the last character of a line.

    Args:
        text: Document text.
        line: 1-based line number.

    Returns:
        Character offset into ``text``.

    Raises:
        ValidationError: If the line is outside the document.
    """
    lines = text.split("\n")
    if line < 1 or line > len(lines):
        raise ValidationError(f"Line {line} is outside the document (1-{len(lines)})")
    return sum(len(previous) + 1 for previous in lines[:line]) - 1


def _locate(file_path: str, text: str, finding: Finding) -> LocatedFinding:
    return LocatedFinding(
        file_path=file_path,
        rule_code=finding.rule_code,
        message=finding.message,
        severity=finding.severity.value,
        start_offset=finding.start_offset,
        end_offset=finding.end_offset,
        start_line=text.count("\n", 0, finding.start_offset) + 1,
        end_line=text.count("\n", 0, finding.end_offset) + 1,
    )


def _display_path(root_path: Path, source_path: Path) -> str:
    if root_path.is_file():
        return str(source_path)
    return source_path.relative_to(root_path).as_posix()


def _write_errors(errors: list[AnalyzerError], stderr: TextIO) -> None:
    """Write analyzer errors to stderr.

    Args:
        errors: Recoverable analyzer errors.
        stderr: Standard error stream.
    """
    for error in errors:
        stderr.write(f"analyzer_error: {error}\n")


def _payload(
    findings: list[LocatedFinding], errors: list[AnalyzerError]
) -> dict[str, list[dict[str, object]]]:
    return {
        "findings": [asdict(finding) for finding in findings],
        "errors": [asdict(error) for error in errors],
    }


def _write_json(
    findings: list[LocatedFinding], errors: list[AnalyzerError], stdout: TextIO
) -> None:
    """Write findings and errors in JSON format.

    Args:
        findings: Located findings.
        errors: Recoverable analyzer errors.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(_payload(findings, errors), indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_json_file(
    findings: list[LocatedFinding], errors: list[AnalyzerError], output_path: Path
) -> None:
    """Write raw JSON payload to an output file.

    Args:
        findings: Located findings.
        errors: Recoverable analyzer errors.
        output_path: Target file path.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(_payload(findings, errors), indent=2, sort_keys=True),
        encoding="utf-8",
    )


def _write_table(findings: list[LocatedFinding], stdout: TextIO) -> None:
    """Write findings as one table per file.

    Args:
        findings: Located findings.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    findings_by_file: dict[str, list[LocatedFinding]] = {}
    for finding in findings:
        findings_by_file.setdefault(finding.file_path, []).append(finding)

    for file_path in sorted(findings_by_file):
        console.rule(f"{file_path}", style=Style(color="cyan"), characters="-")
        table = Table(show_header=True, show_lines=True, expand=True)
        table.add_column(
            "rule_code", ratio=TABLE_COLUMN_RATIOS["rule_code"], overflow="fold"
        )
        table.add_column(
            "severity", ratio=TABLE_COLUMN_RATIOS["severity"], overflow="fold"
        )
        table.add_column(
            "start_line",
            ratio=TABLE_COLUMN_RATIOS["start_line"],
            justify="right",
            overflow="fold",
        )
        table.add_column(
            "end_line",
            ratio=TABLE_COLUMN_RATIOS["end_line"],
            justify="right",
            overflow="fold",
        )
        table.add_column(
            "message", ratio=TABLE_COLUMN_RATIOS["message"], overflow="fold"
        )
        for finding in findings_by_file[file_path]:
            table.add_row(
                finding.rule_code,
                finding.severity,
                str(finding.start_line),
                str(finding.end_line),
                finding.message,
            )
        console.print(table)
    console.print(f"findings={len(findings)}")


def _translate_gitignore_line(line: str, base: str) -> str:
    """Translate one .gitignore line to root-relative pattern.

    Args:
        line: Original .gitignore line.
        base: Parent directory relative to project root.

    Returns:
        Root-relative pattern line.
    """
    if not base:
        return line
    if not line:
        return line
    if line.lstrip().startswith("#"):
        return line
    if line.startswith(r"\!") or line.startswith(r"\#"):
        return line
    is_negation = line.startswith("!")
    pattern = line[1:] if is_negation else line
    anchored = pattern.startswith("/")
    normalized_pattern = pattern[1:] if anchored else pattern
    prefixed = f"{base}/{normalized_pattern}" if normalized_pattern else base
    if anchored:
        prefixed = f"/{prefixed}"
    if is_negation:
        return f"!{prefixed}"
    return prefixed


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
