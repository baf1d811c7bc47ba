# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Finding aggregation across all analysis stages."""

import logging

from cca.analyzer import AnalyzerError, FunctionUnit, LanguageHint, Unit, UnitParser
from cca.analyzers import TreeSitterParser
from cca.config import Thresholds
from cca.dependencies import build_dependency_graph, detect_cycles
from cca.duplication import DuplicationChecker, has_intra_unit_duplication
from cca.heuristics import HeuristicPolicy, LexicalHeuristicPolicy
from cca.metrics import compute_metrics
from cca.model import (
    RULE_ANALYSIS_ERROR,
    RULE_COMPLEXITY,
    RULE_DEPENDENCY_CYCLE,
    RULE_DUPLICATION,
    RULE_GOD_CLASS,
    RULE_LARGE_FILE,
    RULE_READABILITY,
    RULE_SIDE_EFFECTS,
    RULE_SIZE,
    RULE_SRP,
    RULE_TESTABILITY,
    Finding,
    Severity,
)
from cca.readability import evaluate_readability

logger = logging.getLogger(__name__)

LARGE_FILE_CHARACTERS = 1000

_PLURALS: dict[str, str] = {"class": "classes", "function": "functions"}


def find_unit_at(units: list[Unit], offset: int) -> Unit | None:
    """Return the first unit whose range contains an offset.

    Args:
        units: Units in document order.
        offset: Character offset; range ends are inclusive.

    Returns:
        The enclosing unit, or ``None``.
    """
    for unit in units:
        if unit.start_offset <= offset <= unit.end_offset:
            return unit
    return None


class AnalysisEngine:
    """Run every clean-code check over a document and collect findings."""

    def __init__(
        self,
        parser: UnitParser | None = None,
        thresholds: Thresholds | None = None,
        policy: HeuristicPolicy | None = None,
        severity: Severity = Severity.WARNING,
    ) -> None:
        """Initialize engine collaborators.

        Args:
            parser: Unit parser; defaults to the tree-sitter parser.
            thresholds: Rule limits; defaults to ``Thresholds()``.
            policy: Responsibility/testability/side-effect policy.
            severity: Severity attached to every regular finding.

        Raises:
            ValueError: If ``severity`` is not a known severity.
        """
        self._parser = parser or TreeSitterParser()
        self._thresholds = thresholds or Thresholds()
        self._policy = policy or LexicalHeuristicPolicy()
        self._severity = Severity(severity)
        self._duplication_checker = DuplicationChecker(
            similarity_threshold=self._thresholds.min_similarity,
            length_cap=self._thresholds.similarity_length_cap,
        )

    def analyze(self, text: str, language: LanguageHint) -> list[Finding]:
        """Analyze a document.

        Args:
            text: Document source text.
            language: Language hint passed to the parser.

        Returns:
            Ordered findings; empty when the document yields no units.
        """
        units = self._parser.parse(text, language)
        return self.analyze_units(units=units, document_length=len(text))

    def analyze_with_fallback(
        self, text: str, language: LanguageHint, file_path: str = "<document>"
    ) -> tuple[list[Finding], list[AnalyzerError]]:
        """Analyze a document, degrading to coarse checks on parse failure.

        Args:
            text: Document source text.
            language: Language hint passed to the parser.
            file_path: Document label for error records.

        Returns:
            A tuple of findings and parser errors.
        """
        units, errors = self._parser.parse_with_errors(
            text, language, file_path=file_path
        )
        if not errors:
            return self.analyze_units(units=units, document_length=len(text)), []
        logger.warning(
            f"Falling back to basic analysis (file_path={file_path} "
            f"errors={len(errors)})"
        )
        return self.fallback_findings(text=text, errors=errors), errors

    def analyze_units(self, units: list[Unit], document_length: int) -> list[Finding]:
        """Aggregate per-unit, cycle and cross-unit findings.

        Args:
            units: Units in document order.
            document_length: Length of the document text.

        Returns:
            Findings ordered unit by unit, then cycles, then cross-unit
            duplication.
        """
        findings: list[Finding] = []
        for unit in units:
            findings.extend(self.analyze_unit(unit))

        graph = build_dependency_graph(units)
        for cycle in detect_cycles(graph):
            loop = " -> ".join([*cycle, cycle[0]])
            findings.append(
                self._finding(
                    RULE_DEPENDENCY_CYCLE,
                    f"Dependency cycle detected: {loop}. Refactor to break loops.",
                    0,
                    document_length,
                )
            )

        functions: list[FunctionUnit] = [
            unit for unit in units if unit.kind == "function"
        ]
        for pair in self._duplication_checker.check(functions):
            findings.append(
                self._unit_finding(
                    pair.left,
                    RULE_DUPLICATION,
                    "Code duplication: Similar logic to function "
                    f"{pair.right.display_name}.",
                )
            )
            findings.append(
                self._unit_finding(
                    pair.right,
                    RULE_DUPLICATION,
                    "Code duplication: Similar logic to function "
                    f"{pair.left.display_name}.",
                )
            )

        logger.debug(
            f"Analysis pass completed (units={len(units)} findings={len(findings)})"
        )
        return findings

    def analyze_unit(self, unit: Unit) -> list[Finding]:
        """Run the per-unit checks in their fixed order.

        Args:
            unit: Class or function unit.

        Returns:
            Readability, size, complexity, god-class, SRP, duplication,
            testability and side-effect findings, in that order.
        """
        thresholds = self._thresholds
        kind = unit.kind
        plural = _PLURALS[kind]
        findings: list[Finding] = []

        score = evaluate_readability(unit)
        if score < thresholds.min_readability:
            findings.append(
                self._unit_finding(
                    unit,
                    RULE_READABILITY,
                    "Poor readability: Use meaningful names, consistent formatting. "
                    f"Score: {score}/100",
                )
            )

        metrics = compute_metrics(unit)
        if metrics.line_count > thresholds.max_lines:
            findings.append(
                self._unit_finding(
                    unit,
                    RULE_SIZE,
                    f"Large {kind}: {metrics.line_count} lines. "
                    f"Consider breaking into smaller {plural}.",
                )
            )
        if metrics.complexity > thresholds.max_complexity:
            findings.append(
                self._unit_finding(
                    unit,
                    RULE_COMPLEXITY,
                    f"High complexity: Cyclomatic {metrics.complexity}. "
                    f"Refactor into smaller {plural} or use a strategy pattern.",
                )
            )
        if kind == "class" and metrics.method_count > thresholds.max_methods:
            findings.append(
                self._unit_finding(
                    unit,
                    RULE_GOD_CLASS,
                    f"God class: {metrics.method_count} methods. "
                    "Possible SRP violation.",
                )
            )

        responsibilities = self._policy.identify_responsibilities(unit)
        if len(responsibilities) > 1:
            findings.append(
                self._unit_finding(
                    unit,
                    RULE_SRP,
                    f"SRP Violation: {kind} handles multiple concerns - "
                    f"{', '.join(responsibilities)}. Split into separate {plural}.",
                )
            )

        if has_intra_unit_duplication(unit, thresholds.min_unique_ratio):
            findings.append(
                self._unit_finding(
                    unit,
                    RULE_DUPLICATION,
                    "Code duplication detected. Extract to shared method.",
                )
            )
        if not self._policy.is_testable(unit):
            findings.append(
                self._unit_finding(
                    unit,
                    RULE_TESTABILITY,
                    "Code not easily testable (tight coupling, globals).",
                )
            )
        if self._policy.has_side_effects(unit):
            findings.append(
                self._unit_finding(unit, RULE_SIDE_EFFECTS, "Unexpected side effects.")
            )
        return findings

    def analyze_unit_at(
        self, text: str, language: LanguageHint, offset: int
    ) -> list[Finding]:
        """Analyze only the unit enclosing an offset.

        Args:
            text: Document source text.
            language: Language hint passed to the parser.
            offset: Character offset inside the target unit.

        Returns:
            Per-unit findings for the enclosing unit; empty when none encloses
            the offset.
        """
        unit = find_unit_at(self._parser.parse(text, language), offset)
        if unit is None:
            logger.info(f"No unit found at offset (offset={offset})")
            return []
        logger.info(f"Analyzing {unit.kind}: {unit.display_name}")
        return self.analyze_unit(unit)

    def analyze_range(
        self,
        text: str,
        language: LanguageHint,
        start_offset: int,
        end_offset: int,
        file_path: str = "<document>",
    ) -> tuple[list[Finding], list[AnalyzerError]]:
        """Analyze a previously located unit range, degrading on parse failure.

        Args:
            text: Document source text.
            language: Language hint passed to the parser.
            start_offset: Start character offset of the unit.
            end_offset: End character offset of the unit.
            file_path: Document label for error records.

        Returns:
            A tuple of findings and parser errors. Without errors the findings
            are those of the unit enclosing ``start_offset``; with errors they
            are the coarse checks of ``fallback_unit_findings``.
        """
        units, errors = self._parser.parse_with_errors(
            text, language, file_path=file_path
        )
        if errors:
            logger.warning(
                f"Falling back to basic unit analysis (file_path={file_path} "
                f"start={start_offset} end={end_offset})"
            )
            return (
                self.fallback_unit_findings(
                    text=text, start_offset=start_offset, end_offset=end_offset
                ),
                errors,
            )
        unit = find_unit_at(units, start_offset)
        if unit is None:
            logger.info(f"No unit found at offset (offset={start_offset})")
            return [], []
        return self.analyze_unit(unit), []

    def fallback_unit_findings(
        self, text: str, start_offset: int, end_offset: int
    ) -> list[Finding]:
        """Build coarse findings for one unit range of an unparsed document.

        Args:
            text: Document source text.
            start_offset: Start character offset of the unit.
            end_offset: End character offset of the unit.

        Returns:
            ``size`` when the range spans more than ``max_lines`` lines and
            ``side-effects`` when it mentions ``console.``.
        """
        unit_text = text[start_offset:end_offset]
        findings: list[Finding] = []
        if len(unit_text.split("\n")) > self._thresholds.max_lines:
            findings.append(
                self._finding(
                    RULE_SIZE,
                    "Large code unit detected. Consider breaking into smaller units.",
                    start_offset,
                    end_offset,
                )
            )
        if "console." in unit_text:
            findings.append(
                self._finding(
                    RULE_SIDE_EFFECTS,
                    "Console usage detected. Consider proper logging.",
                    start_offset,
                    end_offset,
                )
            )
        return findings

    def fallback_findings(
        self, text: str, errors: list[AnalyzerError]
    ) -> list[Finding]:
        """Build coarse document findings used when parsing fails.

        Args:
            text: Document source text.
            errors: Parser errors for the document.

        Returns:
            A ``large-file`` finding for long documents, followed by one
            ``analysis-error`` finding per parser error.
        """
        findings: list[Finding] = []
        if len(text) > LARGE_FILE_CHARACTERS:
            findings.append(
                self._finding(
                    RULE_LARGE_FILE,
                    "Large file detected. Consider splitting into smaller modules.",
                    0,
                    len(text),
                )
            )
        for error in errors:
            findings.append(
                Finding(
                    rule_code=RULE_ANALYSIS_ERROR,
                    message=f"Analysis error: {error.message}",
                    severity=Severity.ERROR,
                    start_offset=0,
                    end_offset=0,
                )
            )
        return findings

    def _unit_finding(self, unit: Unit, rule_code: str, message: str) -> Finding:
        return self._finding(rule_code, message, unit.start_offset, unit.end_offset)

    def _finding(
        self, rule_code: str, message: str, start_offset: int, end_offset: int
    ) -> Finding:
        return Finding(
            rule_code=rule_code,
            message=message,
            severity=self._severity,
            start_offset=start_offset,
            end_offset=end_offset,
        )
