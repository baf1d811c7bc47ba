# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for analysis findings."""

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    """Finding severity levels."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


RULE_READABILITY = "readability"
RULE_SIZE = "size"
RULE_COMPLEXITY = "complexity"
RULE_GOD_CLASS = "god-class"
RULE_SRP = "srp"
RULE_DUPLICATION = "duplication"
RULE_TESTABILITY = "testability"
RULE_SIDE_EFFECTS = "side-effects"
RULE_DEPENDENCY_CYCLE = "dependency-cycle"
RULE_LARGE_FILE = "large-file"
RULE_ANALYSIS_ERROR = "analysis-error"

RULE_CODES: frozenset[str] = frozenset(
    {
        RULE_READABILITY,
        RULE_SIZE,
        RULE_COMPLEXITY,
        RULE_GOD_CLASS,
        RULE_SRP,
        RULE_DUPLICATION,
        RULE_TESTABILITY,
        RULE_SIDE_EFFECTS,
        RULE_DEPENDENCY_CYCLE,
        RULE_LARGE_FILE,
        RULE_ANALYSIS_ERROR,
    }
)


@dataclass(frozen=True)
class Metrics:
    """Represent structural metrics for one unit.

    Attributes:
        line_count: Newline-delimited line count of the unit text.
        method_count: Declared methods for classes; always 1 for functions.
        complexity: Base path plus each ``if``/``for``/``while`` node.
    """

    line_count: int
    method_count: int
    complexity: int


@dataclass(frozen=True)
class Finding:
    """Represent one detected violation.

    Attributes:
        rule_code: Stable rule identifier used for filtering and dedup.
        message: Human-readable description.
        severity: Reported severity.
        start_offset: Start character offset in the document.
        end_offset: End character offset in the document.
    """

    rule_code: str
    message: str
    severity: Severity
    start_offset: int
    end_offset: int
