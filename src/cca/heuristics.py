# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Heuristic policies for responsibility, testability and side-effect checks."""

import re
from typing import Protocol

from cca.analyzer import Unit

RESPONSIBILITY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "data": ("data", "database", "query", "save", "load"),
    "ui": ("ui", "view", "render", "display", "button"),
    "business": ("business", "logic", "calculate", "process"),
    "validation": ("validate", "check", "error", "invalid"),
    "communication": ("email", "send", "http", "api", "network"),
}

_INSTANTIATION_PATTERN = re.compile(r"\bnew\s+\w+", re.ASCII)
_GLOBALS_PATTERN = re.compile(r"\bglobal\b|\bwindow\b|\bdocument\b", re.ASCII)
_CONSOLE_PATTERN = re.compile(r"\bconsole\.(log|error|warn)\b", re.ASCII)
_BARE_ASSIGNMENT_PATTERN = re.compile(
    r"(^|[^.])\b([A-Za-z_]\w*)\s*([+\-*/]?=)(?![=>])", re.ASCII | re.MULTILINE
)
_THIS_FIELD_ASSIGNMENT_PATTERN = re.compile(r"\bthis\.\w+\s*=", re.ASCII)


class HeuristicPolicy(Protocol):
    """Classify unit concerns and engineering risks."""

    def identify_responsibilities(self, unit: Unit) -> tuple[str, ...]:
        """Return concern tags matched by the unit, in taxonomy order."""

    def is_testable(self, unit: Unit) -> bool:
        """Return whether the unit can be exercised in isolation."""

    def has_side_effects(self, unit: Unit) -> bool:
        """Return whether the unit mutates or emits observable state."""


class LexicalHeuristicPolicy:
    """Pattern-matching policy over unit source text.

    Matching is lexical: keywords and assignments are found by substring and
    regular-expression search, so incidental word occurrences produce false
    positives.
    """

    def __init__(
        self, keywords: dict[str, tuple[str, ...]] | None = None
    ) -> None:
        """Initialize policy keyword taxonomy.

        Args:
            keywords: Concern tag to keyword mapping; defaults to
                ``RESPONSIBILITY_KEYWORDS``.
        """
        self._keywords = keywords or RESPONSIBILITY_KEYWORDS

    def identify_responsibilities(self, unit: Unit) -> tuple[str, ...]:
        """Tag the concerns a unit addresses.

        Args:
            unit: Class or function unit.

        Returns:
            Matched tags in taxonomy order.
        """
        text = unit.source_text.lower()
        return tuple(
            tag
            for tag, words in self._keywords.items()
            if any(word in text for word in words)
        )

    def is_testable(self, unit: Unit) -> bool:
        """Check for instantiation, globals, console I/O and bare assignment.

        Args:
            unit: Class or function unit.

        Returns:
            ``False`` when any coupling indicator is present.
        """
        text = unit.source_text
        if _INSTANTIATION_PATTERN.search(text):
            return False
        if _GLOBALS_PATTERN.search(text):
            return False
        return not (_uses_console(text) or _has_bare_assignment(text))

    def has_side_effects(self, unit: Unit) -> bool:
        """Check for field mutation, console I/O and bare assignment.

        Args:
            unit: Class or function unit.

        Returns:
            ``True`` when any side-effect indicator is present.
        """
        text = unit.source_text
        return bool(
            _THIS_FIELD_ASSIGNMENT_PATTERN.search(text)
            or _uses_console(text)
            or _has_bare_assignment(text)
        )


def _uses_console(text: str) -> bool:
    return _CONSOLE_PATTERN.search(text) is not None


def _has_bare_assignment(text: str) -> bool:
    return _BARE_ASSIGNMENT_PATTERN.search(text) is not None
