# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Code normalization helpers for duplication checks."""

import re

IDENTIFIER_PLACEHOLDER = "id"

_IDENTIFIER_PATTERN = re.compile(r"\b[A-Za-z_]\w*\b", re.ASCII)
_WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_for_duplication(raw_code: str) -> str:
    """Normalize code so structurally identical logic compares equal.

    Every identifier-like token (keywords included) becomes a placeholder
    and whitespace runs collapse to one space.

    Args:
        raw_code: Raw unit source text.

    Returns:
        Normalized, trimmed text.
    """
    replaced = _IDENTIFIER_PATTERN.sub(IDENTIFIER_PLACEHOLDER, raw_code)
    return _WHITESPACE_PATTERN.sub(" ", replaced).strip()


def significant_lines(raw_code: str) -> list[str]:
    """Return trimmed, non-empty lines of a code block.

    Args:
        raw_code: Raw unit source text.

    Returns:
        Lines with surrounding whitespace removed, blank lines dropped.
    """
    lines = [line.strip() for line in raw_code.split("\n")]
    return [line for line in lines if line]
