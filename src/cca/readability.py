# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Naming and formatting readability score."""

import re

from cca.analyzer import Unit

_IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9]*")
_LOWERCASE_START_PATTERN = re.compile(r"^[a-z]")

INVALID_NAME_PENALTY = 20
SHORT_NAME_PENALTY = 10
LOWERCASE_NAME_PENALTY = 20
INDENTATION_PENALTY = 15

MIN_NAME_LENGTH = 3
INDENT_BAND = (2, 4)


def evaluate_readability(unit: Unit) -> int:
    """Score a unit from 0 to 100 using naming and indentation heuristics.

    Penalties are cumulative: a name that is missing or not purely
    alphanumeric, a name shorter than three characters, a name starting
    with a lowercase letter, and a mean leading-whitespace width outside
    the ``[2, 4]`` band.

    Args:
        unit: Class or function unit.

    Returns:
        Readability score in [0, 100].
    """
    score = 100
    name = unit.name or ""
    if not _IDENTIFIER_PATTERN.fullmatch(name):
        score -= INVALID_NAME_PENALTY
    if len(name) < MIN_NAME_LENGTH:
        score -= SHORT_NAME_PENALTY
    if _LOWERCASE_START_PATTERN.match(name):
        score -= LOWERCASE_NAME_PENALTY

    average_indent = _average_indent(unit.source_text)
    low, high = INDENT_BAND
    if average_indent < low or average_indent > high:
        score -= INDENTATION_PENALTY

    return max(0, score)


def _average_indent(text: str) -> float:
    lines = text.split("\n")
    widths = [len(line) - len(line.lstrip()) for line in lines]
    return sum(widths) / len(widths)
