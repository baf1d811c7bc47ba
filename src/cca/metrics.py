# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Structural metrics for analysis units."""

from cca.analyzer import Unit
from cca.model import Metrics


def compute_metrics(unit: Unit) -> Metrics:
    """Compute line count, method count and cyclomatic complexity.

    Args:
        unit: Class or function unit.

    Returns:
        Metrics for the unit.
    """
    line_count = len(unit.source_text.split("\n"))
    complexity = 1
    if unit.kind == "class":
        method_count = len(unit.methods)
        complexity += sum(method.branch_count for method in unit.methods)
    else:
        method_count = 1
        complexity += unit.branch_count
    return Metrics(
        line_count=line_count, method_count=method_count, complexity=complexity
    )
