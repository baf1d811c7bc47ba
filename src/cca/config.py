# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Analysis thresholds and severity configuration."""

from dataclasses import dataclass

from cca.model import Severity

DEFAULT_MIN_UNIQUE_RATIO = 0.8
DEFAULT_MIN_SIMILARITY = 0.6
DEFAULT_SIMILARITY_LENGTH_CAP = 1000

CALLER_SEVERITIES: dict[str, Severity] = {
    "info": Severity.INFO,
    "warning": Severity.WARNING,
}


@dataclass(frozen=True)
class Thresholds:
    """Tunable limits for every rule.

    Attributes:
        max_lines: Units longer than this many lines are reported.
        max_complexity: Units above this cyclomatic complexity are reported.
        max_methods: Classes with more methods than this are reported.
        min_readability: Scores below this value are reported.
        min_unique_ratio: Distinct-line ratios below this value are reported.
        min_similarity: Function pairs above this similarity are reported.
        similarity_length_cap: Normalized texts longer than this are skipped.
    """

    max_lines: int = 15
    max_complexity: int = 8
    max_methods: int = 10
    min_readability: int = 90
    min_unique_ratio: float = DEFAULT_MIN_UNIQUE_RATIO
    min_similarity: float = DEFAULT_MIN_SIMILARITY
    similarity_length_cap: int = DEFAULT_SIMILARITY_LENGTH_CAP

    def __post_init__(self) -> None:
        """Validate threshold ranges.

        Raises:
            ValueError: If a ratio is outside [0.0, 1.0] or a limit is negative.
        """
        for field_name in ("min_unique_ratio", "min_similarity"):
            value = getattr(self, field_name)
            if value < 0.0 or value > 1.0:
                raise ValueError(f"{field_name} must be between 0.0 and 1.0.")
        if self.min_readability < 0 or self.min_readability > 100:
            raise ValueError("min_readability must be between 0 and 100.")
        for field_name in (
            "max_lines",
            "max_complexity",
            "max_methods",
            "similarity_length_cap",
        ):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be >= 0.")


def parse_severity(value: str) -> Severity:
    """Map a caller severity setting to a finding severity.

    Args:
        value: Setting value, ``info`` or ``warning``.

    Returns:
        Matching severity.

    Raises:
        ValueError: If the value is not a supported caller severity.
    """
    normalized = value.strip().lower()
    if normalized not in CALLER_SEVERITIES:
        raise ValueError(
            f"Unsupported severity: {value} (expected one of "
            f"{', '.join(sorted(CALLER_SEVERITIES))})"
        )
    return CALLER_SEVERITIES[normalized]
