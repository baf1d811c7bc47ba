# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Duplication detection within and across analysis units."""

import logging
from dataclasses import dataclass

import Levenshtein

from cca.analyzer import FunctionUnit, Unit
from cca.config import (
    DEFAULT_MIN_SIMILARITY,
    DEFAULT_MIN_UNIQUE_RATIO,
    DEFAULT_SIMILARITY_LENGTH_CAP,
)
from cca.normalizer import normalize_for_duplication, significant_lines

logger = logging.getLogger(__name__)


def has_intra_unit_duplication(
    unit: Unit, min_unique_ratio: float = DEFAULT_MIN_UNIQUE_RATIO
) -> bool:
    """Check whether too many lines of a unit repeat each other.

    Args:
        unit: Class or function unit.
        min_unique_ratio: Minimum accepted ratio of distinct to total lines.

    Returns:
        ``True`` when the distinct-line ratio is below ``min_unique_ratio``.
    """
    lines = significant_lines(unit.source_text)
    return len(set(lines)) < len(lines) * min_unique_ratio


def text_similarity(
    left: str, right: str, length_cap: int = DEFAULT_SIMILARITY_LENGTH_CAP
) -> float:
    """Compute normalized edit-distance similarity of two code blocks.

    Args:
        left: First raw code block.
        right: Second raw code block.
        length_cap: Normalized texts longer than this are not compared.

    Returns:
        Similarity in [0.0, 1.0]; 0.0 when either text exceeds the cap.
    """
    normalized_left = normalize_for_duplication(left)
    normalized_right = normalize_for_duplication(right)
    if len(normalized_left) > length_cap or len(normalized_right) > length_cap:
        return 0.0
    if not normalized_left and not normalized_right:
        return 1.0
    distance = Levenshtein.distance(normalized_left, normalized_right)
    return 1.0 - distance / max(len(normalized_left), len(normalized_right))


@dataclass(frozen=True)
class DuplicatePair:
    """Represent two functions with similar normalized logic."""

    left: FunctionUnit
    right: FunctionUnit
    similarity: float


class DuplicationChecker:
    """Find similar function pairs across a document."""

    def __init__(
        self,
        similarity_threshold: float = DEFAULT_MIN_SIMILARITY,
        length_cap: int = DEFAULT_SIMILARITY_LENGTH_CAP,
    ) -> None:
        """Initialize checker with similarity threshold.

        Args:
            similarity_threshold: Exclusive similarity threshold in [0.0, 1.0].
            length_cap: Normalized length above which a pair is skipped.

        Raises:
            ValueError: If threshold is outside [0.0, 1.0] or cap is negative.
        """
        if similarity_threshold < 0.0 or similarity_threshold > 1.0:
            raise ValueError("similarity_threshold must be between 0.0 and 1.0.")
        if length_cap < 0:
            raise ValueError("length_cap must be >= 0.")
        self._similarity_threshold = similarity_threshold
        self._length_cap = length_cap

    def check(self, functions: list[FunctionUnit]) -> list[DuplicatePair]:
        """Compare every unordered pair of functions.

        Args:
            functions: Function units in document order.

        Returns:
            Pairs whose similarity exceeds the threshold, in pair order.
        """
        pairs: list[DuplicatePair] = []
        for index, left in enumerate(functions):
            for right in functions[index + 1 :]:
                similarity = text_similarity(
                    left.source_text, right.source_text, length_cap=self._length_cap
                )
                if similarity <= self._similarity_threshold:
                    continue
                pairs.append(
                    DuplicatePair(left=left, right=right, similarity=similarity)
                )
        logger.debug(
            f"Cross-unit duplication check completed (functions={len(functions)} "
            f"pairs={len(pairs)})"
        )
        return pairs
