"""Similarity scores in [0, 1] for descriptor pairs."""

from __future__ import annotations

from enum import Enum

from ..descriptor import Descriptor
from .distance import compute_cosine_distance, compute_l1_distance


class DescriptorScoreType(Enum):
    """Scoring scheme for descriptor comparison."""

    COSINE = "cosine"
    L1 = "l1"

    @classmethod
    def parse(cls, value: str | DescriptorScoreType) -> DescriptorScoreType:
        """Look up a scheme by value or case-insensitive name."""
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        for member in cls:
            if member.value == key:
                return member

        valid = ", ".join(member.name for member in cls)
        raise ValueError(f"Unknown descriptor score type '{value}', expected one of {valid}")


def compute_descriptor_score(
    lhs: Descriptor,
    rhs: Descriptor,
    score_type: DescriptorScoreType = DescriptorScoreType.L1,
) -> float:
    """Compute the similarity of two descriptors.

    Args:
        lhs: First descriptor
        rhs: Second descriptor
        score_type: Scoring scheme

    Returns:
        Similarity in [0, 1], higher is more similar
    """
    if score_type is DescriptorScoreType.COSINE:
        # map [-1, 1] to [0, 1]
        return 0.5 * compute_cosine_distance(lhs, rhs) + 0.5

    # map [2, 0] to [0, 1]
    return 1.0 - 0.5 * compute_l1_distance(lhs, rhs)
