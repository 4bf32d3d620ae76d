"""Raw distances between place descriptors.

Two descriptor representations are supported:
1. Histogram: dense vectors compared index-by-index
2. Bag of Words: sorted (word id, weight) pairs compared over shared words

Both paths accumulate a pluggable pairwise function over the dimensions
present in both descriptors. A histogram bin with weight exactly 0 counts
as absent, the same way a word missing from one side of a bag-of-words
comparison never contributes. See Nister & Stewenius, "Scalable
Recognition with a Vocabulary Tree" (CVPR 2006) for the derivation of the
L1 form used below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np

from ..descriptor import Descriptor


class PairwiseDistance(Protocol):
    """Elementwise combination of two aligned weight arrays.

    Called once per comparison with every shared dimension at once, so
    implementations must operate elementwise on numpy arrays (use
    ``np.maximum`` rather than ``max``, ``np.abs`` rather than ``abs``).
    """

    def __call__(self, lhs: np.ndarray, rhs: np.ndarray) -> np.ndarray: ...


@dataclass(frozen=True)
class CosinePairwise:
    """Product of weights, scaled by the product of the vector norms."""

    scale: float = 1.0

    def __call__(self, lhs: np.ndarray, rhs: np.ndarray) -> np.ndarray:
        return lhs * rhs / self.scale


@dataclass(frozen=True)
class L1Pairwise:
    """Shared-dimension term of the L1 distance between L1-normalized vectors.

    For normalized a and b:

        ||a - b||_1 = 2 + sum_{i: a_i != 0, b_i != 0} |a_i - b_i| - |a_i| - |b_i|
    """

    lhs_scale: float = 1.0
    rhs_scale: float = 1.0

    def __call__(self, lhs: np.ndarray, rhs: np.ndarray) -> np.ndarray:
        a = lhs / self.lhs_scale
        b = rhs / self.rhs_scale
        return np.abs(a - b) - np.abs(a) - np.abs(b)


def compute_distance_hist(
    lhs: Descriptor,
    rhs: Descriptor,
    distance_func: PairwiseDistance,
) -> float:
    """Accumulate a pairwise function over two dense histograms.

    Bins where either side is exactly zero are skipped.

    Args:
        lhs: First histogram descriptor
        rhs: Second histogram descriptor
        distance_func: Pairwise function to accumulate

    Returns:
        Accumulated distance

    Raises:
        ValueError: If the histograms have different lengths
    """
    if lhs.values.shape != rhs.values.shape:
        raise ValueError(
            f"Histogram lengths differ: {lhs.values.shape[0]} != {rhs.values.shape[0]}"
        )

    present = (lhs.values != 0.0) & (rhs.values != 0.0)
    if not np.any(present):
        return 0.0

    return float(np.sum(distance_func(lhs.values[present], rhs.values[present])))


def compute_distance_bow(
    lhs: Descriptor,
    rhs: Descriptor,
    distance_func: PairwiseDistance,
) -> float:
    """Accumulate a pairwise function over the words shared by two descriptors.

    Equivalent to a merge-join over the two sorted word lists: only word ids
    present on both sides contribute.

    Args:
        lhs: First bag-of-words descriptor
        rhs: Second bag-of-words descriptor
        distance_func: Pairwise function to accumulate

    Returns:
        Accumulated distance

    Raises:
        ValueError: If either descriptor has mismatched words and values
    """
    for descriptor in (lhs, rhs):
        if descriptor.words.shape != descriptor.values.shape:
            raise ValueError(
                f"Descriptor has {descriptor.words.shape[0]} words but "
                f"{descriptor.values.shape[0]} values"
            )

    # words are unique and sorted, so intersect1d is the merge-join
    _, lhs_idx, rhs_idx = np.intersect1d(
        lhs.words, rhs.words, assume_unique=True, return_indices=True
    )
    if lhs_idx.size == 0:
        return 0.0

    return float(np.sum(distance_func(lhs.values[lhs_idx], rhs.values[rhs_idx])))


def compute_distance(
    lhs: Descriptor,
    rhs: Descriptor,
    distance_func: PairwiseDistance,
) -> float:
    """Accumulate a pairwise function over two descriptors.

    Uses the histogram path when neither descriptor has words and the
    bag-of-words path otherwise. A descriptor with no words and no values
    is an empty bag of words and shares nothing with the other side.

    Args:
        lhs: First descriptor
        rhs: Second descriptor
        distance_func: Pairwise function to accumulate

    Returns:
        Accumulated distance

    Raises:
        ValueError: If one descriptor is a nonempty histogram and the other
            a bag of words
    """
    if not lhs.is_sparse and not rhs.is_sparse:
        return compute_distance_hist(lhs, rhs, distance_func)

    # a bag of words with no words is still a bag of words
    dense = rhs if lhs.is_sparse else lhs
    if dense.values.size:
        raise ValueError("Cannot compare a histogram descriptor with a bag-of-words descriptor")

    return compute_distance_bow(lhs, rhs, distance_func)


def _nonzero_or_one(norm: float) -> float:
    return norm if norm > 0.0 else 1.0


def compute_cosine_distance(lhs: Descriptor, rhs: Descriptor) -> float:
    """Cosine similarity between two descriptors, in [-1, 1].

    Args:
        lhs: First descriptor
        rhs: Second descriptor

    Returns:
        Cosine similarity
    """
    lhs_scale = 1.0 if lhs.normalized else _nonzero_or_one(float(np.linalg.norm(lhs.values)))
    rhs_scale = 1.0 if rhs.normalized else _nonzero_or_one(float(np.linalg.norm(rhs.values)))
    scale = lhs_scale * rhs_scale

    return compute_distance(lhs, rhs, CosinePairwise(scale))


def compute_l1_distance(lhs: Descriptor, rhs: Descriptor) -> float:
    """L1 distance between two L1-normalized descriptors, in [0, 2].

    Identical descriptors give 0; descriptors with no shared nonzero
    dimension give 2.

    Args:
        lhs: First descriptor
        rhs: Second descriptor

    Returns:
        L1 distance
    """
    distance_func = L1Pairwise(
        lhs_scale=1.0 if lhs.normalized else _nonzero_or_one(float(np.sum(np.abs(lhs.values)))),
        rhs_scale=1.0 if rhs.normalized else _nonzero_or_one(float(np.sum(np.abs(rhs.values)))),
    )

    return 2.0 + compute_distance(lhs, rhs, distance_func)
