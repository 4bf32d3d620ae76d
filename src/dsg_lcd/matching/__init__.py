"""Descriptor matching for loop closure detection in a scene graph.

This module scores place descriptors against each other and searches
root and leaf descriptor caches for loop closure candidates.

Key components:
- compute_distance: Raw distance over histogram or bag-of-words descriptors
- compute_descriptor_score: Similarity in [0, 1] (cosine or L1 scheme)
- DescriptorMatchConfig: Search thresholds
- search_descriptors: Multi-candidate search over root descriptors
- search_leaf_descriptors: Single best match over leaf descriptors
"""

from .config import DescriptorMatchConfig
from .distance import (
    CosinePairwise,
    L1Pairwise,
    PairwiseDistance,
    compute_cosine_distance,
    compute_distance,
    compute_distance_bow,
    compute_distance_hist,
    compute_l1_distance,
)
from .scoring import DescriptorScoreType, compute_descriptor_score
from .search import LayerSearchResults, search_descriptors, search_leaf_descriptors

__all__ = [
    # Distance
    "PairwiseDistance",
    "CosinePairwise",
    "L1Pairwise",
    "compute_distance",
    "compute_distance_hist",
    "compute_distance_bow",
    "compute_cosine_distance",
    "compute_l1_distance",
    # Scoring
    "DescriptorScoreType",
    "compute_descriptor_score",
    # Config
    "DescriptorMatchConfig",
    # Search
    "LayerSearchResults",
    "search_descriptors",
    "search_leaf_descriptors",
]
