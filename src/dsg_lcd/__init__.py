"""Python DSG LCD - descriptor-based loop closure candidate search."""

__version__ = "0.1.0"

# Re-export main classes for convenient imports
from .descriptor import (
    Descriptor,
    DescriptorCache,
    DescriptorCacheMap,
    NodeId,
    RootLeafMap,
)
from .matching import (
    DescriptorMatchConfig,
    DescriptorScoreType,
    LayerSearchResults,
    compute_descriptor_score,
    compute_distance,
    search_descriptors,
    search_leaf_descriptors,
)

__all__ = [
    "__version__",
    # Descriptors
    "Descriptor",
    "DescriptorCache",
    "DescriptorCacheMap",
    "NodeId",
    "RootLeafMap",
    # Matching
    "DescriptorMatchConfig",
    "DescriptorScoreType",
    "LayerSearchResults",
    "compute_descriptor_score",
    "compute_distance",
    "search_descriptors",
    "search_leaf_descriptors",
]
