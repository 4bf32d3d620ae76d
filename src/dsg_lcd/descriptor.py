"""Place descriptors used for loop closure candidate search.

A descriptor summarizes one place in the scene graph, either as a dense
histogram (fixed-length weight vector compared index-by-index) or as a
sparse bag of words (vocabulary ids sorted ascending, with one weight per
id). Root descriptors summarize a cluster of nodes; leaf descriptors
summarize a single node.

Descriptors are built and owned by the caller (place recognition front
end). The search functions only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

NodeId = int


@dataclass
class Descriptor:
    """Feature summary of one observed place.

    Attributes:
        values: Weights, shape (N,). Dense histogram bins when ``words`` is
            empty, otherwise one weight per entry of ``words``
        words: Vocabulary ids, shape (N,), strictly ascending. Empty for
            histogram descriptors
        timestamp: Capture time in seconds
        root_position: Representative position of the summarized nodes
        nodes: Node IDs summarized by this descriptor
        root_node: ID of the owning node
        normalized: Whether ``values`` are already normalized for scoring
    """

    values: np.ndarray  # (N,) float
    words: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.uint32))
    timestamp: float = 0.0
    root_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    nodes: set[NodeId] = field(default_factory=set)
    root_node: NodeId = 0
    normalized: bool = False

    def __post_init__(self) -> None:
        """Validate and normalize inputs."""
        self.values = np.asarray(self.values, dtype=np.float64)
        words = np.asarray(self.words)
        if words.size:
            if not np.issubdtype(words.dtype, np.integer):
                raise ValueError(f"Words must be integer ids, got dtype {words.dtype}")
            if np.any(words < 0):
                raise ValueError("Words must be non-negative")
        self.words = words.astype(np.uint32)
        self.root_position = np.asarray(self.root_position, dtype=np.float64).flatten()
        self.nodes = set(self.nodes)

        if self.values.ndim != 1:
            raise ValueError(f"Values must be 1-D, got shape {self.values.shape}")
        if self.words.ndim != 1:
            raise ValueError(f"Words must be 1-D, got shape {self.words.shape}")

        if self.words.size:
            if self.words.shape != self.values.shape:
                raise ValueError(
                    f"Words and values must have equal length, got "
                    f"{self.words.shape[0]} words and {self.values.shape[0]} values"
                )
            if np.any(np.diff(self.words.astype(np.int64)) <= 0):
                raise ValueError("Words must be sorted ascending without duplicates")

    @property
    def is_sparse(self) -> bool:
        """Whether this is a bag-of-words descriptor."""
        return self.words.size > 0

    def __len__(self) -> int:
        return int(self.values.shape[0])

    @classmethod
    def from_histogram(
        cls,
        histogram: np.ndarray,
        **kwargs,
    ) -> Descriptor:
        """Create a bag-of-words descriptor from a dense histogram.

        Only nonzero bins are kept; the bin index becomes the word id.

        Args:
            histogram: Dense weights, shape (n_words,)
            **kwargs: Remaining Descriptor fields

        Returns:
            Sparse Descriptor
        """
        histogram = np.asarray(histogram, dtype=np.float64).flatten()
        words = np.flatnonzero(histogram).astype(np.uint32)
        return cls(values=histogram[words], words=words, **kwargs)

    def to_histogram(self, n_words: int) -> np.ndarray:
        """Expand a bag-of-words descriptor into a dense histogram.

        Args:
            n_words: Vocabulary size

        Returns:
            Dense weights, shape (n_words,)
        """
        if not self.is_sparse:
            if len(self) != n_words:
                raise ValueError(
                    f"Histogram has {len(self)} bins, expected {n_words}"
                )
            return self.values.copy()

        if self.words[-1] >= n_words:
            raise ValueError(
                f"Word id {int(self.words[-1])} out of range for {n_words} words"
            )
        histogram = np.zeros(n_words, dtype=np.float64)
        histogram[self.words] = self.values
        return histogram


# node id -> descriptor, one per root-level entity
DescriptorCache = dict[NodeId, Descriptor]

# root id -> cache of that root's leaf descriptors
DescriptorCacheMap = dict[NodeId, DescriptorCache]

# root id -> node ids already contained in that root
RootLeafMap = dict[NodeId, set[NodeId]]
