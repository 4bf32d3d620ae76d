"""Loop closure candidate search over root and leaf descriptors.

Search runs in two layers:
1. Root search: score every valid root candidate against the query, keep
   the ones above the match threshold as valid matches, and forward the
   best, spatially distinct ones as registration candidates
2. Leaf search: within already validated roots, find the single leaf
   descriptor that best matches the query

Both searches are pure functions of their inputs. Caches and maps are
only read, so calls may run concurrently as long as the caller does not
mutate the caches at the same time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from ..descriptor import (
    Descriptor,
    DescriptorCache,
    DescriptorCacheMap,
    NodeId,
    RootLeafMap,
)
from .config import DescriptorMatchConfig
from .scoring import compute_descriptor_score

logger = logging.getLogger(__name__)


@dataclass
class LayerSearchResults:
    """Result of searching one layer of descriptors.

    ``score``, ``match_nodes`` and ``matches`` are aligned by index.

    Attributes:
        score: Score of each accepted match, highest first
        valid_matches: Candidates scoring above the match threshold
        query_nodes: Nodes summarized by the query descriptor
        match_nodes: Nodes summarized by each accepted match
        query_root: Root node of the query descriptor
        matches: Node ID of each accepted match
    """

    score: list[float] = field(default_factory=list)
    valid_matches: set[NodeId] = field(default_factory=set)
    query_nodes: set[NodeId] = field(default_factory=set)
    match_nodes: list[set[NodeId]] = field(default_factory=list)
    query_root: NodeId = 0
    matches: list[NodeId] = field(default_factory=list)

    @classmethod
    def empty(cls, query_nodes: Iterable[NodeId], query_root: NodeId) -> LayerSearchResults:
        """Create a result with no matches for a query."""
        return cls(query_nodes=set(query_nodes), query_root=query_root)

    @property
    def has_matches(self) -> bool:
        """Whether any candidate was accepted."""
        return len(self.matches) > 0

    @property
    def best_match(self) -> tuple[NodeId, float] | None:
        """Highest scoring accepted match as (node ID, score)."""
        if not self.matches:
            return None
        return self.matches[0], self.score[0]

    def __len__(self) -> int:
        return len(self.matches)


def _too_recent(query: Descriptor, other: Descriptor, config: DescriptorMatchConfig) -> bool:
    return query.timestamp - other.timestamp < config.min_time_separation_s


def search_descriptors(
    descriptor: Descriptor,
    match_config: DescriptorMatchConfig,
    valid_matches: Iterable[NodeId],
    descriptors: DescriptorCache,
    root_leaf_map: RootLeafMap,
    query_id: NodeId,
) -> LayerSearchResults:
    """Find registration candidates for a query among root descriptors.

    Candidates that already contain the query node, or that are not at
    least ``min_time_separation_s`` older than the query, are skipped.
    Every remaining candidate scoring above ``min_score`` is returned in
    ``valid_matches``. Registration candidates are then taken in order of
    decreasing score while the score reaches ``min_registration_score``,
    keeping those that exceed ``min_score_ratio`` of the best score and lie
    at least ``min_match_separation_m`` from every candidate already kept,
    up to ``max_registration_matches``.

    Args:
        descriptor: Query descriptor
        match_config: Search thresholds
        valid_matches: Root node IDs to consider
        descriptors: Root descriptors by node ID
        root_leaf_map: Nodes already contained in each root
        query_id: Node ID of the query

    Returns:
        LayerSearchResults with registration candidates sorted by score

    Raises:
        KeyError: If a candidate is missing from ``descriptors`` or
            ``root_leaf_map``
    """
    best_score = 0.0
    scored: list[tuple[NodeId, float]] = []
    new_valid_matches: set[NodeId] = set()

    for valid_id in sorted(valid_matches):
        if query_id in root_leaf_map[valid_id]:
            continue

        other = descriptors[valid_id]
        if _too_recent(descriptor, other, match_config):
            continue

        curr_score = compute_descriptor_score(descriptor, other, match_config.type)
        if curr_score > best_score:
            best_score = curr_score

        if curr_score > match_config.min_score:
            new_valid_matches.add(valid_id)
            scored.append((valid_id, curr_score))

    # stable, so ties keep ascending id order
    scored.sort(key=lambda id_score: id_score[1], reverse=True)

    results = LayerSearchResults(
        valid_matches=new_valid_matches,
        query_nodes=set(descriptor.nodes),
        query_root=descriptor.root_node,
    )
    positions: list[np.ndarray] = []

    for candidate_id, curr_score in scored:
        if len(results.matches) >= match_config.max_registration_matches:
            break

        # sorted, so nothing after this can be registered either
        if curr_score < match_config.min_registration_score:
            break

        if curr_score <= best_score * match_config.min_score_ratio:
            continue

        candidate = descriptors[candidate_id]
        spatially_distinct = all(
            np.linalg.norm(candidate.root_position - position)
            >= match_config.min_match_separation_m
            for position in positions
        )
        if not spatially_distinct:
            continue

        positions.append(candidate.root_position)
        results.match_nodes.append(set(candidate.nodes))
        results.matches.append(candidate_id)
        results.score.append(curr_score)

    logger.debug(
        "Root search for %d: %d scored, best %.3f, %d valid, %d registered",
        query_id,
        len(scored),
        best_score,
        len(new_valid_matches),
        len(results),
    )
    return results


def search_leaf_descriptors(
    descriptor: Descriptor,
    match_config: DescriptorMatchConfig,
    valid_matches: Iterable[NodeId],
    leaf_cache_map: DescriptorCacheMap,
    query_id: NodeId,
) -> LayerSearchResults:
    """Find the single best leaf match for a query within validated roots.

    Every leaf of every root in ``valid_matches`` is scored, except the
    query node itself and leaves not at least ``min_time_separation_s``
    older than the query. No score threshold is applied.

    Args:
        descriptor: Query descriptor
        match_config: Search thresholds (only type and time separation used)
        valid_matches: Root node IDs whose leaves are searched
        leaf_cache_map: Leaf descriptors by root node ID
        query_id: Node ID of the query

    Returns:
        LayerSearchResults with at most one match. ``matches`` holds the
        root node of the matching leaf, ``match_nodes`` and
        ``valid_matches`` hold the leaf node itself

    Raises:
        KeyError: If a root is missing from ``leaf_cache_map``
    """
    best: tuple[NodeId, NodeId, float] | None = None  # (leaf, root, score)
    n_scored = 0

    for valid_id in sorted(valid_matches):
        leaf_cache = leaf_cache_map[valid_id]

        for leaf_id in sorted(leaf_cache):
            if leaf_id == query_id:
                continue

            other = leaf_cache[leaf_id]
            if _too_recent(descriptor, other, match_config):
                continue

            curr_score = compute_descriptor_score(descriptor, other, match_config.type)
            n_scored += 1
            if best is None or curr_score > best[2]:
                best = (leaf_id, other.root_node, curr_score)

    if best is None:
        logger.debug("Leaf search for %d: no eligible leaves", query_id)
        return LayerSearchResults.empty(descriptor.nodes, descriptor.root_node)

    best_node, best_root, best_score = best
    logger.debug(
        "Leaf search for %d: %d scored, best leaf %d (root %d) at %.3f",
        query_id,
        n_scored,
        best_node,
        best_root,
        best_score,
    )
    return LayerSearchResults(
        score=[best_score],
        valid_matches={best_node},
        query_nodes=set(descriptor.nodes),
        match_nodes=[{best_node}],
        query_root=descriptor.root_node,
        matches=[best_root],
    )
