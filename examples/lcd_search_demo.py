#!/usr/bin/env python3
"""Demo script for loop closure candidate search over a synthetic loop.

The demo drives around a square loop twice. Each place gets a sparse
bag-of-words descriptor drawn from a place-specific word distribution,
plus per-visit noise. Places are grouped into roots of a few consecutive
places. Each new place is matched first against the root descriptors and
then against the leaves of the registered roots; on the second lap this
finds the first visit of the same place.

Usage:
    uv run python examples/lcd_search_demo.py
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np

from dsg_lcd import (
    Descriptor,
    DescriptorCache,
    DescriptorCacheMap,
    DescriptorMatchConfig,
    RootLeafMap,
    search_descriptors,
    search_leaf_descriptors,
)

N_WORDS = 2000
WORDS_PER_PLACE = 40
WORD_DROPOUT = 0.1
PLACES_PER_LAP = 24
PLACES_PER_ROOT = 3
SECONDS_PER_PLACE = 2.0

DEFAULT_CONFIG = Path(__file__).parent / "lcd_config.yaml"


@dataclass
class DemoMatch:
    """Leaf match found for one query place."""

    node_id: int
    match_node: int
    match_root: int
    score: float
    n_root_candidates: int

    @property
    def correct(self) -> bool:
        """Whether the match is an earlier visit of the same place."""
        return self.match_node % PLACES_PER_LAP == self.node_id % PLACES_PER_LAP


def place_position(index: int) -> np.ndarray:
    """Position of a place on a 10m square loop."""
    side = PLACES_PER_LAP // 4
    t = (index % PLACES_PER_LAP) / side
    edge, frac = int(t), t - int(t)
    corners = np.array([[0, 0, 0], [10, 0, 0], [10, 10, 0], [0, 10, 0], [0, 0, 0]], float)
    return corners[edge] + frac * (corners[edge + 1] - corners[edge])


def place_histogram(place_words: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Noisy, L1-normalized word histogram for one visit of a place."""
    histogram = np.zeros(N_WORDS)
    kept = place_words[rng.random(len(place_words)) > WORD_DROPOUT]
    histogram[kept] = rng.random(len(kept)) + 0.5
    noise_words = rng.choice(N_WORDS, size=5, replace=False)
    histogram[noise_words] += rng.random(5) * 0.5
    return histogram / histogram.sum()


def run_demo(config_path: str | Path = DEFAULT_CONFIG, seed: int = 3) -> list[DemoMatch]:
    """Drive two laps and search for loop closures at every place.

    Args:
        config_path: YAML file with "root" and "leaf" sections
        seed: Random seed for the synthetic places

    Returns:
        One DemoMatch per place where the leaf search found a match
    """
    rng = np.random.default_rng(seed)
    root_config = DescriptorMatchConfig.from_yaml(config_path, section="root")
    leaf_config = DescriptorMatchConfig.from_yaml(config_path, section="leaf")

    place_words = [
        rng.choice(N_WORDS, size=WORDS_PER_PLACE, replace=False)
        for _ in range(PLACES_PER_LAP)
    ]

    root_cache: DescriptorCache = {}
    leaf_cache_map: DescriptorCacheMap = {}
    root_leaf_map: RootLeafMap = {}
    valid_roots: set[int] = set()
    matches: list[DemoMatch] = []

    for node_id in range(2 * PLACES_PER_LAP):
        place = node_id % PLACES_PER_LAP
        root_id = 1000 + node_id // PLACES_PER_ROOT
        leaf = Descriptor.from_histogram(
            place_histogram(np.sort(place_words[place]), rng),
            timestamp=node_id * SECONDS_PER_PLACE,
            root_position=place_position(place),
            nodes={node_id},
            root_node=root_id,
            normalized=True,
        )

        # Search before inserting the query
        roots = search_descriptors(
            leaf, root_config, valid_roots | set(root_cache), root_cache, root_leaf_map, node_id
        )
        valid_roots |= roots.valid_matches

        if roots.has_matches:
            leaves = search_leaf_descriptors(
                leaf, leaf_config, roots.matches, leaf_cache_map, node_id
            )
            if leaves.has_matches:
                (match_node,) = leaves.match_nodes[0]
                matches.append(
                    DemoMatch(
                        node_id=node_id,
                        match_node=match_node,
                        match_root=leaves.matches[0],
                        score=leaves.score[0],
                        n_root_candidates=len(roots),
                    )
                )

        # Insert leaf and refresh the root descriptor it belongs to
        leaf_cache_map.setdefault(root_id, {})[node_id] = leaf
        root_leaf_map.setdefault(root_id, set()).add(node_id)
        members = leaf_cache_map[root_id]
        root_histogram = sum(m.to_histogram(N_WORDS) for m in members.values())
        root_cache[root_id] = Descriptor.from_histogram(
            root_histogram / root_histogram.sum(),
            timestamp=max(m.timestamp for m in members.values()),
            root_position=np.mean([m.root_position for m in members.values()], axis=0),
            nodes=set(members),
            root_node=root_id,
            normalized=True,
        )

    return matches


def main() -> None:
    """Run the candidate search demo."""
    print("=" * 80)
    print("LOOP CLOSURE CANDIDATE SEARCH")
    print("=" * 80)
    print()
    print(f"  Vocabulary:       {N_WORDS} words")
    print(f"  Places per lap:   {PLACES_PER_LAP}")
    print(f"  Places per root:  {PLACES_PER_ROOT}")
    print(f"  Config:           {DEFAULT_CONFIG}")
    print()

    matches = run_demo()
    for m in matches:
        print(
            f"  node {m.node_id:3d} -> root {m.match_root} "
            f"leaf {m.match_node:3d} score {m.score:.3f} "
            f"({m.n_root_candidates} root candidates) {'OK' if m.correct else 'WRONG'}"
        )

    print()
    print("Statistics:")
    print(f"  Places processed:   {2 * PLACES_PER_LAP}")
    print(f"  Loop candidates:    {len(matches)}")
    print(f"  Correct places:     {sum(m.correct for m in matches)}")


if __name__ == "__main__":
    main()
