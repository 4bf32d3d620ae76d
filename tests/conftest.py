"""Shared fixtures for descriptor matching tests."""

from __future__ import annotations

import numpy as np
import pytest

from dsg_lcd.descriptor import Descriptor


@pytest.fixture
def make_descriptor():
    """Factory for normalized histogram descriptors.

    Returns:
        Callable building a Descriptor for a node with the given values,
        timestamp and position
    """

    def _make(
        node_id: int,
        values,
        timestamp: float = 0.0,
        position=(0.0, 0.0, 0.0),
        root_node: int | None = None,
        nodes=None,
    ) -> Descriptor:
        return Descriptor(
            values=np.asarray(values, dtype=np.float64),
            timestamp=timestamp,
            root_position=np.asarray(position, dtype=np.float64),
            nodes=set(nodes) if nodes is not None else {node_id},
            root_node=node_id if root_node is None else root_node,
            normalized=True,
        )

    return _make
