"""RGB distance and cost-matrix computation."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from scipy.spatial.distance import cdist

Color = Sequence[int]


def distance_squared(c1: Color, c2: Color) -> int:
    """Sum of squared per-channel differences (no square root)."""
    dr = int(c1[0]) - int(c2[0])
    dg = int(c1[1]) - int(c2[1])
    db = int(c1[2]) - int(c2[2])
    return dr * dr + dg * dg + db * db


def compute_cost_matrix(
    targets: np.ndarray,
    colors: np.ndarray,
    chunk_size: int = 512,
) -> np.ndarray:
    """Pairwise squared RGB distance between target and tile colours.

    Args:
        targets: (N, 3) uint8 RGB, one row per cell.
        colors:  (M, 3) uint8 RGB, one row per tile.
        chunk_size: Rows computed per batch (controls peak RAM).

    Returns:
        (N, M) float64 cost matrix. Values are exact integers.
    """
    t = np.asarray(targets, dtype=np.float64).reshape(-1, 3)
    c = np.asarray(colors, dtype=np.float64).reshape(-1, 3)

    n = len(t)
    cost = np.empty((n, len(c)), dtype=np.float64)
    for i in range(0, n, chunk_size):
        j = min(i + chunk_size, n)
        cost[i:j] = cdist(t[i:j], c, "sqeuclidean")
    return cost
