# src/qeinput/pw/kpoints.py
from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

KPoint = Tuple[float, float, float, float]


def uniform_grid(nk: Sequence[int]) -> List[KPoint]:
    """
    Expand an ``(n0, n1, n2)`` grid into explicit crystal-coordinate k-points.

    Points are ``(i0/n0, i1/n1, i2/n2)`` with ``i0`` varying slowest and
    ``i2`` fastest. Every point carries the weight ``1 / (n0*n1*n2)``.
    """
    nk = tuple(int(n) for n in nk)
    if len(nk) != 3:
        raise ValueError(f"Uniform grid needs 3 sizes; got {len(nk)}.")
    if any(n <= 0 for n in nk):
        raise ValueError(f"Uniform grid sizes must be positive integers; got {nk}.")

    axes = [np.arange(n) / n for n in nk]
    grid = np.stack(np.meshgrid(*axes, indexing="ij"), axis=-1).reshape(-1, 3)
    weight = 1.0 / len(grid)

    return [(float(k0), float(k1), float(k2), weight) for k0, k1, k2 in grid]
