"""
Structured 3D mesh used by mesh and surface-current filters.

Cell bins run over dimension (nx, ny, nz). Surface-current bins run over the
mesh extended by one layer on the low side of every axis, so cell (i, j, k)
sits at extended index (i+1, j+1, k+1) and its left/back/bottom faces are the
right/front/top faces of extended cells (i, j+1, k+1), (i+1, j, k+1) and
(i+1, j+1, k).
"""
from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass
class RegularMesh:
    """Regular Cartesian mesh identified by integer id."""
    id: int
    dimension: Tuple[int, int, int]

    def __post_init__(self):
        dims = tuple(int(d) for d in self.dimension)
        if len(dims) != 3:
            raise ValueError(f"Mesh {self.id}: dimension must have 3 entries, got {len(dims)}")
        if any(d < 1 for d in dims):
            raise ValueError(f"Mesh {self.id}: dimensions must be positive, got {dims}")
        self.dimension = dims

    @property
    def n_bins(self):
        return int(np.prod(self.dimension))

    @property
    def surface_dimension(self):
        return tuple(d + 1 for d in self.dimension)

    @property
    def n_surface_bins(self):
        return int(np.prod(self.surface_dimension))

    def indices_to_bin(self, ijk, surface=False):
        """Map 0-based (i, j, k) to a linear filter bin.

        Args:
            ijk: cell indices, or extended-mesh indices when surface=True
            surface: index into the extended surface-current mesh

        Returns:
            int bin index in C order
        """
        dims = self.surface_dimension if surface else self.dimension
        i, j, k = ijk
        for idx, n in zip((i, j, k), dims):
            if not 0 <= idx < n:
                raise IndexError(f"Mesh {self.id}: index {tuple(ijk)} outside {dims}")
        return (i * dims[1] + j) * dims[2] + k
