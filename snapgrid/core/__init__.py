"""Core infrastructure: types, mesh geometry, and stencil helpers."""

from snapgrid.core.dtypes import DTYPE
from snapgrid.core.geometry import (
    MeshGeometry,
    bilinear,
    cell_center,
    clamp_index,
)

__all__ = [
    "DTYPE",
    "MeshGeometry",
    "bilinear",
    "cell_center",
    "clamp_index",
]
