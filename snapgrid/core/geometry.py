"""Source-mesh geometry and stencil helpers for snapgrid.

This module centralizes all spatial indexing logic on the source mesh:
- MeshGeometry: Immutable dataclass holding grid dimensions, origin and spacing
- Helper functions: Index clamping, cell-centre coordinates, bilinear lookup

Index Layout:
    Fields are stored as [i, j] with i along x and j along y.
    Cell (i, j) spans [x0 + i*delta, x0 + (i+1)*delta] in x, and likewise in y.
    Values are cell-centred: the sample point of (i, j) is
    (x0 + (i + 0.5)*delta, y0 + (j + 0.5)*delta).

Out-of-range stencil neighbours are clamped to the nearest edge cell, which
acts as a zero-gradient ghost layer.
"""

from dataclasses import dataclass

import taichi as ti


@dataclass(frozen=True)
class MeshGeometry:
    """Immutable source-mesh geometry.

    Attributes:
        nx: Number of cells along x (i dimension)
        ny: Number of cells along y (j dimension)
        delta: Cell size (same along both axes)
        x0: x coordinate of the lower-left corner
        y0: y coordinate of the lower-left corner

    Properties:
        n_cells: Total number of cells (nx * ny)
        x1, y1: Coordinates of the upper-right corner
    """

    nx: int
    ny: int
    delta: float
    x0: float = 0.0
    y0: float = 0.0

    def __post_init__(self):
        """Validate mesh dimensions."""
        if self.nx < 2:
            raise ValueError(f"nx must be >= 2, got {self.nx}")
        if self.ny < 2:
            raise ValueError(f"ny must be >= 2, got {self.ny}")
        if self.delta <= 0:
            raise ValueError(f"delta must be > 0, got {self.delta}")

    @property
    def n_cells(self) -> int:
        """Total number of cells."""
        return self.nx * self.ny

    @property
    def shape(self) -> tuple[int, int]:
        """Grid shape as (nx, ny) tuple."""
        return (self.nx, self.ny)

    @property
    def x1(self) -> float:
        return self.x0 + self.nx * self.delta

    @property
    def y1(self) -> float:
        return self.y0 + self.ny * self.delta

    def cell_center(self, i: int, j: int) -> tuple[float, float]:
        """Physical coordinates of the centre of cell (i, j)."""
        return (
            self.x0 + (i + 0.5) * self.delta,
            self.y0 + (j + 0.5) * self.delta,
        )

    def contains(self, x: float, y: float) -> bool:
        """Check if (x, y) lies inside the mesh extent (edges included)."""
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1


# =============================================================================
# Taichi helper functions for use in kernels
# =============================================================================


@ti.func
def clamp_index(k: int, n: int) -> int:
    """Clamp an index to [0, n - 1].

    Args:
        k: Index, possibly one past either edge
        n: Extent of the axis

    Returns:
        Nearest valid index
    """
    return ti.max(0, ti.min(n - 1, k))


@ti.func
def cell_center(k: int, origin: ti.f64, delta: ti.f64) -> ti.f64:
    """Coordinate of the centre of cell k along one axis."""
    return origin + (k + 0.5) * delta


@ti.func
def bilinear(
    field: ti.template(),
    x: ti.f64,
    y: ti.f64,
    x0: ti.f64,
    y0: ti.f64,
    delta: ti.f64,
) -> ti.f64:
    """Bilinear interpolation of a cell-centred field at (x, y).

    Uses the four cell centres surrounding the point. Within half a cell of
    the mesh edge the missing centres are clamped, so the value degrades to
    linear (or constant) extrapolation of the edge cells.

    Args:
        field: 2D cell-centred Taichi field indexed [i, j]
        x: Sample x coordinate
        y: Sample y coordinate
        x0: Mesh origin x
        y0: Mesh origin y
        delta: Cell size

    Returns:
        Interpolated value
    """
    nx = field.shape[0]
    ny = field.shape[1]

    # Fractional index relative to cell centres
    gx = (x - x0) / delta - 0.5
    gy = (y - y0) / delta - 0.5
    i0 = ti.cast(ti.floor(gx), ti.i32)
    j0 = ti.cast(ti.floor(gy), ti.i32)
    tx = gx - i0
    ty = gy - j0

    ia = clamp_index(i0, nx)
    ib = clamp_index(i0 + 1, nx)
    ja = clamp_index(j0, ny)
    jb = clamp_index(j0 + 1, ny)

    return (
        (1.0 - tx) * (1.0 - ty) * field[ia, ja]
        + tx * (1.0 - ty) * field[ib, ja]
        + (1.0 - tx) * ty * field[ia, jb]
        + tx * ty * field[ib, jb]
    )
