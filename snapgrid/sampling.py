"""Sample buffer and point sampling onto the output grid.

The buffer holds, for every output row i, (ny + 1) slots of F doubles, where
F is the number of registered fields. Slot j, field k of row i lives at
[i, F*j + k]. Sampling only touches slots j < ny; the last slot row is
allocated and left untouched.

The buffer lives in its own SNode tree so release() frees it immediately.
"""

import logging

import numpy as np
import taichi as ti

from snapgrid.core.dtypes import DTYPE
from snapgrid.core.geometry import bilinear
from snapgrid.errors import AllocationFailure
from snapgrid.params.schema import ExtractionConfig

logger = logging.getLogger(__name__)


class SampleBuffer:
    """Dense (nx, (ny + 1)*F) Taichi buffer for sampled values.

    Attributes:
        nx: Output rows (x direction)
        ny: Sampled slots per row (y direction)
        field_count: Values per slot (F)
        data: The Taichi field, or None once released
    """

    def __init__(self, nx: int, ny: int, field_count: int):
        self.nx = nx
        self.ny = ny
        self.field_count = field_count

        builder = ti.FieldsBuilder()
        self.data = ti.field(DTYPE)
        builder.dense(ti.ij, (nx, self.row_length)).place(self.data)
        self._tree = builder.finalize()

    @property
    def row_length(self) -> int:
        """Doubles per row: (ny + 1) slots of field_count values."""
        return (self.ny + 1) * self.field_count

    @property
    def released(self) -> bool:
        return self._tree is None

    @property
    def nbytes(self) -> int:
        return self.nx * self.row_length * 8

    def index(self, j: int, k: int) -> int:
        """Column of slot j, field k within a row."""
        return self.field_count * j + k

    def to_numpy(self) -> np.ndarray:
        """Copy the buffer to the host as an (nx, row_length) array."""
        if self.released:
            raise RuntimeError("Sample buffer already released")
        return self.data.to_numpy()

    def release(self) -> None:
        """Destroy the underlying SNode tree. Safe to call twice."""
        if self._tree is not None:
            self._tree.destroy()
            self._tree = None
            self.data = None


def allocate_field_buffer(config: ExtractionConfig, field_count: int) -> SampleBuffer:
    """Allocate a buffer of nx rows x (ny + 1) slots x field_count doubles.

    Args:
        config: Output grid
        field_count: Number of registered fields

    Returns:
        Zero-initialized SampleBuffer

    Raises:
        ValueError: If field_count is not positive
        AllocationFailure: If the backend cannot allocate the buffer
    """
    if field_count <= 0:
        raise ValueError(f"field_count must be positive, got {field_count}")

    try:
        buffer = SampleBuffer(config.nx, config.ny, field_count)
    except (MemoryError, RuntimeError) as e:
        raise AllocationFailure(
            f"Cannot allocate {config.nx}x{(config.ny + 1) * field_count} sample buffer: {e}"
        ) from e

    logger.info(
        "Allocated sample buffer %dx%d (%.1f MB)",
        buffer.nx,
        buffer.row_length,
        buffer.nbytes / (1024 * 1024),
    )
    return buffer


@ti.kernel
def sample_field(
    source: ti.template(),
    buffer: ti.template(),
    k: ti.i32,
    field_count: ti.i32,
    nx: ti.i32,
    ny: ti.i32,
    xmin: DTYPE,
    ymin: DTYPE,
    dx: DTYPE,
    dy: DTYPE,
    x0: DTYPE,
    y0: DTYPE,
    delta: DTYPE,
):
    """
    Interpolate one source field at every output cell centre.

    x = dx·(i + 0.5) + xmin, y = dy·(j + 0.5) + ymin; the value goes to
    buffer[i, field_count·j + k].
    """
    for i, j in ti.ndrange(nx, ny):
        x = dx * (i + 0.5) + xmin
        y = dy * (j + 0.5) + ymin
        buffer[i, field_count * j + k] = bilinear(source, x, y, x0, y0, delta)


def sample_fields(config: ExtractionConfig, mesh, registry, buffer: SampleBuffer) -> None:
    """Sample every registered field, in registration order, into the buffer.

    Args:
        config: Output grid
        mesh: Allocated SourceMesh with computed derived fields
        registry: FieldRegistry defining field order
        buffer: SampleBuffer sized for config and len(registry)

    Raises:
        ValueError: If the buffer does not match the grid or registry
    """
    if buffer.released:
        raise RuntimeError("Sample buffer already released")
    if (buffer.nx, buffer.ny) != config.shape or buffer.field_count != len(registry):
        raise ValueError(
            f"Buffer ({buffer.nx}, {buffer.ny}, {buffer.field_count}) does not match "
            f"grid {config.shape} with {len(registry)} fields"
        )

    g = mesh.geometry
    for k, entry in enumerate(registry):
        sample_field(
            mesh.field(entry.name),
            buffer.data,
            k,
            buffer.field_count,
            config.nx,
            config.ny,
            config.xmin,
            config.ymin,
            config.dx,
            config.dy,
            g.x0,
            g.y0,
            g.delta,
        )
