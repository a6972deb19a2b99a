"""Source mesh: restored snapshot state held in Taichi fields.

A SourceMesh is built in two phases. Restoring a snapshot stages the primary
host arrays (f, u_x, u_y); derived scalars are then declared, and allocate()
creates every field at once and uploads the staged arrays. After allocation
the mesh answers point queries through interpolate().
"""

import numpy as np
import taichi as ti

from snapgrid.core.dtypes import DTYPE
from snapgrid.core.geometry import MeshGeometry, bilinear
from snapgrid.fields import (
    FieldContainer,
    FieldRole,
    create_derived_spec,
    create_snapshot_specs,
)


@ti.kernel
def _interpolate_point(
    field: ti.template(),
    x: DTYPE,
    y: DTYPE,
    x0: DTYPE,
    y0: DTYPE,
    delta: DTYPE,
) -> DTYPE:
    return bilinear(field, x, y, x0, y0, delta)


class SourceMesh:
    """Uniform cell-centred mesh holding snapshot and derived fields.

    Attributes:
        geometry: Mesh dimensions, origin and cell size
        time: Simulation time stored in the snapshot, if any
        container: FieldContainer with primary and derived fields

    Example:
        mesh = SourceMesh(geometry, {"f": f, "u_x": ux, "u_y": uy})
        mesh.declare("vel")
        mesh.allocate()
        value = mesh.interpolate("vel", 0.3, 0.7)
    """

    def __init__(
        self,
        geometry: MeshGeometry,
        arrays: dict[str, np.ndarray],
        time: float | None = None,
    ):
        """Stage primary arrays for upload.

        Args:
            geometry: Mesh geometry
            arrays: Host arrays keyed by primary field name, shape (nx, ny)
            time: Optional simulation time of the snapshot

        Raises:
            ValueError: If a primary array is missing or mis-shaped
        """
        self.geometry = geometry
        self.time = time
        self.container = FieldContainer(geometry)
        self.container.register_many(create_snapshot_specs())

        self._staged: dict[str, np.ndarray] = {}
        for name in self.container.fields_by_role(FieldRole.PRIMARY):
            if name not in arrays:
                raise ValueError(f"Missing primary field '{name}'")
            values = np.asarray(arrays[name], dtype=np.float64)
            if values.shape != geometry.shape:
                raise ValueError(
                    f"Field '{name}' has shape {values.shape}, "
                    f"mesh is {geometry.shape}"
                )
            self._staged[name] = values

    @property
    def allocated(self) -> bool:
        return self.container.allocated

    def declare(self, name: str, description: str = "") -> None:
        """Declare a derived scalar field sized to this mesh.

        Must be called before allocate().
        """
        self.container.register(create_derived_spec(name, description))

    def allocate(self) -> None:
        """Allocate all fields and upload the staged primary arrays."""
        self.container.allocate()
        for name, values in self._staged.items():
            self.container.load(name, values)
        self._staged.clear()

    def release(self) -> None:
        """Free all Taichi fields of this mesh."""
        self.container.release()

    def field(self, name: str):
        """Get the Taichi field for a name."""
        return self.container[name]

    def to_numpy(self, name: str) -> np.ndarray:
        """Copy a field back to the host."""
        return self.container.to_numpy(name)

    def interpolate(self, name: str, x: float, y: float) -> float:
        """Evaluate a field at an arbitrary point by bilinear interpolation.

        Args:
            name: Field name
            x: Sample x coordinate
            y: Sample y coordinate

        Returns:
            Interpolated value
        """
        g = self.geometry
        return float(
            _interpolate_point(self.container[name], x, y, g.x0, g.y0, g.delta)
        )

    def __repr__(self) -> str:
        g = self.geometry
        return (
            f"SourceMesh({g.nx}x{g.ny}, delta={g.delta:.4g}, "
            f"origin=({g.x0:.4g}, {g.y0:.4g}), fields={self.container.field_names})"
        )
