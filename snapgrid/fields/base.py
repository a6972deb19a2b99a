"""Base field container and specification classes.

This module provides the foundation for declarative field management on the
source mesh:
- FieldSpec: Describes a field's name, dtype, role and description
- FieldRole: Enum categorizing where a field's values come from
- FieldContainer: Manages field lifecycle and host transfers

Usage:
    container = FieldContainer(geometry)
    container.register_many(create_snapshot_specs())
    container.register(create_derived_spec("vel"))
    container.allocate()
    container.load("f", f_array)
    vel = container["vel"]
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

import numpy as np
import taichi as ti

from snapgrid.core.dtypes import DTYPE
from snapgrid.core.geometry import MeshGeometry


class FieldRole(Enum):
    """Categorizes field usage patterns for documentation and validation.

    PRIMARY: Restored from the snapshot (f, u_x, u_y), never written afterwards
    DERIVED: Computed from primary fields by a registered kernel
    """

    PRIMARY = auto()
    DERIVED = auto()


@dataclass(frozen=True)
class FieldSpec:
    """Immutable specification for a cell-centred Taichi field.

    Attributes:
        name: Field identifier (snake_case)
        dtype: Taichi data type
        role: Field usage category
        description: Human-readable description

    The field shape is (nx, ny), taken from the MeshGeometry passed to the
    FieldContainer.
    """

    name: str
    dtype: Any  # Taichi dtype
    role: FieldRole
    description: str = ""

    def __post_init__(self):
        """Validate field specification."""
        if not self.name:
            raise ValueError("Field name cannot be empty")
        if not self.name.islower() or not self.name.replace("_", "").isalnum():
            raise ValueError(
                f"Field name must be snake_case, got: {self.name}"
            )


class FieldContainer:
    """Manages Taichi field lifecycle with declarative specifications.

    A FieldContainer holds a collection of Taichi fields associated with
    a specific mesh geometry. Fields are registered via FieldSpec, then
    allocated together; registration is closed once allocation happens.

    Attributes:
        geometry: Mesh dimensions, origin and cell size
        field_names: Registered field names in registration order
        allocated: Whether fields have been allocated

    Example:
        container = FieldContainer(MeshGeometry(64, 64, delta=1 / 64))
        container.register(FieldSpec("f", DTYPE, FieldRole.PRIMARY))
        container.allocate()
        f = container["f"]
    """

    def __init__(self, geometry: MeshGeometry):
        """Initialize container with mesh geometry.

        Args:
            geometry: Mesh dimensions and cell size
        """
        self._geometry = geometry
        self._specs: dict[str, FieldSpec] = {}
        self._fields: dict[str, Any] = {}
        self._allocated = False
        self._tree = None

    @property
    def geometry(self) -> MeshGeometry:
        """Get the mesh geometry."""
        return self._geometry

    @property
    def allocated(self) -> bool:
        """Check if fields have been allocated."""
        return self._allocated

    @property
    def field_names(self) -> list[str]:
        """Get list of registered field names."""
        return list(self._specs.keys())

    def register(self, spec: FieldSpec) -> None:
        """Register a field specification.

        Args:
            spec: Field specification to register

        Raises:
            ValueError: If name already registered
            RuntimeError: If fields already allocated
        """
        if self._allocated:
            raise RuntimeError("Cannot register fields after allocation")
        if spec.name in self._specs:
            raise ValueError(f"Field '{spec.name}' already registered")
        self._specs[spec.name] = spec

    def register_many(self, specs: list[FieldSpec]) -> None:
        """Register multiple field specifications.

        Args:
            specs: List of field specifications to register
        """
        for spec in specs:
            self.register(spec)

    def allocate(self) -> None:
        """Allocate all registered fields.

        Raises:
            RuntimeError: If already allocated or no fields registered
        """
        if self._allocated:
            raise RuntimeError("Fields already allocated")
        if not self._specs:
            raise RuntimeError("No fields registered")

        builder = ti.FieldsBuilder()
        shape = self._geometry.shape
        for name, spec in self._specs.items():
            self._fields[name] = ti.field(dtype=spec.dtype)
            builder.dense(ti.ij, shape).place(self._fields[name])
        self._tree = builder.finalize()

        self._allocated = True

    def release(self) -> None:
        """Free all fields. The container cannot be used afterwards."""
        if self._tree is not None:
            self._tree.destroy()
            self._tree = None
        self._fields.clear()
        self._allocated = False

    def get(self, name: str) -> Any:
        """Get a field by name.

        Args:
            name: Field name

        Returns:
            The Taichi field

        Raises:
            KeyError: If field not found
            RuntimeError: If fields not allocated
        """
        if not self._allocated:
            raise RuntimeError("Fields not yet allocated")
        if name not in self._fields:
            raise KeyError(f"Field '{name}' not found")
        return self._fields[name]

    def __getitem__(self, name: str) -> Any:
        """Get a field by name using bracket notation."""
        return self.get(name)

    def load(self, name: str, values: np.ndarray) -> None:
        """Copy a host array into a field.

        Args:
            name: Field name
            values: Array of shape (nx, ny)

        Raises:
            ValueError: If the array shape does not match the geometry
        """
        values = np.asarray(values, dtype=np.float64)
        if values.shape != self._geometry.shape:
            raise ValueError(
                f"Field '{name}' expects shape {self._geometry.shape}, "
                f"got {values.shape}"
            )
        self.get(name).from_numpy(values)

    def to_numpy(self, name: str) -> np.ndarray:
        """Copy a field back to the host."""
        return self.get(name).to_numpy()

    def fields_by_role(self, role: FieldRole) -> list[str]:
        """Get field names filtered by role.

        Args:
            role: FieldRole to filter by

        Returns:
            List of field names with the specified role
        """
        return [name for name, spec in self._specs.items() if spec.role == role]

    @property
    def memory_bytes(self) -> int:
        """Estimate total memory usage in bytes.

        Returns:
            Approximate memory usage for all allocated fields
        """
        if not self._allocated:
            return 0

        n_elements = self._geometry.n_cells
        total = 0
        for spec in self._specs.values():
            dtype_size = 8 if spec.dtype in (ti.f64, ti.i64) else 4
            total += n_elements * dtype_size
        return total

    @property
    def memory_mb(self) -> float:
        """Estimate total memory usage in megabytes."""
        return self.memory_bytes / (1024 * 1024)

    def __contains__(self, name: str) -> bool:
        """Check if a field is registered."""
        return name in self._specs

    def __len__(self) -> int:
        """Number of registered fields."""
        return len(self._specs)


# =============================================================================
# Standard field specification factories
# =============================================================================


def create_snapshot_specs(dtype: Any = DTYPE) -> list[FieldSpec]:
    """Create specifications for fields restored from a snapshot.

    - f: Volume fraction of the primary (liquid) phase [-]
    - u_x: Velocity component along x (radial in axisymmetric runs)
    - u_y: Velocity component along y (axial in axisymmetric runs)

    Args:
        dtype: Floating-point type (default: DTYPE from dtypes.py)

    Returns:
        List of FieldSpec for primary fields
    """
    return [
        FieldSpec(
            name="f",
            dtype=dtype,
            role=FieldRole.PRIMARY,
            description="Volume fraction of the primary phase [-]",
        ),
        FieldSpec(
            name="u_x",
            dtype=dtype,
            role=FieldRole.PRIMARY,
            description="Velocity x component",
        ),
        FieldSpec(
            name="u_y",
            dtype=dtype,
            role=FieldRole.PRIMARY,
            description="Velocity y component",
        ),
    ]


def create_derived_spec(
    name: str, description: str = "", dtype: Any = DTYPE
) -> FieldSpec:
    """Create the specification for one derived scalar.

    Args:
        name: Field name, also used as the output column name
        description: Human-readable description
        dtype: Floating-point type

    Returns:
        FieldSpec with role DERIVED
    """
    return FieldSpec(
        name=name,
        dtype=dtype,
        role=FieldRole.DERIVED,
        description=description,
    )
