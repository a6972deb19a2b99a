"""Ordered registry of derived fields.

The registry is the single source of truth for which derived fields exist and
in which order. The same internal list is walked to declare mesh fields, to
dispatch kernels and to lay out sample-buffer and output columns, so the three
can never disagree.

One registry is built per run; nothing is shared at module level.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

from snapgrid.errors import MissingInputField
from snapgrid.fields import create_derived_spec
from snapgrid.kernels.protocol import FieldKernel, GeometryPolicy
from snapgrid.kernels.strain_rate import StrainRateKernel
from snapgrid.kernels.velocity import VelocityMagnitudeKernel
from snapgrid.params.schema import StrainRateParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldEntry:
    """A registered derived field.

    Attributes:
        name: Field identifier, also the output column name
        kernel: Kernel that fills the field
        description: Human-readable description
    """

    name: str
    kernel: FieldKernel
    description: str = ""


class FieldRegistry:
    """Append-only ordered list of (name, kernel) pairs.

    Registration is closed once kernels have been dispatched.

    Example:
        registry = FieldRegistry()
        registry.register("vel", VelocityMagnitudeKernel())
        registry.declare(mesh)
        mesh.allocate()
        registry.compute_all(mesh)
        registry.names  # ["vel"]
    """

    def __init__(self):
        self._entries: list[FieldEntry] = []
        self._sealed = False

    @property
    def sealed(self) -> bool:
        """Whether kernels have been dispatched."""
        return self._sealed

    @property
    def names(self) -> list[str]:
        """Registered field names in column order."""
        return [entry.name for entry in self._entries]

    def register(self, name: str, kernel: FieldKernel, description: str = "") -> None:
        """Append a derived field.

        Args:
            name: Field name (snake_case, unique)
            kernel: Object implementing the FieldKernel protocol
            description: Human-readable description

        Raises:
            RuntimeError: If kernels have already been dispatched
            ValueError: If the name is invalid or taken, or the kernel is not a
                FieldKernel
        """
        if self._sealed:
            raise RuntimeError("Cannot register fields after computation")
        create_derived_spec(name)  # raises ValueError on empty or non-snake_case names
        if any(entry.name == name for entry in self._entries):
            raise ValueError(f"Field '{name}' already registered")
        if not isinstance(kernel, FieldKernel):
            raise ValueError(f"Kernel for '{name}' does not implement FieldKernel")
        self._entries.append(FieldEntry(name, kernel, description))

    def declare(self, mesh) -> None:
        """Declare one derived scalar per entry on an unallocated SourceMesh."""
        for entry in self._entries:
            mesh.declare(entry.name, entry.description)

    def compute_all(self, mesh) -> None:
        """Run every kernel over the mesh in registration order.

        Args:
            mesh: Allocated SourceMesh with declared derived fields

        Raises:
            RuntimeError: If the registry is empty
            MissingInputField: If a kernel reads a field the mesh does not hold
        """
        if not self._entries:
            raise RuntimeError("No fields registered")
        self._sealed = True

        for entry in self._entries:
            missing = entry.kernel.fields_read - set(mesh.container.field_names)
            if missing:
                raise MissingInputField(
                    f"Kernel for '{entry.name}' needs fields {sorted(missing)}"
                )
            logger.info("Computing %s", entry.name)
            entry.kernel.compute(mesh, entry.name)

    def __iter__(self) -> Iterator[FieldEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return any(entry.name == name for entry in self._entries)


def create_default_registry(
    geometry: GeometryPolicy = GeometryPolicy.AXISYMMETRIC,
    params: StrainRateParams | None = None,
) -> FieldRegistry:
    """Create the standard registry: strain rate, then velocity magnitude.

    Args:
        geometry: Coordinate convention for the strain-rate kernel
        params: Strain-rate constants

    Returns:
        FieldRegistry with columns ["d2c", "vel"]
    """
    registry = FieldRegistry()
    registry.register(
        "d2c",
        StrainRateKernel(geometry, params),
        "log10 of viscosity-weighted strain-rate invariant",
    )
    registry.register(
        "vel",
        VelocityMagnitudeKernel(),
        "Velocity magnitude",
    )
    return registry
