"""
Kernel protocol definitions for derived-field computation.

Every derived field is produced by a kernel object that fills one scalar
field on the source mesh in place. The protocol lets the registry dispatch
kernels without knowing their formulas.

Each kernel has:
- compute() method: Fill the target field from the mesh's primary fields
- fields_read property: Fields read by this kernel (for dependency tracking)

GeometryPolicy is the run-wide coordinate convention. Only the strain-rate
kernel consults it.
"""

from enum import Enum
from typing import Protocol, runtime_checkable, Any


class GeometryPolicy(Enum):
    """Coordinate convention of the snapshot.

    AXISYMMETRIC: x is radial, y is axial; adds the azimuthal strain term
    PLANAR: x and y are Cartesian; no azimuthal term
    """

    AXISYMMETRIC = "axi"
    PLANAR = "planar"

    @property
    def azimuthal(self) -> bool:
        """Whether the strain tensor carries the D22 = u_y/y term."""
        return self is GeometryPolicy.AXISYMMETRIC

    @property
    def axis_labels(self) -> tuple[str, str]:
        """Physical meaning of the (x, y) axes."""
        if self is GeometryPolicy.AXISYMMETRIC:
            return ("radial", "axial")
        return ("x", "y")


@runtime_checkable
class FieldKernel(Protocol):
    """Protocol for derived-field kernels.

    A kernel reads primary fields of a SourceMesh and writes exactly one
    derived scalar, in place, for every cell.
    """

    def compute(self, mesh: Any, target: str) -> None:  # mesh: SourceMesh
        """Fill the target field for every cell of the mesh.

        Args:
            mesh: Allocated SourceMesh
            target: Name of the derived field to write
        """
        ...

    @property
    def fields_read(self) -> set[str]:
        """Fields read by this kernel."""
        ...
