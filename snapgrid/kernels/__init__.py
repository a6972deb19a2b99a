"""
Taichi kernels for derived fields and the registry that orders them.

Usage:
    from snapgrid.kernels import GeometryPolicy, create_default_registry

    registry = create_default_registry(GeometryPolicy.PLANAR)
    registry.declare(mesh)
    mesh.allocate()
    registry.compute_all(mesh)

Adding a field: write a class with fields_read and compute(mesh, target),
then registry.register("name", MyKernel()).

Submodules:
- protocol: Kernel interface and geometry policy
- strain_rate: Log-scaled strain-rate invariant
- velocity: Velocity magnitude
- registry: Ordered field registry
"""

from snapgrid.kernels.protocol import FieldKernel, GeometryPolicy
from snapgrid.kernels.registry import (
    FieldEntry,
    FieldRegistry,
    create_default_registry,
)
from snapgrid.kernels.strain_rate import StrainRateKernel, strain_rate_invariant
from snapgrid.kernels.velocity import VelocityMagnitudeKernel, velocity_magnitude

__all__ = [
    # Registry
    "FieldEntry",
    "FieldRegistry",
    "create_default_registry",
    # Protocol types
    "FieldKernel",
    "GeometryPolicy",
    # Implementations
    "StrainRateKernel",
    "VelocityMagnitudeKernel",
    "strain_rate_invariant",
    "velocity_magnitude",
]
