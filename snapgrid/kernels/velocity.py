"""Velocity magnitude kernel: |u| = sqrt(u_x² + u_y²).

Geometry independent: in axisymmetric runs u_x is radial and u_y axial,
but the arithmetic is the same.
"""

import taichi as ti


@ti.kernel
def velocity_magnitude(u_x: ti.template(), u_y: ti.template(), target: ti.template()):
    """Fill target with the velocity magnitude of every cell."""
    for i, j in target:
        target[i, j] = ti.sqrt(u_x[i, j] * u_x[i, j] + u_y[i, j] * u_y[i, j])


class VelocityMagnitudeKernel:
    """Velocity magnitude on the source mesh."""

    @property
    def fields_read(self) -> set[str]:
        return {"u_x", "u_y"}

    def compute(self, mesh, target: str) -> None:
        velocity_magnitude(mesh.field("u_x"), mesh.field("u_y"), mesh.field(target))
