"""
Strain-rate second invariant kernel (log-scaled).

Central differences over two cells (2·delta) give the tensor components:
    D11 = d(u_y)/dy
    D33 = d(u_x)/dx
    D13 = (d(u_y)/dx + d(u_x)/dy) / 2
    D22 = u_y / y          (axisymmetric only, 0 within axis_epsilon of the axis)

    D² = D11² + D33² + 2·D13² (+ D22²)

The result is weighted by the blended viscosity ratio
    mu_r = f + (1 - f)·viscosity_ratio
and stored as log10(mu_r·D²), or log_floor where mu_r·D² <= 0.
"""

import taichi as ti

from snapgrid.core.dtypes import DTYPE
from snapgrid.core.geometry import cell_center, clamp_index
from snapgrid.kernels.protocol import GeometryPolicy
from snapgrid.params.schema import StrainRateParams


@ti.kernel
def strain_rate_invariant(
    f: ti.template(),
    u_x: ti.template(),
    u_y: ti.template(),
    target: ti.template(),
    delta: DTYPE,
    y0: DTYPE,
    azimuthal: ti.template(),
    viscosity_ratio: DTYPE,
    axis_epsilon: DTYPE,
    log_floor: DTYPE,
):
    """
    Fill target with log10(mu_r·D²) for every cell.

    Edge cells use clamped neighbours (zero-gradient ghost layer), so their
    central differences span a single cell but keep the 2·delta divisor.
    """
    nx = target.shape[0]
    ny = target.shape[1]
    inv_2delta = 1.0 / (2.0 * delta)

    for i, j in target:
        ip = clamp_index(i + 1, nx)
        im = clamp_index(i - 1, nx)
        jp = clamp_index(j + 1, ny)
        jm = clamp_index(j - 1, ny)

        D11 = (u_y[i, jp] - u_y[i, jm]) * inv_2delta
        D33 = (u_x[ip, j] - u_x[im, j]) * inv_2delta
        D13 = 0.5 * ((u_y[ip, j] - u_y[im, j] + u_x[i, jp] - u_x[i, jm]) * inv_2delta)
        D2 = D11 * D11 + D33 * D33 + 2.0 * D13 * D13

        if ti.static(azimuthal):
            y = cell_center(j, y0, delta)
            D22 = ti.cast(0.0, DTYPE)
            if y > axis_epsilon:
                D22 = u_y[i, j] / y
            D2 += D22 * D22

        mu_r = f[i, j] + (1.0 - f[i, j]) * viscosity_ratio
        value = mu_r * D2
        if value > 0.0:
            target[i, j] = ti.log(value) / ti.log(10.0)
        else:
            target[i, j] = log_floor


class StrainRateKernel:
    """Log-scaled strain-rate invariant under a fixed geometry policy.

    Example:
        kernel = StrainRateKernel(GeometryPolicy.PLANAR)
        kernel.compute(mesh, "d2c")
    """

    def __init__(
        self,
        geometry: GeometryPolicy = GeometryPolicy.AXISYMMETRIC,
        params: StrainRateParams | None = None,
    ):
        self.geometry = geometry
        self.params = params or StrainRateParams()

    @property
    def fields_read(self) -> set[str]:
        return {"f", "u_x", "u_y"}

    def compute(self, mesh, target: str) -> None:
        """Fill the target field on an allocated SourceMesh."""
        p = self.params
        g = mesh.geometry
        strain_rate_invariant(
            mesh.field("f"),
            mesh.field("u_x"),
            mesh.field("u_y"),
            mesh.field(target),
            g.delta,
            g.y0,
            self.geometry.azimuthal,
            p.viscosity_ratio,
            p.axis_epsilon,
            p.log_floor,
        )
