"""Tests for mesh geometry and bilinear interpolation."""

import numpy as np
import pytest

from snapgrid.core.geometry import MeshGeometry
from snapgrid.mesh import SourceMesh


class TestMeshGeometry:
    """Tests for MeshGeometry dataclass."""

    def test_basic_properties(self):
        """Test derived extents and counts."""
        g = MeshGeometry(nx=8, ny=16, delta=0.125, x0=1.0, y0=-1.0)
        assert g.shape == (8, 16)
        assert g.n_cells == 128
        assert g.x1 == pytest.approx(2.0)
        assert g.y1 == pytest.approx(1.0)

    def test_cell_center(self):
        """Test cell centres sit half a cell from the corner."""
        g = MeshGeometry(nx=4, ny=4, delta=0.5)
        assert g.cell_center(0, 0) == pytest.approx((0.25, 0.25))
        assert g.cell_center(3, 1) == pytest.approx((1.75, 0.75))

    def test_contains(self):
        """Test extent check includes edges."""
        g = MeshGeometry(nx=4, ny=4, delta=0.5)
        assert g.contains(0.0, 2.0)
        assert not g.contains(-0.01, 1.0)

    @pytest.mark.parametrize("kwargs", [
        {"nx": 1, "ny": 4, "delta": 1.0},
        {"nx": 4, "ny": 1, "delta": 1.0},
        {"nx": 4, "ny": 4, "delta": 0.0},
    ])
    def test_validation(self, kwargs):
        """Test degenerate meshes are rejected."""
        with pytest.raises(ValueError):
            MeshGeometry(**kwargs)


class TestInterpolation:
    """Tests for point interpolation on the source mesh."""

    @pytest.fixture
    def mesh(self):
        g = MeshGeometry(nx=4, ny=4, delta=1.0, x0=0.0, y0=0.0)
        x = np.arange(4) + 0.5
        X, Y = np.meshgrid(x, x, indexing="ij")
        mesh = SourceMesh(g, {
            "f": np.full((4, 4), 0.5),
            "u_x": 2.0 * X + 3.0 * Y,
            "u_y": np.zeros((4, 4)),
        })
        mesh.allocate()
        yield mesh
        mesh.release()

    def test_exact_at_centres(self, mesh):
        """Test values at cell centres are returned exactly."""
        assert mesh.interpolate("u_x", 1.5, 2.5) == pytest.approx(2 * 1.5 + 3 * 2.5)

    def test_linear_between_centres(self, mesh):
        """Test bilinear interpolation reproduces a linear field."""
        for x, y in [(1.0, 1.0), (1.2, 2.9), (3.4, 0.6)]:
            assert mesh.interpolate("u_x", x, y) == pytest.approx(2 * x + 3 * y)

    def test_constant_field(self, mesh):
        """Test a constant field stays constant everywhere."""
        assert mesh.interpolate("f", 0.1, 3.9) == pytest.approx(0.5)

    def test_clamped_outside(self, mesh):
        """Test points outside the mesh take clamped edge values."""
        # Beyond the last centre in both axes: value of cell (3, 3)
        assert mesh.interpolate("u_x", 10.0, 10.0) == pytest.approx(2 * 3.5 + 3 * 3.5)
        assert mesh.interpolate("u_x", -5.0, -5.0) == pytest.approx(2 * 0.5 + 3 * 0.5)
