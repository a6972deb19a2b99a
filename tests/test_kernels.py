"""Tests for derived-field kernels and the field registry."""

import numpy as np
import pytest

from snapgrid.core.geometry import MeshGeometry
from snapgrid.errors import ExtractionError, MissingInputField
from snapgrid.kernels import (
    FieldKernel,
    FieldRegistry,
    GeometryPolicy,
    StrainRateKernel,
    VelocityMagnitudeKernel,
    create_default_registry,
)
from snapgrid.mesh import SourceMesh
from snapgrid.params import StrainRateParams


def make_mesh(arrays, delta=0.1, y0=0.0, derived=("out",)):
    nx, ny = arrays["f"].shape
    mesh = SourceMesh(MeshGeometry(nx=nx, ny=ny, delta=delta, y0=y0), arrays)
    for name in derived:
        mesh.declare(name)
    mesh.allocate()
    return mesh


@pytest.fixture
def random_arrays():
    rng = np.random.default_rng(42)
    shape = (6, 9)
    return {
        "f": rng.uniform(0.0, 1.0, shape),
        "u_x": rng.normal(size=shape),
        "u_y": rng.normal(size=shape),
    }


class TestGeometryPolicy:
    """Tests for the geometry policy enum."""

    def test_azimuthal(self):
        """Test only axisymmetric geometry carries the hoop term."""
        assert GeometryPolicy.AXISYMMETRIC.azimuthal is True
        assert GeometryPolicy.PLANAR.azimuthal is False

    def test_axis_labels(self):
        """Test axis labels follow the coordinate convention."""
        assert GeometryPolicy.AXISYMMETRIC.axis_labels == ("radial", "axial")
        assert GeometryPolicy.PLANAR.axis_labels == ("x", "y")


class TestStrainRateKernel:
    """Tests for the log-scaled strain-rate invariant."""

    @pytest.mark.parametrize("geometry", list(GeometryPolicy))
    def test_matches_reference(self, random_arrays, strain_reference, geometry):
        """Test the kernel matches the NumPy reference in both geometries."""
        mesh = make_mesh(random_arrays, delta=0.1, y0=0.0)
        StrainRateKernel(geometry).compute(mesh, "out")
        expected = strain_reference(
            random_arrays["f"], random_arrays["u_x"], random_arrays["u_y"],
            delta=0.1, y0=0.0, azimuthal=geometry.azimuthal,
        )
        np.testing.assert_allclose(mesh.to_numpy("out"), expected, rtol=1e-12, atol=1e-12)
        mesh.release()

    def test_geometry_changes_result(self, random_arrays):
        """Test the hoop term makes axisymmetric values larger."""
        axi = make_mesh(random_arrays)
        StrainRateKernel(GeometryPolicy.AXISYMMETRIC).compute(axi, "out")
        planar = make_mesh(random_arrays)
        StrainRateKernel(GeometryPolicy.PLANAR).compute(planar, "out")
        assert np.all(axi.to_numpy("out") >= planar.to_numpy("out"))
        assert np.any(axi.to_numpy("out") > planar.to_numpy("out"))
        axi.release()
        planar.release()

    def test_linear_interior(self, linear_fields):
        """Test u = (x, -y) gives log10(2) planar and log10(3) axisymmetric."""
        data = linear_fields()
        arrays = {k: data[k] for k in ("f", "u_x", "u_y")}
        for geometry, expected in [
            (GeometryPolicy.PLANAR, np.log10(2.0)),
            (GeometryPolicy.AXISYMMETRIC, np.log10(3.0)),
        ]:
            mesh = make_mesh(arrays, delta=data["delta"])
            StrainRateKernel(geometry).compute(mesh, "out")
            interior = mesh.to_numpy("out")[1:-1, 1:-1]
            np.testing.assert_allclose(interior, expected, rtol=1e-12)
            mesh.release()

    def test_quiescent_floor(self):
        """Test zero velocity maps to the log floor."""
        arrays = {"f": np.ones((4, 4)), "u_x": np.zeros((4, 4)), "u_y": np.zeros((4, 4))}
        mesh = make_mesh(arrays)
        StrainRateKernel().compute(mesh, "out")
        np.testing.assert_array_equal(mesh.to_numpy("out"), -10.0)
        mesh.release()

    def test_custom_floor(self):
        """Test the floor value is configurable."""
        arrays = {"f": np.ones((4, 4)), "u_x": np.zeros((4, 4)), "u_y": np.zeros((4, 4))}
        mesh = make_mesh(arrays)
        StrainRateKernel(params=StrainRateParams(log_floor=-30.0)).compute(mesh, "out")
        np.testing.assert_array_equal(mesh.to_numpy("out"), -30.0)
        mesh.release()

    def test_viscosity_weighting(self):
        """Test the second phase is weighted by the viscosity ratio."""
        shape = (5, 5)
        x = (np.arange(5) + 0.5) * 0.1
        ux = np.broadcast_to(x[:, None], shape).copy()
        arrays_liquid = {"f": np.ones(shape), "u_x": ux, "u_y": np.zeros(shape)}
        arrays_gas = {"f": np.zeros(shape), "u_x": ux, "u_y": np.zeros(shape)}

        liquid = make_mesh(arrays_liquid)
        gas = make_mesh(arrays_gas)
        kernel = StrainRateKernel(GeometryPolicy.PLANAR)
        kernel.compute(liquid, "out")
        kernel.compute(gas, "out")
        diff = liquid.to_numpy("out") - gas.to_numpy("out")
        np.testing.assert_allclose(diff, -np.log10(0.02), rtol=1e-12)
        liquid.release()
        gas.release()

    def test_axis_guard(self, random_arrays, strain_reference):
        """Test cells on the axis skip the hoop term."""
        # y0 = -delta/2 puts the first row of centres exactly on y = 0
        mesh = make_mesh(random_arrays, delta=0.1, y0=-0.05)
        StrainRateKernel(GeometryPolicy.AXISYMMETRIC).compute(mesh, "out")
        result = mesh.to_numpy("out")
        assert np.all(np.isfinite(result))
        expected = strain_reference(
            random_arrays["f"], random_arrays["u_x"], random_arrays["u_y"],
            delta=0.1, y0=-0.05, azimuthal=True,
        )
        np.testing.assert_allclose(result, expected, rtol=1e-12, atol=1e-12)
        mesh.release()


class TestVelocityMagnitudeKernel:
    """Tests for the velocity magnitude kernel."""

    def test_magnitude(self, random_arrays):
        """Test |u| matches NumPy."""
        mesh = make_mesh(random_arrays)
        VelocityMagnitudeKernel().compute(mesh, "out")
        expected = np.hypot(random_arrays["u_x"], random_arrays["u_y"])
        np.testing.assert_allclose(mesh.to_numpy("out"), expected, rtol=1e-12)
        mesh.release()

    def test_fields_read(self):
        """Test the kernel only depends on velocity."""
        assert VelocityMagnitudeKernel().fields_read == {"u_x", "u_y"}
        assert StrainRateKernel().fields_read == {"f", "u_x", "u_y"}


class _ConstantKernel:
    """Test kernel writing a constant."""

    def __init__(self, value):
        self.value = value

    @property
    def fields_read(self):
        return set()

    def compute(self, mesh, target):
        mesh.field(target).fill(self.value)


class TestFieldRegistry:
    """Tests for FieldRegistry."""

    def test_default_order(self):
        """Test the default registry lists d2c before vel."""
        registry = create_default_registry(GeometryPolicy.PLANAR)
        assert registry.names == ["d2c", "vel"]
        assert len(registry) == 2
        assert "vel" in registry
        assert isinstance(next(iter(registry)).kernel, StrainRateKernel)

    def test_protocol(self):
        """Test kernels satisfy the FieldKernel protocol."""
        assert isinstance(StrainRateKernel(), FieldKernel)
        assert isinstance(_ConstantKernel(1.0), FieldKernel)
        assert not isinstance(object(), FieldKernel)

    def test_duplicate_name(self):
        """Test names are unique."""
        registry = FieldRegistry()
        registry.register("a", _ConstantKernel(1.0))
        with pytest.raises(ValueError, match="already registered"):
            registry.register("a", _ConstantKernel(2.0))

    @pytest.mark.parametrize("name", ["", "Vel", "d2-c"])
    def test_invalid_name(self, name):
        """Test names must be non-empty snake_case."""
        with pytest.raises(ValueError):
            FieldRegistry().register(name, _ConstantKernel(1.0))

    def test_rejects_non_kernel(self):
        """Test objects without the kernel interface are rejected."""
        with pytest.raises(ValueError, match="FieldKernel"):
            FieldRegistry().register("a", object())

    def test_compute_in_order(self, random_arrays):
        """Test every registered field is declared and computed."""
        registry = FieldRegistry()
        registry.register("one", _ConstantKernel(1.0))
        registry.register("two", _ConstantKernel(2.0))

        nx, ny = random_arrays["f"].shape
        mesh = SourceMesh(MeshGeometry(nx=nx, ny=ny, delta=0.1), random_arrays)
        registry.declare(mesh)
        mesh.allocate()
        registry.compute_all(mesh)

        np.testing.assert_array_equal(mesh.to_numpy("one"), 1.0)
        np.testing.assert_array_equal(mesh.to_numpy("two"), 2.0)
        mesh.release()

    def test_sealed_after_compute(self, random_arrays):
        """Test registration closes once kernels have run."""
        registry = FieldRegistry()
        registry.register("one", _ConstantKernel(1.0))
        nx, ny = random_arrays["f"].shape
        mesh = SourceMesh(MeshGeometry(nx=nx, ny=ny, delta=0.1), random_arrays)
        registry.declare(mesh)
        mesh.allocate()
        assert not registry.sealed
        registry.compute_all(mesh)
        assert registry.sealed
        with pytest.raises(RuntimeError, match="after computation"):
            registry.register("two", _ConstantKernel(2.0))
        mesh.release()

    def test_empty_registry(self, random_arrays):
        """Test computing with no fields fails."""
        mesh = make_mesh(random_arrays)
        with pytest.raises(RuntimeError, match="No fields"):
            FieldRegistry().compute_all(mesh)
        mesh.release()

    def test_missing_input_field(self, random_arrays):
        """Test a kernel reading an absent field raises MissingInputField."""

        class NeedsPressure(_ConstantKernel):
            @property
            def fields_read(self):
                return {"p"}

        registry = FieldRegistry()
        registry.register("out", NeedsPressure(0.0))
        mesh = make_mesh(random_arrays)
        with pytest.raises(MissingInputField, match=r"needs fields \['p'\]") as excinfo:
            registry.compute_all(mesh)
        assert isinstance(excinfo.value, ExtractionError)
        assert isinstance(excinfo.value, KeyError)
        mesh.release()
