"""Pytest fixtures and test utilities for snapgrid."""


import numpy as np
import pytest

from snapgrid.config import init_taichi
from snapgrid.mesh import save_snapshot


@pytest.fixture(scope="session", autouse=True)
def taichi_init():
    """Initialize Taichi once per test session with CPU backend."""
    init_taichi(backend="cpu", debug=True)
    yield


@pytest.fixture
def snapshot_factory(tmp_path):
    """Factory writing snapshot archives into a temporary directory."""

    def make(name="snap.npz", **kwargs):
        return save_snapshot(tmp_path / name, **kwargs)

    return make


def linear_flow(nx: int = 8, ny: int = 16, delta: float = 0.125):
    """Snapshot arrays for u_x = x, u_y = -y with f = 1 everywhere.

    Cell centres are at (i + 0.5)*delta, so bilinear interpolation of these
    fields is exact in the interior.
    """
    x = (np.arange(nx) + 0.5) * delta
    y = (np.arange(ny) + 0.5) * delta
    X, Y = np.meshgrid(x, y, indexing="ij")
    return {
        "f": np.ones((nx, ny)),
        "u_x": X.copy(),
        "u_y": -Y.copy(),
        "delta": delta,
    }


@pytest.fixture
def linear_snapshot(snapshot_factory):
    """Snapshot on [0, 1] x [0, 2] with a linear velocity field."""
    return snapshot_factory(**linear_flow())


@pytest.fixture
def quiescent_snapshot(snapshot_factory):
    """Snapshot on [0, 1] x [0, 2] with zero velocity."""
    return snapshot_factory(
        f=np.ones((8, 16)),
        u_x=np.zeros((8, 16)),
        u_y=np.zeros((8, 16)),
        delta=0.125,
    )


def strain_rate_reference(
    f, u_x, u_y, delta, y0=0.0, azimuthal=True,
    viscosity_ratio=0.02, axis_epsilon=1e-10, log_floor=-10.0,
):
    """NumPy reference for the log-scaled strain-rate invariant."""
    nx, ny = f.shape
    ip = np.minimum(np.arange(nx) + 1, nx - 1)
    im = np.maximum(np.arange(nx) - 1, 0)
    jp = np.minimum(np.arange(ny) + 1, ny - 1)
    jm = np.maximum(np.arange(ny) - 1, 0)
    h = 2.0 * delta

    D11 = (u_y[:, jp] - u_y[:, jm]) / h
    D33 = (u_x[ip, :] - u_x[im, :]) / h
    D13 = 0.5 * ((u_y[ip, :] - u_y[im, :]) + (u_x[:, jp] - u_x[:, jm])) / h
    D2 = D11**2 + D33**2 + 2.0 * D13**2

    if azimuthal:
        y = y0 + (np.arange(ny) + 0.5) * delta
        y = np.broadcast_to(y, f.shape)
        D22 = np.where(y > axis_epsilon, u_y / np.where(y > axis_epsilon, y, 1.0), 0.0)
        D2 = D2 + D22**2

    value = (f + (1.0 - f) * viscosity_ratio) * D2
    out = np.full(f.shape, log_floor)
    positive = value > 0
    out[positive] = np.log10(value[positive])
    return out


def parse_rows(text: str) -> np.ndarray:
    """Parse written rows into a 2D float array."""
    lines = [line for line in text.splitlines() if line.strip()]
    return np.array([[float(v) for v in line.split()] for line in lines])


@pytest.fixture
def linear_fields():
    """Generate linear-flow snapshot arrays."""
    return linear_flow


@pytest.fixture
def strain_reference():
    """NumPy strain-rate reference."""
    return strain_rate_reference


@pytest.fixture
def row_parser():
    """Parse written rows into an array."""
    return parse_rows
