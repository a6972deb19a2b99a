"""
Taichi configuration and run-wide policy selection.

Environment variables:
    SNAPGRID_BACKEND: 'cuda', 'cpu', or 'auto' (default)
    SNAPGRID_DEBUG: '1' to enable debug mode
    SNAPGRID_AXI: '1' for axisymmetric geometry (default), '0' for planar

Double precision is required, so Vulkan is not offered as a backend.
"""

import os
import subprocess

import taichi as ti

from snapgrid.core.dtypes import DTYPE
from snapgrid.kernels.protocol import GeometryPolicy


def get_backend() -> str:
    """Determine Taichi backend: check env var, then auto-detect."""
    env = os.environ.get("SNAPGRID_BACKEND", "auto").lower()

    if env in ("cuda", "cpu"):
        return env
    if env != "auto":
        raise ValueError(f"Invalid SNAPGRID_BACKEND: {env}")

    # Auto-detect CUDA
    try:
        result = subprocess.run(
            ["nvidia-smi", "-L"], capture_output=True, text=True, timeout=5
        )
        if result.returncode == 0 and "GPU" in result.stdout:
            return "cuda"
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass

    return "cpu"


def get_geometry(value: str | None = None) -> GeometryPolicy:
    """Resolve the geometry policy from an explicit value or SNAPGRID_AXI.

    Accepts '1'/'axi'/'axisymmetric' and '0'/'planar'/'2d'.
    """
    if value is None:
        value = os.environ.get("SNAPGRID_AXI", "1")
    key = value.strip().lower()

    if key in ("1", "axi", "axisymmetric"):
        return GeometryPolicy.AXISYMMETRIC
    if key in ("0", "planar", "2d"):
        return GeometryPolicy.PLANAR
    raise ValueError(f"Invalid geometry selection: {value}")


def init_taichi(
    backend: str | None = None,
    debug: bool | None = None,
    kernel_profiler: bool = False,
) -> str:
    """Initialize Taichi with specified or auto-detected backend."""
    if backend is None:
        backend = get_backend()
    if debug is None:
        debug = os.environ.get("SNAPGRID_DEBUG", "0") == "1"

    arch = {"cuda": ti.cuda, "cpu": ti.cpu}.get(backend)
    if arch is None:
        raise ValueError(f"Unknown backend: {backend}")

    ti.init(
        arch=arch,
        default_fp=DTYPE,
        debug=debug,
        offline_cache=True,
        kernel_profiler=kernel_profiler,
    )
    return backend
