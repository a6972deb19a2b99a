"""Snapshot restore and save.

Snapshots are NumPy .npz archives:
    f, u_x, u_y: float arrays of shape (nx, ny), indexed [i, j] (x, y)
    x0, y0: lower-left corner of the mesh
    delta: cell size
    t: optional simulation time

Restore failures are fatal and raise SnapshotRestoreFailure.
"""

import logging
import zipfile
from pathlib import Path

import numpy as np

from snapgrid.core.geometry import MeshGeometry
from snapgrid.errors import SnapshotRestoreFailure
from snapgrid.mesh.source import SourceMesh

logger = logging.getLogger(__name__)

REQUIRED_ARRAYS = ("f", "u_x", "u_y")
REQUIRED_SCALARS = ("x0", "y0", "delta")


def restore(path: str | Path) -> SourceMesh:
    """
    Restore a snapshot into an unallocated SourceMesh.

    Args:
        path: Path to the .npz snapshot

    Returns:
        SourceMesh with primary arrays staged; derived fields may still be
        declared before calling allocate()

    Raises:
        SnapshotRestoreFailure: If the file is missing, unreadable, or does
            not contain a consistent set of arrays
    """
    path = Path(path)
    if not path.is_file():
        raise SnapshotRestoreFailure(f"Snapshot not found: {path}")

    try:
        data = np.load(path, allow_pickle=False)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise SnapshotRestoreFailure(f"Cannot read snapshot {path}: {e}") from e

    if not isinstance(data, np.lib.npyio.NpzFile):
        raise SnapshotRestoreFailure(f"Snapshot {path} is not an .npz archive")

    with data:
        missing = [k for k in REQUIRED_ARRAYS + REQUIRED_SCALARS if k not in data.files]
        if missing:
            raise SnapshotRestoreFailure(
                f"Snapshot {path} is missing arrays: {', '.join(missing)}"
            )
        arrays = {name: np.array(data[name], dtype=np.float64) for name in REQUIRED_ARRAYS}
        x0 = float(data["x0"])
        y0 = float(data["y0"])
        delta = float(data["delta"])
        time = float(data["t"]) if "t" in data.files else None

    shape = arrays["f"].shape
    if len(shape) != 2:
        raise SnapshotRestoreFailure(
            f"Snapshot {path}: expected 2D fields, got shape {shape}"
        )

    try:
        geometry = MeshGeometry(nx=shape[0], ny=shape[1], delta=delta, x0=x0, y0=y0)
        mesh = SourceMesh(geometry, arrays, time=time)
    except ValueError as e:
        raise SnapshotRestoreFailure(f"Snapshot {path}: {e}") from e

    logger.info("Restored %s: %s", path.name, mesh)
    return mesh


def save_snapshot(
    path: str | Path,
    f: np.ndarray,
    u_x: np.ndarray,
    u_y: np.ndarray,
    delta: float,
    x0: float = 0.0,
    y0: float = 0.0,
    t: float | None = None,
) -> Path:
    """
    Write a snapshot archive readable by restore().

    Args:
        path: Output path (".npz" is appended by NumPy if missing)
        f: Volume fraction, shape (nx, ny)
        u_x: Velocity x component, shape (nx, ny)
        u_y: Velocity y component, shape (nx, ny)
        delta: Cell size
        x0: Lower-left x coordinate
        y0: Lower-left y coordinate
        t: Optional simulation time

    Returns:
        Path of the written file
    """
    path = Path(path)
    if path.suffix != ".npz":
        path = path.with_name(path.name + ".npz")
    path.parent.mkdir(parents=True, exist_ok=True)

    extra = {} if t is None else {"t": np.float64(t)}
    np.savez(
        path,
        f=np.asarray(f, dtype=np.float64),
        u_x=np.asarray(u_x, dtype=np.float64),
        u_y=np.asarray(u_y, dtype=np.float64),
        x0=np.float64(x0),
        y0=np.float64(y0),
        delta=np.float64(delta),
        **extra,
    )
    return path
