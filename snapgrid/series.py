"""Batch extraction over a directory of time-stamped snapshots.

The solver dumps snapshots as ``snapshot-<t>`` (for example
``intermediate/snapshot-0.1200.npz``). Each snapshot is extracted by an
independent run: its own grid plan, restore, registry and buffer.
"""

import logging
import re
from pathlib import Path

from snapgrid.kernels import GeometryPolicy
from snapgrid.params import ExtractionBounds, RunParams, configure_grid
from snapgrid.pipeline import Extraction, ExtractionResult

logger = logging.getLogger(__name__)

SNAPSHOT_PATTERN = re.compile(r"^snapshot-(?P<t>[-+]?\d+(?:\.\d*)?(?:[eE][-+]?\d+)?)$")


def snapshot_time(path: str | Path) -> float:
    """Parse the simulation time from a snapshot file name.

    Args:
        path: Path like ``snapshot-0.1200.npz``

    Returns:
        The time encoded in the name

    Raises:
        ValueError: If the name does not follow the snapshot pattern
    """
    stem = Path(path).name
    if stem.endswith(".npz"):
        stem = stem[: -len(".npz")]
    match = SNAPSHOT_PATTERN.match(stem)
    if match is None:
        raise ValueError(f"Not a snapshot file name: {Path(path).name}")
    return float(match.group("t"))


def find_snapshots(directory: str | Path) -> list[Path]:
    """List snapshot archives in a directory, sorted by time."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Snapshot directory not found: {directory}")

    found = []
    for path in directory.glob("snapshot-*.npz"):
        try:
            found.append((snapshot_time(path), path))
        except ValueError:
            logger.warning("Skipping %s: unparseable time", path.name)
    return [path for _, path in sorted(found)]


def extract_series(
    directory: str | Path,
    xmin: float,
    ymin: float,
    xmax: float,
    ymax: float,
    ny: int,
    out_dir: str | Path,
    geometry: GeometryPolicy = GeometryPolicy.AXISYMMETRIC,
    params: RunParams | None = None,
) -> list[ExtractionResult]:
    """
    Extract every snapshot in a directory to ``<out_dir>/<stem>.dat``.

    Args:
        directory: Folder holding ``snapshot-*.npz`` files
        xmin, ymin, xmax, ymax: Sampling bounds
        ny: Output resolution along y
        out_dir: Destination folder for row files
        geometry: Coordinate convention
        params: Run parameters

    Returns:
        One ExtractionResult per snapshot, in time order
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    results = []
    for path in find_snapshots(directory):
        bounds = ExtractionBounds(str(path), xmin, ymin, xmax, ymax, ny)
        config = configure_grid(bounds)
        target = out_dir / (path.stem + ".dat")
        result = Extraction(config, geometry, params).run(target)
        logger.info("%s -> %s (%d rows)", path.name, target, result.rows)
        results.append(result)
    return results
