"""Source mesh and snapshot I/O."""

from snapgrid.mesh.snapshot import restore, save_snapshot
from snapgrid.mesh.source import SourceMesh

__all__ = [
    "SourceMesh",
    "restore",
    "save_snapshot",
]
