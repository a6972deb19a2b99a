"""Extraction pipeline: restore, compute, sample, write.

Stages run strictly in order:
    restore snapshot -> declare derived fields -> allocate mesh ->
    compute kernels -> allocate buffer -> sample -> write -> cleanup

Rows are only written once every sample has been taken, so a failing run
produces no rows at all.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from snapgrid.kernels import FieldRegistry, GeometryPolicy, create_default_registry
from snapgrid.mesh import SourceMesh, restore
from snapgrid.output import cleanup_output, write_fields
from snapgrid.params import ExtractionConfig, RunParams
from snapgrid.sampling import allocate_field_buffer, sample_fields

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Summary of a completed run."""

    config: ExtractionConfig
    field_names: list[str] = field(default_factory=list)
    rows: int = 0
    time: float | None = None  # snapshot time, if stored


class Extraction:
    """One extraction run over one snapshot.

    Example:
        config = configure_grid(ExtractionBounds("snap.npz", 0, 0, 1, 2, 64))
        result = Extraction(config, GeometryPolicy.PLANAR).run(sys.stderr)
    """

    def __init__(
        self,
        config: ExtractionConfig,
        geometry: GeometryPolicy = GeometryPolicy.AXISYMMETRIC,
        params: RunParams | None = None,
        registry: FieldRegistry | None = None,
    ):
        self.config = config
        self.geometry = geometry
        self.params = params or RunParams()
        self._registry = registry
        self.registry: FieldRegistry | None = None
        self.mesh: SourceMesh | None = None

    def _build_registry(self) -> FieldRegistry:
        if self._registry is not None:
            return self._registry
        return create_default_registry(self.geometry, self.params.strain_rate)

    def prepare(self) -> SourceMesh:
        """Restore the snapshot and compute every registered field on it.

        Returns:
            Allocated SourceMesh with derived fields filled
        """
        mesh = restore(self.config.filename)
        registry = self._build_registry()

        registry.declare(mesh)
        mesh.allocate()
        logger.info(
            "Allocated %d mesh fields (%.3f MB)",
            len(mesh.container),
            mesh.container.memory_mb,
        )
        logger.info(
            "Computing %s (%s geometry)",
            ", ".join(registry.names),
            self.geometry.value,
        )
        try:
            registry.compute_all(mesh)
        except Exception:
            mesh.release()
            raise

        self.mesh = mesh
        self.registry = registry
        return mesh

    def run(self, output: TextIO | str | Path, close_stream: bool = False) -> ExtractionResult:
        """Run the full pipeline, writing rows to output.

        Args:
            output: Text stream, or a path opened only once sampling is done
            close_stream: Close a stream passed in after writing

        Returns:
            ExtractionResult with the row count and column names
        """
        cfg = self.config
        logger.info(
            "Output grid %dx%d, dx=%g, dy=%g", cfg.nx, cfg.ny, cfg.dx, cfg.dy
        )

        mesh = self.prepare()
        registry = self.registry

        try:
            buffer = allocate_field_buffer(cfg, len(registry))
            try:
                sample_fields(cfg, mesh, registry, buffer)

                if isinstance(output, (str, Path)):
                    stream, close = open(output, "w"), True
                else:
                    stream, close = output, close_stream
                try:
                    rows = write_fields(cfg, buffer, stream, self.params.output.float_format)
                finally:
                    cleanup_output(stream, buffer, close=close)
            finally:
                buffer.release()
        finally:
            mesh.release()
            self.mesh = None

        logger.info("Wrote %d rows", rows)
        return ExtractionResult(
            config=cfg,
            field_names=registry.names,
            rows=rows,
            time=mesh.time,
        )


def run_extraction(
    config: ExtractionConfig,
    output: TextIO | str | Path,
    geometry: GeometryPolicy = GeometryPolicy.AXISYMMETRIC,
    params: RunParams | None = None,
    close_stream: bool = False,
) -> ExtractionResult:
    """Convenience wrapper: build an Extraction and run it."""
    return Extraction(config, geometry, params).run(output, close_stream=close_stream)
