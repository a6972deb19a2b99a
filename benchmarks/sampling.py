import io
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import taichi as ti

from benchmarks.harness import Benchmark
from snapgrid.kernels import GeometryPolicy
from snapgrid.mesh import save_snapshot
from snapgrid.params import ExtractionBounds, configure_grid
from snapgrid.pipeline import Extraction


@dataclass
class SamplingMetrics:
    mesh_size: int
    ny: int
    n_samples: int
    prepare_s: float
    total_s: float

    @property
    def samples_per_second(self) -> float:
        return self.n_samples / self.total_s


def make_vortex_snapshot(path: Path, n: int) -> Path:
    """Write an n x n snapshot of a Taylor-Green vortex on [0, 1]^2."""
    x = (np.arange(n) + 0.5) / n
    X, Y = np.meshgrid(x, x, indexing="ij")
    u_x = np.sin(np.pi * X) * np.cos(np.pi * Y)
    u_y = -np.cos(np.pi * X) * np.sin(np.pi * Y)
    f = (np.hypot(X - 0.5, Y - 0.5) < 0.25).astype(np.float64)
    return save_snapshot(path, f=f, u_x=u_x, u_y=u_y, delta=1.0 / n)


class SamplingBenchmark(Benchmark):
    """Full restore-compute-sample-write runs across mesh and output sizes."""

    def run(self) -> list[SamplingMetrics]:
        cases = [(256, 128), (1024, 512), (2048, 1024), (4096, 2048)]
        results = []

        self.print_header("SAMPLING BENCHMARK")

        with tempfile.TemporaryDirectory() as tmp:
            for mesh_size, ny in cases:
                path = make_vortex_snapshot(Path(tmp) / f"vortex-{mesh_size}.npz", mesh_size)
                results.append(self._run_single(path, mesh_size, ny))

        self._print_report(results)
        self.teardown()
        return results

    def _run_single(self, path: Path, mesh_size: int, ny: int) -> SamplingMetrics:
        print(f"\nMesh {mesh_size}x{mesh_size}, output ny={ny}...")
        config = configure_grid(ExtractionBounds(str(path), 0.0, 0.0, 1.0, 1.0, ny))

        # Warmup compiles every kernel once
        Extraction(config, GeometryPolicy.AXISYMMETRIC).run(io.StringIO())

        extraction = Extraction(config, GeometryPolicy.AXISYMMETRIC)
        start = time.perf_counter()
        extraction.prepare()
        ti.sync()
        prepare_s = time.perf_counter() - start
        extraction.mesh.release()

        start = time.perf_counter()
        Extraction(config, GeometryPolicy.AXISYMMETRIC).run(io.StringIO())
        total_s = time.perf_counter() - start

        return SamplingMetrics(mesh_size, ny, config.n_samples, prepare_s, total_s)

    def _print_report(self, results: list[SamplingMetrics]):
        print(f"\n{'Mesh':>8} {'ny':>6} {'Samples':>12} {'Prepare (s)':>12} "
              f"{'Total (s)':>10} {'Samples/s':>12}")
        for m in results:
            print(f"{m.mesh_size:>8} {m.ny:>6} {m.n_samples:>12} {m.prepare_s:>12.3f} "
                  f"{m.total_s:>10.3f} {m.samples_per_second:>12.3g}")
        self.print_footer()
