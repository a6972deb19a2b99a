"""
Base benchmark harness for snapgrid.
"""
import abc
from typing import Any

import taichi as ti

from snapgrid.config import init_taichi


class Benchmark(abc.ABC):
    """Abstract base class for all benchmarks."""

    def __init__(self, profile: bool = False, backend: str | None = None):
        self.profile = profile
        self.backend = backend
        self.init_taichi()

    def init_taichi(self):
        """Initialize Taichi backend (auto-detected unless given)."""
        print(f"Initializing Taichi (Profile: {self.profile})...")
        backend = init_taichi(backend=self.backend, debug=False, kernel_profiler=self.profile)
        print(f"Backend: {backend}")

    @abc.abstractmethod
    def run(self) -> Any:
        """Run the benchmark logic. Returns results."""

    def teardown(self):
        """Print and clear profiler output."""
        if self.profile:
            print("\nProfiler Output:")
            ti.profiler.print_kernel_profiler_info()
            ti.profiler.clear_kernel_profiler_info()

    def print_header(self, title: str):
        print("\n" + "=" * 80)
        print(f"{title:^80}")
        print("=" * 80)

    def print_footer(self):
        print("=" * 80)
