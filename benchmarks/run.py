import argparse
import traceback

from benchmarks.sampling import SamplingBenchmark

# Registry of available benchmarks
BENCHMARKS = {
    "sampling": SamplingBenchmark,
}


def main():
    parser = argparse.ArgumentParser(description="snapgrid benchmark harness")
    parser.add_argument(
        "benchmark",
        nargs="?",
        choices=list(BENCHMARKS.keys()) + ["all"],
        default="all",
        help="Benchmark to run (default: all)",
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable Taichi kernel profiler",
    )
    parser.add_argument(
        "--backend",
        choices=["cpu", "cuda"],
        help="Taichi backend (default: SNAPGRID_BACKEND or auto-detect)",
    )

    args = parser.parse_args()

    if args.benchmark == "all":
        to_run = list(BENCHMARKS.values())
    else:
        to_run = [BENCHMARKS[args.benchmark]]

    for bench_cls in to_run:
        print(f"\nRunning {bench_cls.__name__}...")
        try:
            bench_cls(profile=args.profile, backend=args.backend).run()
        except Exception as e:
            print(f"Error running benchmark: {e}")
            traceback.print_exc()


if __name__ == "__main__":
    main()
