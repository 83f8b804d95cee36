#!/usr/bin/env python3
"""
ObSet Performance Benchmarks

Times the core ObSet operations with an adaptive workload: each benchmark
scales N until a single run takes TIME_LIMIT_SECONDS, then reports the
throughput of that run in a rich table.

Usage:
    python scripts/benchmark.py            # Run all benchmarks
    python scripts/benchmark.py --config   # Show current benchmark configuration

Configuration:
    Adjust the constants at the top of the file to change benchmark parameters.
"""

import argparse
import time
from typing import Any, Callable, Dict

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from obset import ObSet

# Configuration constants - adjust these to change benchmark behavior
TIME_LIMIT_SECONDS = 0.5  # Stop scaling once a run takes this long
STARTING_N = 1000  # Starting number of operations
SCALE_FACTOR = 2  # How much to multiply N by each iteration
BOUNDED_CAPACITY = 256  # Capacity used by the eviction benchmarks


def _noop(value, operation, obset):
    pass


class ObSetBenchmark:
    """Rich-formatted display for ObSet performance benchmarking."""

    def __init__(self):
        self.console = Console()
        self.results: Dict[str, Dict[str, Any]] = {}

    def run_benchmarks(self):
        """Run all benchmarks and display results with rich formatting."""
        start_time = time.time()

        self.console.print(
            Panel(Align.center("ObSet Benchmark Suite"), border_style="blue")
        )
        self.console.print()

        self._run("Unbounded add", self._unbounded_add)
        self._run("Swap-remove", self._swap_remove)
        self._run("FIFO eviction", self._evicting_add("fifo"))
        self._run("LIFO eviction", self._evicting_add("lifo"))
        self._run("Dispatch (10 listeners)", self._dispatch_fanout)
        self._run("Transient value listeners", self._value_listener_churn)

        self._display_final_results(start_time)

    # Each operation builds its own input and returns the number of ops timed

    @staticmethod
    def _unbounded_add(n: int) -> int:
        s = ObSet()
        for i in range(n):
            s.add(i)
        return n

    @staticmethod
    def _swap_remove(n: int) -> int:
        s = ObSet(range(n))
        for i in range(0, n, 2):
            s.remove(i)
        for i in range(1, n, 2):
            s.remove(i)
        return n

    @staticmethod
    def _evicting_add(policy: str) -> Callable[[int], int]:
        def operation(n: int) -> int:
            s = ObSet(capacity=BOUNDED_CAPACITY, replacement_policy=policy)
            for i in range(n):
                s.add(i)
            return n

        return operation

    @staticmethod
    def _dispatch_fanout(n: int) -> int:
        s = ObSet()
        for _ in range(10):
            s.on_operation("add", lambda value, operation, obset: None)
        for i in range(n):
            s.add(i)
        return n

    @staticmethod
    def _value_listener_churn(n: int) -> int:
        s = ObSet()
        for i in range(n):
            s.once_value("add", i, _noop)
            s.add(i)
        return n

    def _run(self, name: str, operation_func: Callable[[int], int]):
        self.console.print(f"[yellow]Running {name} benchmark...[/yellow]")
        result = self._run_adaptive_benchmark(operation_func)
        self.results[name] = result
        self.console.print(
            f"[green]✓[/green] {name}: {result['operations_per_second']:,.0f} ops/sec "
            f"({result['max_n']} items)"
        )

    def _run_adaptive_benchmark(self, operation_func: Callable[[int], int]):
        """Scale the workload until a run reaches the time limit."""
        n = STARTING_N

        while True:
            start_time = time.perf_counter()
            ops_performed = operation_func(n)
            operation_time = time.perf_counter() - start_time

            if operation_time >= TIME_LIMIT_SECONDS:
                return {
                    "max_n": n,
                    "operation_time": operation_time,
                    "operations_per_second": ops_performed / operation_time,
                }
            n = int(n * SCALE_FACTOR)

    def _display_final_results(self, start_time: float):
        elapsed = time.time() - start_time

        table = Table(title="Final Benchmark Results")
        table.add_column("Benchmark", style="cyan", no_wrap=True)
        table.add_column("Max Workload", style="magenta")
        table.add_column("Performance", style="green", justify="right")
        table.add_column("Per Operation", style="yellow", justify="right")

        for name, result in self.results.items():
            per_op_ns = result["operation_time"] / result["max_n"] * 1e9
            table.add_row(
                name,
                f"{result['max_n']:,} ops",
                f"{result['operations_per_second'] / 1000:.1f}K ops/sec",
                f"{per_op_ns:,.0f} ns",
            )

        self.console.print()
        self.console.print(table)
        self.console.print(f"[dim]Benchmark completed in {elapsed:.2f} seconds[/dim]")


def print_config():
    """Print the current benchmark configuration."""
    print("ObSet Benchmark Configuration:")
    print(f"  TIME_LIMIT_SECONDS: {TIME_LIMIT_SECONDS}")
    print(f"  STARTING_N: {STARTING_N}")
    print(f"  SCALE_FACTOR: {SCALE_FACTOR}")
    print(f"  BOUNDED_CAPACITY: {BOUNDED_CAPACITY}")


def main():
    """Main entry point for the benchmark script."""
    parser = argparse.ArgumentParser(description="ObSet Performance Benchmarks")
    parser.add_argument(
        "--config", action="store_true", help="Show current benchmark configuration"
    )
    args = parser.parse_args()

    if args.config:
        print_config()
        return

    ObSetBenchmark().run_benchmarks()


if __name__ == "__main__":
    main()
