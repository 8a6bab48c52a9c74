"""
Performance benchmarking for the FACEVERIFY system.

This module measures execution time, throughput and memory usage of the
verification pipeline stages (profile assembly, encoding round trip and
comparison) on synthetic captures, for capacity planning of services that
run many verifications.
"""

import gc
import time
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, Optional
import numpy as np
import psutil
import structlog

from .comparison import FaceComparator
from .constants import BENCHMARK_ITERATIONS, BENCHMARK_WARMUP_ITERATIONS
from .encoding import decode_face_profile, encode_face_profile
from .exceptions import BenchmarkError
from .profile import assemble_face_profile
from .synthetic import make_identity_descriptor, make_synthetic_detection

# Initialize structured logger
logger = structlog.get_logger(__name__)


@dataclass
class BenchmarkResult:
    """
    Benchmark result for a single pipeline stage.

    Attributes
    ----------
    component_name : str
        Name of the benchmarked component.
    avg_time_ms : float
        Average execution time in milliseconds.
    std_time_ms : float
        Standard deviation of execution times.
    min_time_ms : float
        Minimum execution time.
    max_time_ms : float
        Maximum execution time.
    median_time_ms : float
        Median execution time.
    throughput_ops_per_sec : float
        Operations per second.
    memory_usage_mb : float
        Peak resident memory in MB.
    iterations : int
        Number of benchmark iterations.
    """

    component_name: str
    avg_time_ms: float
    std_time_ms: float
    min_time_ms: float
    max_time_ms: float
    median_time_ms: float
    throughput_ops_per_sec: float
    memory_usage_mb: float
    iterations: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class MemoryProfiler:
    """
    Simple memory profiler tracking resident memory around an operation.

    Examples
    --------
    >>> with MemoryProfiler() as profiler:
    ...     result = some_operation()
    >>> print(f"Peak memory: {profiler.peak_memory_mb} MB")
    """

    def __init__(self) -> None:
        self.initial_memory_mb = 0.0
        self.peak_memory_mb = 0.0
        self.process = psutil.Process()

    def _current_memory_mb(self) -> float:
        return self.process.memory_info().rss / 1024 / 1024

    def __enter__(self) -> "MemoryProfiler":
        gc.collect()
        self.initial_memory_mb = self._current_memory_mb()
        self.peak_memory_mb = self.initial_memory_mb
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.peak_memory_mb = max(self.peak_memory_mb, self._current_memory_mb())


class ComparisonBenchmarker:
    """
    Performance benchmarker for the verification pipeline.

    Parameters
    ----------
    default_iterations : int, default=BENCHMARK_ITERATIONS
        Default number of measured iterations.
    enable_memory_profiling : bool, default=True
        Whether to sample resident memory around each iteration.
    warmup_iterations : int, default=BENCHMARK_WARMUP_ITERATIONS
        Number of unmeasured calls before measurement.
    seed : Optional[int], default=0
        Seed for the synthetic captures.

    Examples
    --------
    >>> benchmarker = ComparisonBenchmarker(default_iterations=50)
    >>> results = benchmarker.benchmark_all_components()
    >>> print(results["comparison"]["throughput_ops_per_sec"])
    """

    def __init__(
        self,
        default_iterations: int = BENCHMARK_ITERATIONS,
        enable_memory_profiling: bool = True,
        warmup_iterations: int = BENCHMARK_WARMUP_ITERATIONS,
        seed: Optional[int] = 0,
    ) -> None:
        if default_iterations < 1:
            raise BenchmarkError(
                f"Iterations must be at least 1, got {default_iterations}",
                component_name="configuration",
            )

        self.default_iterations = default_iterations
        self.enable_memory_profiling = enable_memory_profiling
        self.warmup_iterations = warmup_iterations
        self.comparator = FaceComparator()

        rng = np.random.default_rng(seed)
        identity = make_identity_descriptor(rng)
        self.enrolment_detection = make_synthetic_detection(rng, identity)
        self.probe_detection = make_synthetic_detection(rng, identity)

        logger.info(
            "ComparisonBenchmarker initialized",
            default_iterations=default_iterations,
            enable_memory_profiling=enable_memory_profiling,
            warmup_iterations=warmup_iterations,
            seed=seed,
        )

    def _benchmark_function(
        self,
        func: Callable,
        args: tuple = (),
        iterations: int = None,
        component_name: str = "unknown",
    ) -> BenchmarkResult:
        """
        Benchmark a single function.

        Raises
        ------
        BenchmarkError
            If the function raises during warmup or measurement.
        """
        if iterations is None:
            iterations = self.default_iterations

        logger.debug(
            f"Starting benchmark for {component_name}",
            iterations=iterations,
            function_name=getattr(func, "__name__", repr(func)),
        )

        execution_times = []
        memory_usage_mb = 0.0

        try:
            for _ in range(self.warmup_iterations):
                func(*args)

            for _ in range(iterations):
                if self.enable_memory_profiling:
                    with MemoryProfiler() as profiler:
                        start_time = time.perf_counter()
                        func(*args)
                        execution_times.append((time.perf_counter() - start_time) * 1000)
                    memory_usage_mb = max(memory_usage_mb, profiler.peak_memory_mb)
                else:
                    start_time = time.perf_counter()
                    func(*args)
                    execution_times.append((time.perf_counter() - start_time) * 1000)
        except Exception as e:
            raise BenchmarkError(
                f"Benchmarked call failed for {component_name}: {e}",
                component_name=component_name,
            ) from e

        times = np.array(execution_times)
        avg_time_ms = float(np.mean(times))

        result = BenchmarkResult(
            component_name=component_name,
            avg_time_ms=avg_time_ms,
            std_time_ms=float(np.std(times)),
            min_time_ms=float(np.min(times)),
            max_time_ms=float(np.max(times)),
            median_time_ms=float(np.median(times)),
            throughput_ops_per_sec=1000.0 / avg_time_ms if avg_time_ms > 0 else 0.0,
            memory_usage_mb=memory_usage_mb,
            iterations=len(execution_times),
        )

        logger.info(
            f"Benchmark completed for {component_name}",
            avg_time_ms=avg_time_ms,
            throughput_ops_per_sec=result.throughput_ops_per_sec,
            memory_usage_mb=memory_usage_mb,
        )

        return result

    def benchmark_profile_assembly(self, iterations: int = None) -> BenchmarkResult:
        """Benchmark building a profile from a detection."""
        return self._benchmark_function(
            assemble_face_profile,
            args=(self.enrolment_detection,),
            iterations=iterations,
            component_name="profile_assembly",
        )

    def benchmark_encoding(self, iterations: int = None) -> BenchmarkResult:
        """Benchmark an encode/decode round trip."""
        profile = assemble_face_profile(self.enrolment_detection)

        def round_trip(p):
            return decode_face_profile(encode_face_profile(p))

        return self._benchmark_function(
            round_trip,
            args=(profile,),
            iterations=iterations,
            component_name="encoding_round_trip",
        )

    def benchmark_comparison(self, iterations: int = None) -> BenchmarkResult:
        """Benchmark comparing two profiles of the same synthetic person."""
        stored = assemble_face_profile(self.enrolment_detection)
        probe = assemble_face_profile(self.probe_detection)
        return self._benchmark_function(
            self.comparator.compare,
            args=(stored, probe),
            iterations=iterations,
            component_name="comparison",
        )

    def benchmark_all_components(self, iterations: int = None) -> Dict[str, Any]:
        """
        Benchmark every pipeline stage.

        Returns
        -------
        Dict[str, Any]
            Per-component results keyed by component name, plus the total
            wall time under ``"total_time_seconds"``.
        """
        start_time = time.perf_counter()

        results = [
            self.benchmark_profile_assembly(iterations),
            self.benchmark_encoding(iterations),
            self.benchmark_comparison(iterations),
        ]

        summary: Dict[str, Any] = {r.component_name: r.to_dict() for r in results}
        summary["total_time_seconds"] = time.perf_counter() - start_time

        logger.info(
            "All component benchmarks completed",
            components=[r.component_name for r in results],
            total_time_seconds=summary["total_time_seconds"],
        )

        return summary
