"""Tests for pipeline benchmarking."""

import pytest

from faceverify.benchmark import BenchmarkResult, ComparisonBenchmarker, MemoryProfiler
from faceverify.exceptions import BenchmarkError


@pytest.fixture
def benchmarker():
    return ComparisonBenchmarker(
        default_iterations=3, enable_memory_profiling=False, warmup_iterations=1
    )


class TestComparisonBenchmarker:
    """Tests for ComparisonBenchmarker."""

    def test_benchmark_comparison(self, benchmarker):
        result = benchmarker.benchmark_comparison()

        assert isinstance(result, BenchmarkResult)
        assert result.component_name == "comparison"
        assert result.iterations == 3
        assert result.min_time_ms <= result.median_time_ms <= result.max_time_ms
        assert result.throughput_ops_per_sec > 0

    def test_iterations_override(self, benchmarker):
        assert benchmarker.benchmark_encoding(iterations=2).iterations == 2

    def test_benchmark_all_components(self, benchmarker):
        results = benchmarker.benchmark_all_components()

        assert set(results) == {
            "profile_assembly",
            "encoding_round_trip",
            "comparison",
            "total_time_seconds",
        }
        assert results["profile_assembly"]["iterations"] == 3
        assert results["total_time_seconds"] > 0

    def test_memory_profiling(self):
        benchmarker = ComparisonBenchmarker(default_iterations=2, warmup_iterations=0)
        result = benchmarker.benchmark_profile_assembly()
        assert result.memory_usage_mb > 0

    def test_rejects_zero_iterations(self):
        with pytest.raises(BenchmarkError):
            ComparisonBenchmarker(default_iterations=0)

    def test_failures_are_wrapped(self, benchmarker):
        def broken():
            raise ValueError("boom")

        with pytest.raises(BenchmarkError) as exc_info:
            benchmarker._benchmark_function(broken, component_name="broken")

        assert exc_info.value.context["component"] == "broken"
        assert isinstance(exc_info.value.__cause__, ValueError)


def test_memory_profiler_tracks_resident_memory():
    with MemoryProfiler() as profiler:
        data = [0] * 1000

    assert len(data) == 1000
    assert profiler.peak_memory_mb >= profiler.initial_memory_mb > 0
