"""
Performance benchmarks for fingerprinting large values.

Uses pytest-benchmark to measure the two sequence encoding paths and the
top-level object path.
"""

import pytest

pytest.importorskip(
    "pytest_benchmark", reason="pytest-benchmark plugin is required for benchmark tests"
)

from refhash.digester import Digester


class Item:
    def __init__(self, index):
        self.index = index
        self.tags = ["a", "b", str(index)]


class TestPerformanceBenchmarks:
    """Performance benchmarks for fingerprint computation."""

    @pytest.fixture
    def digester(self):
        return Digester()

    def test_benchmark_plain_records(self, benchmark, digester):
        """Benchmark a composite-free list of mappings."""
        records = [{"id": i, "name": f"row-{i}", "score": i / 7} for i in range(1000)]

        result = benchmark(digester.digest, records)
        assert len(result) == 40

    def test_benchmark_records_with_references(self, benchmark, digester):
        """Benchmark a list where every element holds an object reference."""
        records = [{"id": i, "item": Item(i)} for i in range(1000)]

        result = benchmark(digester.digest, records)
        assert result == digester.digest(records)

    def test_benchmark_wide_object(self, benchmark, digester):
        """Benchmark a top-level object with many fields."""
        subject = Item(0)
        for i in range(500):
            setattr(subject, f"field_{i}", [i, Item(i)])

        result = benchmark(digester.digest, subject)
        assert len(result) == 40
