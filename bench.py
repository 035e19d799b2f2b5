import itertools
from collections.abc import Callable, Iterator
from copy import deepcopy
from dataclasses import dataclass, field
from decimal import Decimal
from statistics import mean
from timeit import repeat
from typing import Annotated, Any, ClassVar, Self

from tabulate import tabulate
from typer import Option, Typer

from txguard import Ref, transaction


@dataclass(frozen=True, slots=True)
class Scenario:
    """
    `reference` mutates a snapshot-protected value by hand, `guarded` does the same
    work through a transaction guard.
    """

    reference: Callable[[], Any]
    guarded: Callable[[], Any]


@dataclass(frozen=True, slots=True)
class Benchmark:
    reference_us: Decimal
    guarded_us: Decimal

    @property
    def difference_rate(self) -> Decimal:
        return ((self.guarded_us - self.reference_us) / self.reference_us) * 100

    @classmethod
    def of(cls, scenario: Scenario, number: int = 1) -> Self:
        return cls(
            cls._mean_us(scenario.reference, number),
            cls._mean_us(scenario.guarded, number),
        )

    @staticmethod
    def _mean_us(callable_: Callable[..., Any], number: int) -> Decimal:
        deltas = repeat(callable_, number=1, repeat=number)
        return mean(Decimal(delta) * (10**6) for delta in deltas)


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    title: str
    benchmark: Benchmark

    @property
    def row(self) -> tuple[str, str, str, str]:
        rate = self.benchmark.difference_rate
        return (
            self.title,
            f"{self.benchmark.reference_us:.2f}μs",
            f"{self.benchmark.guarded_us:.2f}μs",
            f"{rate:.2f}% slower" if rate >= 0 else f"{abs(rate):.2f}% faster",
        )


@dataclass(frozen=True, slots=True)
class TxBenchmark:
    scenarios: ClassVar[dict[str, Callable[[int], Scenario]]] = {}
    sizes: tuple[int, ...] = field(default=(10, 1_000))

    def start(self, number: int = 1) -> Iterator[BenchmarkResult]:
        for (title, factory), size in itertools.product(
            self.scenarios.items(),
            self.sizes,
        ):
            scenario = factory(size)
            benchmark = Benchmark.of(scenario, number)
            yield BenchmarkResult(f"{title} ({size} items)", benchmark)

    @classmethod
    def register(cls, wrapped: Callable[[int], Scenario] = None, /, *, title: str):
        def decorator(wp):
            cls.scenarios[title] = wp
            return wp

        return decorator(wrapped) if wrapped else decorator


@TxBenchmark.register(title="revert")
def revert(size: int) -> Scenario:
    values = list(range(size))

    def reference():
        snapshot = deepcopy(values)
        values.append(size)
        values[:] = snapshot

    def guarded():
        with transaction(values) as tx:
            tx.append(size)

    return Scenario(reference, guarded)


@TxBenchmark.register(title="commit")
def commit(size: int) -> Scenario:
    values = list(range(size))

    def reference():
        deepcopy(values)
        values.append(size)
        values.pop()

    def guarded():
        with transaction(values) as tx:
            tx.append(size)
            tx.commit()
            tx.pop()

    return Scenario(reference, guarded)


@TxBenchmark.register(title="commit + rollback")
def commit_and_rollback(size: int) -> Scenario:
    ref = Ref(list(range(size)))

    def reference():
        scratch = deepcopy(ref.value)
        scratch.append(size)
        baseline = deepcopy(scratch)
        scratch.clear()
        scratch = deepcopy(baseline)
        scratch.pop()
        deepcopy(scratch)
        ref.value = scratch

    def guarded():
        with transaction(ref) as tx:
            tx.append(size)
            tx.commit()
            tx.clear()
            tx.rollback()
            tx.pop()
            tx.commit()

    return Scenario(reference, guarded)


cli = Typer()


@cli.command()
def main(number: Annotated[int, Option("--number", "-n", min=1)] = 1000):
    results = TxBenchmark().start(number)
    headers = ("", "Reference Time (μs)", "Tx Time (μs)", "Difference Rate (%)")
    data = (result.row for result in results)
    table = tabulate(data, headers=headers)
    print(table)


if __name__ == "__main__":
    cli()
