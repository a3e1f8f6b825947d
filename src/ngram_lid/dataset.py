from __future__ import annotations

import heapq
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Iterable, Optional, TypeVar

from .errors import InvalidConfigError

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K", bound=Hashable)

Partitions = list[list[Any]]


@dataclass(frozen=True)
class Broadcast(Generic[T]):
    """
    Read-only value shared with every partition worker.

    Built once by `broadcast()`; the holder cannot be rebound and callers are expected to wrap
    immutable values (frozenset, tuple, MappingProxyType).
    """

    value: T


def broadcast(value: T) -> Broadcast[T]:
    if isinstance(value, (set, list, dict)):
        raise TypeError(
            f"broadcast values must be immutable, got {type(value).__name__}; "
            "wrap sets in frozenset() and lists in tuple()"
        )
    return Broadcast(value=value)


def _shuffle(parts: Partitions, n_partitions: int) -> Partitions:
    # Redistribute (key, value) pairs so every key lands in exactly one partition.
    out: Partitions = [[] for _ in range(n_partitions)]
    for part in parts:
        for kv in part:
            out[hash(kv[0]) % n_partitions].append(kv)
    return out


class PartitionedDataset(Generic[T]):
    """
    Lazily evaluated, partitioned in-memory collection.

    Transformations build a new dataset and run nothing until `partitions()`, `collect()`,
    `count()`, `take()` or `cache()` is called. Without `cache()` a dataset is recomputed every
    time it is consumed. Per-partition work runs on a thread pool when `workers > 1`.

    `parallelism` is the number of partitions produced by shuffles (`group_by_key`).
    """

    def __init__(
        self,
        compute: Callable[[], Partitions],
        *,
        parallelism: int = 1,
        workers: int = 1,
    ) -> None:
        if int(parallelism) < 1:
            raise InvalidConfigError("parallelism must be >= 1")
        if int(workers) < 1:
            raise InvalidConfigError("workers must be >= 1")
        self._compute = compute
        self._cached: Optional[Partitions] = None
        self.parallelism = int(parallelism)
        self.workers = int(workers)

    @classmethod
    def from_iterable(
        cls, items: Iterable[T], *, n_partitions: int = 1, workers: int = 1
    ) -> "PartitionedDataset[T]":
        """Split `items` into `n_partitions` contiguous slices (order preserved)."""

        n = int(n_partitions)
        if n < 1:
            raise InvalidConfigError("n_partitions must be >= 1")
        data = list(items)
        size, rem = divmod(len(data), n)
        parts: Partitions = []
        start = 0
        for i in range(n):
            end = start + size + (1 if i < rem else 0)
            parts.append(data[start:end])
            start = end
        return cls(lambda: parts, parallelism=n, workers=workers)

    def _derive(self, compute: Callable[[], Partitions]) -> "PartitionedDataset[Any]":
        return PartitionedDataset(compute, parallelism=self.parallelism, workers=self.workers)

    def _run_partitions(self, fn: Callable[[list[Any]], list[Any]], parts: Partitions) -> Partitions:
        if self.workers <= 1 or len(parts) <= 1:
            return [fn(p) for p in parts]
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            return list(pool.map(fn, parts))

    # Actions

    def partitions(self) -> Partitions:
        if self._cached is not None:
            return self._cached
        return self._compute()

    def cache(self) -> "PartitionedDataset[T]":
        """Materialize once and keep the partitions in memory for later consumers."""

        if self._cached is None:
            self._cached = self._compute()
        return self

    @property
    def is_cached(self) -> bool:
        return self._cached is not None

    def collect(self) -> list[T]:
        return [x for part in self.partitions() for x in part]

    def count(self) -> int:
        return sum(len(part) for part in self.partitions())

    def take(self, n: int) -> list[T]:
        out: list[T] = []
        if n <= 0:
            return out
        for part in self.partitions():
            for x in part:
                out.append(x)
                if len(out) >= n:
                    return out
        return out

    def num_partitions(self) -> int:
        return len(self.partitions())

    # Narrow transformations

    def map_partitions(self, fn: Callable[[list[T]], list[U]]) -> "PartitionedDataset[U]":
        return self._derive(lambda: self._run_partitions(fn, self.partitions()))

    def map(self, fn: Callable[[T], U]) -> "PartitionedDataset[U]":
        return self.map_partitions(lambda part: [fn(x) for x in part])

    def flat_map(self, fn: Callable[[T], Iterable[U]]) -> "PartitionedDataset[U]":
        return self.map_partitions(lambda part: [y for x in part for y in fn(x)])

    def filter(self, pred: Callable[[T], bool]) -> "PartitionedDataset[T]":
        return self.map_partitions(lambda part: [x for x in part if pred(x)])

    def union(self, other: "PartitionedDataset[T]") -> "PartitionedDataset[T]":
        return self._derive(lambda: list(self.partitions()) + list(other.partitions()))

    # Wide transformations (shuffle boundaries)

    def group_by_key(self, key_fn: Callable[[T], K]) -> "GroupedDataset[K, T]":
        return GroupedDataset(self, key_fn)

    def sort_by(
        self, key_fn: Callable[[T], Any], *, reverse: bool = False
    ) -> "PartitionedDataset[T]":
        """
        Globally sort into a single partition.

        Partitions are sorted independently (in parallel when allowed) and then merged.
        """

        def compute() -> Partitions:
            sorted_parts = self._run_partitions(
                lambda part: sorted(part, key=key_fn, reverse=reverse), self.partitions()
            )
            return [list(heapq.merge(*sorted_parts, key=key_fn, reverse=reverse))]

        return self._derive(compute)

    def __repr__(self) -> str:
        state = "cached" if self.is_cached else "lazy"
        return f"PartitionedDataset(parallelism={self.parallelism}, workers={self.workers}, {state})"


class GroupedDataset(Generic[K, T]):
    """Result of `PartitionedDataset.group_by_key`; consumed by `reduce_groups` or `map_groups`."""

    def __init__(self, parent: PartitionedDataset[T], key_fn: Callable[[T], K]) -> None:
        self._parent = parent
        self._key_fn = key_fn

    def reduce_groups(self, fn: Callable[[T, T], T]) -> PartitionedDataset[tuple[K, T]]:
        """
        Reduce each group with an associative, commutative `fn`.

        Values are combined inside each partition first, then shuffled by key and reduced again.
        """

        parent = self._parent
        key_fn = self._key_fn

        def combine(part: list[T]) -> list[tuple[K, T]]:
            acc: dict[K, T] = {}
            for x in part:
                k = key_fn(x)
                acc[k] = fn(acc[k], x) if k in acc else x
            return list(acc.items())

        def merge(part: list[tuple[K, T]]) -> list[tuple[K, T]]:
            acc: dict[K, T] = {}
            for k, v in part:
                acc[k] = fn(acc[k], v) if k in acc else v
            return list(acc.items())

        def compute() -> Partitions:
            combined = parent._run_partitions(combine, parent.partitions())
            return parent._run_partitions(merge, _shuffle(combined, parent.parallelism))

        return parent._derive(compute)

    def map_groups(self, fn: Callable[[K, list[T]], U]) -> PartitionedDataset[U]:
        """Apply `fn(key, values)` once per distinct key."""

        parent = self._parent
        key_fn = self._key_fn

        def apply(part: list[tuple[K, T]]) -> list[U]:
            groups: dict[K, list[T]] = {}
            for k, x in part:
                groups.setdefault(k, []).append(x)
            return [fn(k, xs) for k, xs in groups.items()]

        def compute() -> Partitions:
            keyed = parent._run_partitions(
                lambda part: [(key_fn(x), x) for x in part], parent.partitions()
            )
            return parent._run_partitions(apply, _shuffle(keyed, parent.parallelism))

        return parent._derive(compute)
