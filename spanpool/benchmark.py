"""Timing of the span allocator against plain Python allocations."""

import argparse
import threading
import time
from collections import deque
from dataclasses import dataclass

from .allocator import concurrent_alloc, concurrent_free

SEPARATOR = "=" * 45


@dataclass(frozen=True)
class BenchmarkResult:
    """Accumulated timings of one benchmark run, in milliseconds."""

    ntimes: int
    nworks: int
    rounds: int
    alloc_ms: int
    free_ms: int

    @property
    def operations(self):
        """Total number of allocate/free pairs performed."""
        return self.nworks * self.rounds * self.ntimes

    @property
    def total_ms(self):
        return self.alloc_ms + self.free_ms


def _request_size(i):
    return (16 + i) % 8192 + 1


def _run(ntimes, nworks, rounds, alloc, free):
    if ntimes < 1 or nworks < 1 or rounds < 1:
        raise ValueError("ntimes, nworks and rounds must all be positive")

    lock = threading.Lock()
    totals = {"alloc": 0.0, "free": 0.0}
    errors = []

    def worker():
        held = deque()
        try:
            for _ in range(rounds):
                begin = time.perf_counter()
                held.extend(alloc(_request_size(i)) for i in range(ntimes))
                middle = time.perf_counter()
                while held:
                    free(held.popleft())
                end = time.perf_counter()
                with lock:
                    totals["alloc"] += middle - begin
                    totals["free"] += end - middle
        except BaseException as exc:  # reported after join
            with lock:
                errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(nworks)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        raise errors[0]

    return BenchmarkResult(
        ntimes=ntimes,
        nworks=nworks,
        rounds=rounds,
        alloc_ms=round(totals["alloc"] * 1000),
        free_ms=round(totals["free"] * 1000),
    )


def _report(result, alloc_label, free_label):
    print(
        f"{result.nworks} threads ran {result.rounds} rounds, "
        f"{alloc_label} {result.ntimes} times per round: {result.alloc_ms} ms"
    )
    print(
        f"{result.nworks} threads ran {result.rounds} rounds, "
        f"{free_label} {result.ntimes} times per round: {result.free_ms} ms"
    )
    print(
        f"{result.nworks} threads {alloc_label}&{free_label} "
        f"{result.operations} times, total: {result.total_ms} ms"
    )


def _builtin_alloc(size):
    return bytearray(size)


def _builtin_free(block):
    """Dropping the last reference releases the block."""


def benchmark_malloc(ntimes, nworks, rounds):
    """Time plain ``bytearray`` allocation from ``nworks`` threads."""
    result = _run(ntimes, nworks, rounds, _builtin_alloc, _builtin_free)
    _report(result, "malloc", "free")
    return result


def benchmark_concurrent_malloc(ntimes, nworks, rounds):
    """Time the process-wide span allocator from ``nworks`` threads."""
    result = _run(ntimes, nworks, rounds, concurrent_alloc, concurrent_free)
    _report(result, "concurrent alloc", "concurrent dealloc")
    return result


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="spanpool-benchmark",
        description="Compare the span allocator with plain allocations.",
    )
    parser.add_argument("--ntimes", type=int, default=50000,
                        help="allocations per thread per round")
    parser.add_argument("--threads", type=int, default=5, help="worker threads")
    parser.add_argument("--rounds", type=int, default=10, help="rounds per thread")
    args = parser.parse_args(argv)
    if args.ntimes < 1 or args.threads < 1 or args.rounds < 1:
        parser.error("all counts must be positive")

    print(SEPARATOR)
    benchmark_concurrent_malloc(args.ntimes, args.threads, args.rounds)
    print()
    print()
    benchmark_malloc(args.ntimes, args.threads, args.rounds)
    print(SEPARATOR)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())