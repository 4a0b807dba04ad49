"""Stress checks of an allocator: boundary sizes, large blocks, cross-thread frees."""

import argparse
import random
import sys
import threading

from . import sizeclass
from .allocator import default_allocator

BOUNDARY_SIZES = (
    1, 7, 8, 9, 127, 128, 129,
    1023, 1024, 1025,
    8191, 8192, 8193,
    65535, 65536,
    262143, 262144,
)

LARGE_SIZES = (
    sizeclass.MAX_BYTES + 1,
    sizeclass.MAX_BYTES + 123,
    512 * 1024,
    1024 * 1024,
)


class SelfCheckError(Exception):
    """An allocator returned blocks that break its guarantees."""


def _verify_blocks(allocator, blocks):
    """Check that the live ``(address, size)`` blocks are disjoint and in use."""
    addresses = [ptr for ptr, _ in blocks]
    if len(set(addresses)) != len(addresses):
        raise SelfCheckError("the same address was handed out twice")
    extents = sorted((ptr, sizeclass.round_up(size)) for ptr, size in blocks)
    for (ptr, extent), (following, _) in zip(extents, extents[1:]):
        if ptr + extent > following:
            raise SelfCheckError(f"block at {ptr:#x} overlaps block at {following:#x}")
    for ptr, size in blocks:
        try:
            span = allocator.page_cache.map_object_to_span(ptr)
        except ValueError as exc:
            raise SelfCheckError(str(exc)) from exc
        if not span.is_use:
            raise SelfCheckError(f"block at {ptr:#x} lies in a free span")
        if not span.address <= ptr < span.address + span.nbytes:
            raise SelfCheckError(f"block at {ptr:#x} lies outside its span")


def _alloc_all(allocator, sizes):
    blocks = [(allocator.alloc(size), size) for size in sizes]
    _verify_blocks(allocator, blocks)
    return [ptr for ptr, _ in blocks]


def _free_in_parallel(allocator, ptrs, workers=4):
    lock = threading.Lock()
    pending = iter(ptrs)
    errors = []

    def worker():
        while True:
            with lock:
                ptr = next(pending, None)
            if ptr is None:
                return
            try:
                allocator.free(ptr)
            except Exception as exc:
                with lock:
                    errors.append(exc)
                return

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        raise SelfCheckError(f"free failed: {errors[0]}") from errors[0]


def _alloc_and_free(allocator, sizes, iterations):
    total = 0
    for size in sizes:
        for ptr in _alloc_all(allocator, [size] * iterations):
            allocator.free(ptr)
        total += iterations
    return total


def check_boundary_sizes(allocator):
    """Allocate and free many blocks at every size-class boundary."""
    return _alloc_and_free(allocator, BOUNDARY_SIZES, 2000)


def check_large_alloc(allocator):
    """Allocate and free blocks above the small-object limit."""
    return _alloc_and_free(allocator, LARGE_SIZES, 200)


def check_cross_thread_free(allocator):
    """Allocate in one thread and free the blocks from four others."""
    n = 60000
    result = {}

    def producer():
        try:
            result["ptrs"] = _alloc_all(allocator, [(i % 8192) + 1 for i in range(n)])
        except Exception as exc:
            result["error"] = exc

    thread = threading.Thread(target=producer)
    thread.start()
    thread.join()
    if "error" in result:
        error = result["error"]
        if isinstance(error, SelfCheckError):
            raise error
        raise SelfCheckError(f"allocation failed: {error}") from error

    _free_in_parallel(allocator, result["ptrs"])
    return n


def check_random_mixed(allocator):
    """Random sizes, shuffled and freed from four threads, with a fixed seed."""
    total = 100000
    batch = 10000
    rng = random.Random(12345)
    for _ in range(0, total, batch):
        sizes = [rng.randint(1, sizeclass.MAX_BYTES * 2) for _ in range(batch)]
        ptrs = _alloc_all(allocator, sizes)
        rng.shuffle(ptrs)
        _free_in_parallel(allocator, ptrs)
    return total


CHECKS = {
    "boundary": check_boundary_sizes,
    "large": check_large_alloc,
    "cross-thread": check_cross_thread_free,
    "random": check_random_mixed,
}


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="spanpool-selfcheck",
        description="Run stress checks against the process-wide allocator.",
    )
    parser.add_argument("checks", nargs="*", choices=[*CHECKS, []],
                        help="checks to run (default: all)")
    args = parser.parse_args(argv)
    names = args.checks or list(CHECKS)
    try:
        for name in names:
            CHECKS[name](default_allocator)
    except SelfCheckError as exc:
        print(f"Extra tests: FAILED: {exc}", file=sys.stderr)
        return 1
    print("Extra tests: OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())