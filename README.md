# spanpool

`spanpool` models a tiered concurrent memory allocator. It runs over a
simulated address space in which addresses are plain integers, so its
behaviour can be studied and tested from Python.

## How it is organised

- **Thread caches** (`spanpool.threadcache.ThreadCache`). Each thread keeps
  its own free lists, one per size class. Refills from the central cache are
  batched, and the batch size grows by one on each refill up to the limit
  given by `num_move_size` ("slow start"). When a list holds as many objects
  as its current batch size, one batch goes back to the central cache.
- **Central cache** (`spanpool.centralcache.CentralCache`). It holds one
  locked span list per size class, cuts spans into equal-sized objects and
  hands them out in batches. A span whose objects have all come back is
  returned to the page cache.
- **Page cache** (`spanpool.pagecache.PageCache`). It keeps free spans
  grouped by page count, splits larger spans to serve a request, and merges
  a released span with free neighbouring spans as long as the result stays
  below 128 pages. Requests of 128 pages or more go straight to the
  address space.

Supporting modules:

- `spanpool.sizeclass`: `align_up`, `round_up`, `index`, `num_move_size` and
  `num_move_page`, plus the constants `MAX_BYTES` (256 KiB), `NFREELISTS`
  (208), `NPAGES` (128) and `PAGE_SHIFT` (13, i.e. 8 KiB pages).
- `spanpool.system`: `AddressSpace`, a page-granular range allocator that
  reuses freed ranges first-fit, and the process-wide `system_alloc` /
  `system_free`.
- `spanpool.lists`: `FreeList`, `Span` and `SpanList`.
- `spanpool.pagemap`: page-number maps `PageMap1` (flat array), `PageMap2`
  (two-level radix tree) and `PageMap3` (three-level radix tree, used by the
  page cache).
- `spanpool.objectpool`: `ObjectPool`, which recycles released `Span`
  instances.

## Installation

```
pip install .
```

With the test requirements:

```
pip install .[test]
```

## Usage

```python
from spanpool.allocator import Allocator, concurrent_alloc, concurrent_free

allocator = Allocator()
ptr = allocator.alloc(100)         # small object: served by the thread cache
big = allocator.alloc(512 * 1024)  # above MAX_BYTES: served by whole pages
allocator.free(ptr)
allocator.free(big)

# A process-wide default allocator is also available:
p = concurrent_alloc(64)
concurrent_free(p)
```

`alloc` returns an integer address and raises `ValueError` for a size that
is not positive. `free` takes the address exactly as returned; an address
that belongs to no span, or to a free span, raises `ValueError`.

## Commands

Compare the pool with plain `bytearray` allocation from several threads:

```
spanpool-benchmark [--ntimes N] [--threads N] [--rounds N]
```

The defaults are 50000 allocations per thread per round, 5 threads and
10 rounds. Timings are printed in milliseconds.

Run stress checks against the process-wide allocator:

```
spanpool-selfcheck [boundary] [large] [cross-thread] [random]
```

With no arguments all four checks run: blocks at every size-class boundary,
blocks above the small-object limit, blocks allocated in one thread and
freed from four others, and random sizes freed in shuffled order with a
fixed seed. Each check verifies that live blocks are distinct and do not
overlap. The command prints `Extra tests: OK` and exits with 0, or reports
the failure and exits with 1.

## What it does not do

No real memory is behind the addresses: nothing can be read from or written
to a block. The package models the bookkeeping of the allocator (size
classes, spans, batching and coalescing), not storage.

## Tests

```
pytest
```