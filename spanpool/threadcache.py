"""Per-thread cache of small objects with slow-start batching."""

from . import sizeclass
from .lists import FreeList


class ThreadCache:
    """Free lists owned by a single thread; no locking needed."""

    def __init__(self, central_cache):
        self.central_cache = central_cache
        self.free_lists = [FreeList() for _ in range(sizeclass.NFREELISTS)]

    def allocate(self, size):
        """Return the address of an object of at least ``size`` bytes."""
        if not 0 < size <= sizeclass.MAX_BYTES:
            raise ValueError(f"size {size} is outside 1..{sizeclass.MAX_BYTES}")
        aligned = sizeclass.round_up(size)
        idx = sizeclass.index(size)
        free_list = self.free_lists[idx]
        if not free_list.is_empty():
            return free_list.pop()
        return self.fetch_from_central_cache(idx, aligned)

    def deallocate(self, ptr, size):
        """Keep ``ptr`` locally, returning a batch when the list grows too long."""
        if not ptr:
            raise ValueError("cannot free a null address")
        free_list = self.free_lists[sizeclass.index(size)]
        free_list.push(ptr)
        if len(free_list) >= free_list.max_size:
            self.list_too_long(free_list, size)

    def fetch_from_central_cache(self, index, size):
        """Refill bucket ``index`` from the central cache and return one object."""
        free_list = self.free_lists[index]
        batch_num = min(free_list.max_size, sizeclass.num_move_size(size))
        if free_list.max_size == batch_num:
            free_list.max_size += 1
        first, *rest = self.central_cache.fetch_range_obj(batch_num, size)
        if rest:
            free_list.push_range(rest)
        return first

    def list_too_long(self, free_list, size):
        """Hand one batch of ``free_list`` back to the central cache."""
        objs = free_list.pop_range(free_list.max_size)
        self.central_cache.release_list_to_spans(objs, size)