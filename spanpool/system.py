"""Simulated page-granular address space standing in for the OS allocator."""

import bisect
import threading

from .sizeclass import PAGE_SHIFT, PAGE_SIZE


class AddressSpace:
    """Hands out page-aligned address ranges and takes them back.

    Addresses are plain integers; page ``p`` starts at ``p << PAGE_SHIFT``.
    Freed ranges are reused first-fit and adjacent holes are merged.
    """

    def __init__(self, page_limit=1 << (48 - PAGE_SHIFT), first_page=1):
        if first_page < 1:
            raise ValueError("page 0 is reserved for the null address")
        if page_limit <= first_page:
            raise ValueError("page limit must lie above the first page")
        self._lock = threading.Lock()
        self._limit = page_limit
        self._top = first_page
        self._holes = []  # sorted (start_page, npages)
        self._live = {}  # start_page -> npages
        self._pages_in_use = 0

    @property
    def pages_in_use(self):
        """Number of pages currently handed out."""
        return self._pages_in_use

    def alloc(self, kpage):
        """Reserve ``kpage`` contiguous pages and return the start address."""
        if kpage <= 0:
            raise ValueError(f"page count must be positive, got {kpage}")
        with self._lock:
            start = self._take_hole(kpage)
            if start is None:
                if self._top + kpage > self._limit:
                    raise MemoryError(f"cannot reserve {kpage} pages")
                start = self._top
                self._top += kpage
            self._live[start] = kpage
            self._pages_in_use += kpage
        return start << PAGE_SHIFT

    def free(self, ptr):
        """Release the whole range that started at ``ptr``."""
        if ptr % PAGE_SIZE:
            raise ValueError(f"address {ptr:#x} is not page aligned")
        start = ptr >> PAGE_SHIFT
        with self._lock:
            try:
                n = self._live.pop(start)
            except KeyError:
                raise ValueError(f"address {ptr:#x} was not reserved") from None
            self._pages_in_use -= n
            self._give_back(start, n)

    def _take_hole(self, kpage):
        for i, (start, n) in enumerate(self._holes):
            if n >= kpage:
                if n == kpage:
                    del self._holes[i]
                else:
                    self._holes[i] = (start + kpage, n - kpage)
                return start
        return None

    def _give_back(self, start, n):
        holes = self._holes
        i = bisect.bisect_left(holes, (start,))
        if i > 0 and sum(holes[i - 1]) == start:
            start, prev_n = holes.pop(i - 1)
            n += prev_n
            i -= 1
        if i < len(holes) and start + n == holes[i][0]:
            n += holes.pop(i)[1]
        if start + n == self._top:
            self._top = start
        else:
            holes.insert(i, (start, n))


default_space = AddressSpace()


def system_alloc(kpage):
    """Reserve ``kpage`` pages from the process-wide address space."""
    return default_space.alloc(kpage)


def system_free(ptr):
    """Release a range obtained from :func:`system_alloc`."""
    default_space.free(ptr)