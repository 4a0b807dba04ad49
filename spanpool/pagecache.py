"""Page-level cache: hands out spans of pages and coalesces released ones."""

import threading

from .lists import Span, SpanList
from .objectpool import ObjectPool
from .pagemap import PageMap3
from .sizeclass import NPAGES, PAGE_SHIFT
from .system import default_space


class PageCache:
    """Keeps free spans bucketed by page count and maps every page to its span.

    Spans of up to ``NPAGES - 1`` pages are carved out of ``NPAGES - 1``-page
    regions reserved from ``space``; larger requests go to ``space`` directly.
    All public methods are thread safe.
    """

    def __init__(self, space=None):
        self.space = default_space if space is None else space
        self.lock = threading.RLock()
        self.span_lists = [SpanList() for _ in range(NPAGES)]
        self._span_pool = ObjectPool(Span)
        self._id_span_map = PageMap3()

    def _map_span(self, span):
        for page in range(span.page_id, span.page_id + span.n):
            self._id_span_map.set(page, span)

    def _unmap_span(self, span):
        for page in range(span.page_id, span.page_id + span.n):
            self._id_span_map.set(page, None)

    def _reserve(self, npages):
        span = self._span_pool.new()
        span.page_id = self.space.alloc(npages) >> PAGE_SHIFT
        span.n = npages
        self._map_span(span)
        return span

    def _take_span(self, k):
        if k > NPAGES - 1:
            return self._reserve(k)

        while True:
            bucket = self.span_lists[k]
            if not bucket.is_empty():
                span = bucket.pop_front()
                self._map_span(span)
                return span

            for larger in self.span_lists[k + 1:]:
                if larger.is_empty():
                    continue
                n_span = larger.pop_front()
                k_span = self._span_pool.new()
                k_span.page_id = n_span.page_id
                k_span.n = k
                n_span.page_id += k
                n_span.n -= k
                self.span_lists[n_span.n].push_front(n_span)
                self._map_span(n_span)
                self._map_span(k_span)
                return k_span

            big = self._reserve(NPAGES - 1)
            self.span_lists[big.n].push_front(big)

    def new_span(self, k):
        """Return a span of ``k`` pages, marked as in use."""
        if k <= 0:
            raise ValueError(f"page count must be positive, got {k}")
        with self.lock:
            span = self._take_span(k)
            span.is_use = True
            return span

    def map_object_to_span(self, obj):
        """Return the span that holds address ``obj``."""
        with self.lock:
            span = self._id_span_map.get(obj >> PAGE_SHIFT)
        if span is None:
            raise ValueError(f"address {obj:#x} does not belong to any span")
        return span

    def _free_neighbour(self, page, span):
        neighbour = self._id_span_map.get(page)
        if neighbour is None or neighbour.is_use:
            return None
        if neighbour.n + span.n > NPAGES - 1:
            return None
        return neighbour

    def release_span_to_page_cache(self, span):
        """Take back a span, merging it with free neighbouring spans."""
        with self.lock:
            if span.n > NPAGES - 1:
                address = span.address
                self._unmap_span(span)
                self.space.free(address)
                self._span_pool.delete(span)
                return

            while (prev_span := self._free_neighbour(span.page_id - 1, span)) is not None:
                span.page_id = prev_span.page_id
                span.n += prev_span.n
                self.span_lists[prev_span.n].erase(prev_span)
                self._span_pool.delete(prev_span)

            while (next_span := self._free_neighbour(span.page_id + span.n, span)) is not None:
                span.n += next_span.n
                self.span_lists[next_span.n].erase(next_span)
                self._span_pool.delete(next_span)

            self.span_lists[span.n].push_front(span)
            span.is_use = False
            self._map_span(span)