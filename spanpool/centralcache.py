"""Central cache: spans cut into objects, shared between thread caches."""

from collections import deque

from . import sizeclass
from .lists import SpanList
from .pagecache import PageCache


class CentralCache:
    """One span list per size class, each guarded by its own lock."""

    def __init__(self, page_cache=None):
        self.page_cache = PageCache() if page_cache is None else page_cache
        self.span_lists = [SpanList() for _ in range(sizeclass.NFREELISTS)]

    def get_one_span(self, span_list, size):
        """Return a span of ``span_list`` that still has free objects.

        The caller holds ``span_list.lock``; it is released while a new span
        is fetched from the page cache and cut, and held again on return.
        """
        for span in span_list:
            if span.free_list:
                return span

        span_list.lock.release()
        try:
            span = self.page_cache.new_span(sizeclass.num_move_page(size))
            span.obj_size = size
            start = span.address
            span.free_list = deque(range(start, start + span.nbytes - size + 1, size))
        finally:
            span_list.lock.acquire()

        span_list.push_front(span)
        return span

    def fetch_range_obj(self, batch_num, size):
        """Take up to ``batch_num`` objects of ``size`` bytes from one span."""
        if batch_num < 1:
            raise ValueError(f"batch size must be at least 1, got {batch_num}")
        span_list = self.span_lists[sizeclass.index(size)]
        with span_list.lock:
            span = self.get_one_span(span_list, size)
            take = min(batch_num, len(span.free_list))
            objs = [span.free_list.popleft() for _ in range(take)]
            span.use_count += take
        return objs

    def release_list_to_spans(self, objs, size):
        """Give objects back to their spans; empty spans go to the page cache."""
        span_list = self.span_lists[sizeclass.index(size)]
        with span_list.lock:
            for obj in objs:
                span = self.page_cache.map_object_to_span(obj)
                span.free_list.appendleft(obj)
                span.use_count -= 1
                if span.use_count:
                    continue
                span_list.erase(span)
                span.free_list = deque()
                span_list.lock.release()
                try:
                    self.page_cache.release_span_to_page_cache(span)
                finally:
                    span_list.lock.acquire()