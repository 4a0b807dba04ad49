"""Front end: small objects through thread caches, large ones by the page."""

import threading

from . import sizeclass
from .centralcache import CentralCache
from .pagecache import PageCache
from .threadcache import ThreadCache


class Allocator:
    """A complete allocator stack over one page cache."""

    def __init__(self, page_cache=None):
        self.page_cache = PageCache() if page_cache is None else page_cache
        self.central_cache = CentralCache(self.page_cache)
        self._local = threading.local()

    def thread_cache(self):
        """Return the calling thread's cache, creating it on first use."""
        cache = getattr(self._local, "cache", None)
        if cache is None:
            cache = ThreadCache(self.central_cache)
            self._local.cache = cache
        return cache

    def alloc(self, size):
        """Return the address of a block of at least ``size`` bytes."""
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        if size > sizeclass.MAX_BYTES:
            kpage = sizeclass.round_up(size) >> sizeclass.PAGE_SHIFT
            span = self.page_cache.new_span(kpage)
            span.obj_size = size
            return span.address
        return self.thread_cache().allocate(size)

    def free(self, ptr):
        """Release a block obtained from :meth:`alloc`."""
        span = self.page_cache.map_object_to_span(ptr)
        if not span.is_use:
            raise ValueError(f"address {ptr:#x} is not allocated")
        size = span.obj_size
        if size > sizeclass.MAX_BYTES:
            self.page_cache.release_span_to_page_cache(span)
        else:
            self.thread_cache().deallocate(ptr, size)


default_allocator = Allocator()


def concurrent_alloc(size):
    """Allocate from the process-wide allocator."""
    return default_allocator.alloc(size)


def concurrent_free(ptr):
    """Free a block obtained from :func:`concurrent_alloc`."""
    default_allocator.free(ptr)