"""Free lists of small objects and intrusive doubly linked span lists."""

import threading
from collections import deque
from dataclasses import dataclass, field

from .sizeclass import PAGE_SHIFT


class FreeList:
    """LIFO list of free object addresses with a slow-start batch limit."""

    def __init__(self):
        self._objs = deque()
        self.max_size = 1

    def __len__(self):
        return len(self._objs)

    def push(self, obj):
        """Put one object at the head."""
        if not obj:
            raise ValueError("cannot push a null object")
        self._objs.appendleft(obj)

    def pop(self):
        """Take the object at the head."""
        if not self._objs:
            raise IndexError("pop from an empty free list")
        return self._objs.popleft()

    def push_range(self, objs):
        """Put a chain of objects at the head, keeping their order."""
        self._objs.extendleft(reversed(list(objs)))

    def pop_range(self, n):
        """Take ``n`` objects from the head, in list order."""
        if not 1 <= n <= len(self._objs):
            raise ValueError(f"cannot take {n} objects from a list of {len(self._objs)}")
        return [self._objs.popleft() for _ in range(n)]

    def is_empty(self):
        return not self._objs


@dataclass(eq=False)
class Span:
    """A run of contiguous pages, possibly cut into equal-sized objects."""

    page_id: int = 0
    n: int = 0
    obj_size: int = 0
    use_count: int = 0
    free_list: deque = field(default_factory=deque, repr=False)
    is_use: bool = False
    prev: "Span | None" = field(default=None, repr=False)
    next: "Span | None" = field(default=None, repr=False)

    @property
    def address(self):
        """Address of the first byte of the span."""
        return self.page_id << PAGE_SHIFT

    @property
    def nbytes(self):
        """Size of the span in bytes."""
        return self.n << PAGE_SHIFT


class SpanList:
    """Circular doubly linked list of spans with a sentinel and its own lock."""

    def __init__(self):
        head = Span()
        head.prev = head.next = head
        self._head = head
        self.lock = threading.Lock()

    def __iter__(self):
        node = self._head.next
        while node is not self._head:
            following = node.next
            yield node
            node = following

    def __len__(self):
        return sum(1 for _ in self)

    def is_empty(self):
        return self._head.next is self._head

    def push_front(self, span):
        self.insert(self._head.next, span)

    def pop_front(self):
        if self.is_empty():
            raise IndexError("pop from an empty span list")
        front = self._head.next
        self.erase(front)
        return front

    def insert(self, pos, new_span):
        """Link ``new_span`` immediately before ``pos``."""
        if pos is None or new_span is None:
            raise ValueError("insert needs a position and a span")
        prev = pos.prev
        prev.next = new_span
        new_span.prev = prev
        new_span.next = pos
        pos.prev = new_span

    def erase(self, span):
        """Unlink ``span`` from the list."""
        if span is self._head:
            raise ValueError("cannot erase the list head")
        if span.prev is None or span.next is None:
            raise ValueError("span is not linked into a list")
        span.prev.next = span.next
        span.next.prev = span.prev
        span.prev = span.next = None