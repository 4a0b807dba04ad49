"""Fixed-type object pool that recycles released instances."""

from typing import Generic, TypeVar

T = TypeVar("T")


class ObjectPool(Generic[T]):
    """Hands out instances of ``cls``, reusing released ones first.

    A reused instance is reinitialised with a fresh ``__init__()`` call, so
    ``cls`` must be constructible without arguments.
    """

    def __init__(self, cls):
        self._cls = cls
        self._free = []
        self._free_ids = set()
        self.created = 0

    def __len__(self):
        """Number of released instances waiting for reuse."""
        return len(self._free)

    def new(self):
        """Return a freshly initialised instance."""
        if self._free:
            obj = self._free.pop()
            self._free_ids.discard(id(obj))
            obj.__init__()
            return obj
        self.created += 1
        return self._cls()

    def delete(self, obj):
        """Hand an instance back to the pool."""
        if id(obj) in self._free_ids:
            raise ValueError("object was already returned to the pool")
        self._free.append(obj)
        self._free_ids.add(id(obj))