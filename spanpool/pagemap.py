"""Page-number to value maps: flat array, two-level and three-level radix trees."""

from .sizeclass import PAGE_SHIFT


def _out_of_range(k, bits):
    return k < 0 or (k >> bits) > 0


class PageMap1:
    """Single flat array indexed by page number."""

    def __init__(self, bits=32 - PAGE_SHIFT):
        if bits <= 0:
            raise ValueError("bits must be positive")
        self.bits = bits
        self._array = [None] * (1 << bits)

    def get(self, k):
        """Value for ``k``, or None when unset or out of range."""
        if _out_of_range(k, self.bits):
            return None
        return self._array[k]

    def set(self, k, v):
        if _out_of_range(k, self.bits):
            raise IndexError(f"page number {k} does not fit in {self.bits} bits")
        self._array[k] = v


class PageMap2:
    """Two-level radix tree with a 32-entry root; all leaves are preallocated."""

    ROOT_BITS = 5
    ROOT_LENGTH = 1 << ROOT_BITS

    def __init__(self, bits=32 - PAGE_SHIFT):
        if bits <= self.ROOT_BITS:
            raise ValueError(f"bits must exceed {self.ROOT_BITS}")
        self.bits = bits
        self._leaf_bits = bits - self.ROOT_BITS
        self._leaf_length = 1 << self._leaf_bits
        self._root = [None] * self.ROOT_LENGTH
        self.preallocate_more_memory()

    def get(self, k):
        """Value for ``k``, or None when unset or out of range."""
        if _out_of_range(k, self.bits):
            return None
        leaf = self._root[k >> self._leaf_bits]
        if leaf is None:
            return None
        return leaf[k & (self._leaf_length - 1)]

    def set(self, k, v):
        if _out_of_range(k, self.bits):
            raise IndexError(f"page number {k} does not fit in {self.bits} bits")
        i1 = k >> self._leaf_bits
        if self._root[i1] is None:
            self._root[i1] = [None] * self._leaf_length
        self._root[i1][k & (self._leaf_length - 1)] = v

    def ensure(self, start, n):
        """Create the leaves covering ``[start, start + n)``; False on overflow."""
        if start < 0:
            return False
        key = start
        last = start + n - 1
        while key <= last:
            i1 = key >> self._leaf_bits
            if i1 >= self.ROOT_LENGTH:
                return False
            if self._root[i1] is None:
                self._root[i1] = [None] * self._leaf_length
            key = (i1 + 1) << self._leaf_bits
        return True

    def preallocate_more_memory(self):
        """Create every leaf so that any page number can be set."""
        self.ensure(0, 1 << self.bits)


class PageMap3:
    """Three-level radix tree whose interior nodes and leaves appear on demand."""

    def __init__(self, bits=48 - PAGE_SHIFT):
        if bits < 3:
            raise ValueError("bits must be at least 3")
        self.bits = bits
        self._interior_bits = (bits + 2) // 3
        self._interior_length = 1 << self._interior_bits
        self._leaf_bits = bits - 2 * self._interior_bits
        self._leaf_length = 1 << self._leaf_bits
        self._root = self._new_node()

    def _new_node(self):
        return [None] * self._interior_length

    def _split(self, k):
        i1 = k >> (self._leaf_bits + self._interior_bits)
        i2 = (k >> self._leaf_bits) & (self._interior_length - 1)
        i3 = k & (self._leaf_length - 1)
        return i1, i2, i3

    def get(self, k):
        """Value for ``k``, or None when unset or out of range."""
        if _out_of_range(k, self.bits):
            return None
        i1, i2, i3 = self._split(k)
        node = self._root[i1]
        if node is None or node[i2] is None:
            return None
        return node[i2][i3]

    def set(self, k, v):
        if _out_of_range(k, self.bits):
            raise IndexError(f"page number {k} does not fit in {self.bits} bits")
        i1, i2, i3 = self._split(k)
        if self._root[i1] is None:
            self._root[i1] = self._new_node()
        node = self._root[i1]
        if node[i2] is None:
            node[i2] = [None] * self._leaf_length
        node[i2][i3] = v

    def ensure(self, start, n):
        """Create the nodes covering ``[start, start + n)``; False on overflow."""
        if start < 0:
            return False
        key = start
        last = start + n - 1
        while key <= last:
            i1 = key >> (self._leaf_bits + self._interior_bits)
            i2 = (key >> self._leaf_bits) & (self._interior_length - 1)
            if i1 >= self._interior_length:
                return False
            if self._root[i1] is None:
                self._root[i1] = self._new_node()
            node = self._root[i1]
            if node[i2] is None:
                node[i2] = [None] * self._leaf_length
            key = ((key >> self._leaf_bits) + 1) << self._leaf_bits
        return True

    def preallocate_more_memory(self):
        """Nothing to do: nodes are created by ``set`` and ``ensure``."""