"""Size-class rules: alignment, bucket indices and batch sizes."""

MAX_BYTES = 256 * 1024
NFREELISTS = 208
NPAGES = 128
PAGE_SHIFT = 13
PAGE_SIZE = 1 << PAGE_SHIFT

# (upper bound of the range, alignment used inside it)
_ALIGNMENTS = (
    (128, 8),
    (1024, 16),
    (8 * 1024, 128),
    (64 * 1024, 1024),
    (256 * 1024, 8 * 1024),
)

# (upper bound of the range, alignment shift, number of buckets in it)
_INDEX_GROUPS = (
    (128, 3, 16),
    (1024, 4, 56),
    (8 * 1024, 7, 56),
    (64 * 1024, 10, 56),
    (256 * 1024, 13, 24),
)


def align_up(nbytes, align):
    """Round ``nbytes`` up to a multiple of ``align`` (a power of two)."""
    if align <= 0 or align & (align - 1):
        raise ValueError(f"alignment must be a positive power of two, got {align}")
    return (nbytes + align - 1) & ~(align - 1)


def round_up(size):
    """Return the size actually handed out for a request of ``size`` bytes."""
    for limit, align in _ALIGNMENTS:
        if size <= limit:
            return align_up(size, align)
    return align_up(size, PAGE_SIZE)


def _group_index(nbytes, shift):
    return ((nbytes + (1 << shift) - 1) >> shift) - 1


def index(nbytes):
    """Return the free-list bucket for a request of ``nbytes`` bytes."""
    if not 0 < nbytes <= MAX_BYTES:
        raise ValueError(f"size {nbytes} is outside the small-object range 1..{MAX_BYTES}")
    lower = 0
    offset = 0
    for limit, shift, count in _INDEX_GROUPS:
        if nbytes <= limit:
            return _group_index(nbytes - lower, shift) + offset
        lower = limit
        offset += count
    raise AssertionError("unreachable")


def num_move_size(size):
    """Upper bound on objects moved between caches in one batch, in [2, 512]."""
    if size <= 0:
        raise ValueError(f"object size must be positive, got {size}")
    return min(max(MAX_BYTES // size, 2), 512)


def num_move_page(size):
    """Number of pages to request from the page cache for objects of ``size``."""
    npage = (num_move_size(size) * size) >> PAGE_SHIFT
    return max(npage, 1)