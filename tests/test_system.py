import pytest

from spanpool.sizeclass import PAGE_SHIFT, PAGE_SIZE
from spanpool.system import AddressSpace, system_alloc, system_free


def test_alloc_is_page_aligned_and_nonzero():
    space = AddressSpace()
    ptr = space.alloc(3)
    assert ptr > 0
    assert ptr % PAGE_SIZE == 0
    assert space.pages_in_use == 3


def test_allocations_do_not_overlap():
    space = AddressSpace()
    ranges = []
    for k in (1, 5, 2, 128, 7):
        ptr = space.alloc(k)
        ranges.append((ptr >> PAGE_SHIFT, (ptr >> PAGE_SHIFT) + k))
    ranges.sort()
    for (_, end), (start, _) in zip(ranges, ranges[1:]):
        assert end <= start


def test_freed_range_is_reused_first_fit():
    space = AddressSpace()
    a = space.alloc(4)
    space.alloc(4)
    space.free(a)
    assert space.alloc(2) == a
    assert space.alloc(2) == a + 2 * PAGE_SIZE


def test_adjacent_holes_merge():
    space = AddressSpace()
    a = space.alloc(4)
    b = space.alloc(4)
    space.alloc(1)
    space.free(a)
    space.free(b)
    assert space.alloc(8) == a


def test_free_all_returns_to_start():
    space = AddressSpace()
    ptrs = [space.alloc(k) for k in (3, 1, 9, 2)]
    first = ptrs[0]
    for ptr in reversed(ptrs):
        space.free(ptr)
    assert space.pages_in_use == 0
    assert space.alloc(15) == first


def test_limit_raises_memory_error():
    space = AddressSpace(page_limit=16)
    ptr = space.alloc(15)
    with pytest.raises(MemoryError):
        space.alloc(1)
    space.free(ptr)
    assert space.alloc(1) == ptr


@pytest.mark.parametrize("kpage", [0, -2])
def test_alloc_rejects_non_positive(kpage):
    with pytest.raises(ValueError):
        AddressSpace().alloc(kpage)


def test_free_rejects_unknown_and_misaligned():
    space = AddressSpace()
    ptr = space.alloc(2)
    with pytest.raises(ValueError):
        space.free(ptr + 8)
    with pytest.raises(ValueError):
        space.free(ptr + PAGE_SIZE)
    space.free(ptr)
    with pytest.raises(ValueError):
        space.free(ptr)


def test_default_space_functions():
    ptr = system_alloc(2)
    assert ptr % PAGE_SIZE == 0
    system_free(ptr)
    with pytest.raises(ValueError):
        system_free(ptr)