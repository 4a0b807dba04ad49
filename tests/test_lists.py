import pytest

from spanpool.lists import FreeList, Span, SpanList
from spanpool.sizeclass import PAGE_SIZE


def test_free_list_is_lifo():
    fl = FreeList()
    for obj in (10, 20, 30):
        fl.push(obj)
    assert len(fl) == 3
    assert [fl.pop() for _ in range(3)] == [30, 20, 10]
    assert fl.is_empty()


def test_free_list_default_max_size():
    fl = FreeList()
    assert fl.max_size == 1
    fl.max_size += 1
    assert fl.max_size == 2


def test_free_list_push_range_keeps_order_at_head():
    fl = FreeList()
    fl.push(99)
    fl.push_range([1, 2, 3])
    assert len(fl) == 4
    assert fl.pop_range(4) == [1, 2, 3, 99]


def test_free_list_pop_range_partial():
    fl = FreeList()
    fl.push_range([5, 6, 7, 8])
    assert fl.pop_range(2) == [5, 6]
    assert len(fl) == 2
    assert fl.pop() == 7


@pytest.mark.parametrize("n", [0, 4])
def test_free_list_pop_range_rejects_bad_count(n):
    fl = FreeList()
    fl.push_range([1, 2, 3])
    with pytest.raises(ValueError):
        fl.pop_range(n)
    assert len(fl) == 3


def test_free_list_errors():
    fl = FreeList()
    with pytest.raises(IndexError):
        fl.pop()
    with pytest.raises(ValueError):
        fl.push(0)
    with pytest.raises(ValueError):
        fl.push(None)


def test_span_defaults_and_address():
    span = Span(page_id=3, n=2)
    assert span.address == 3 * PAGE_SIZE
    assert span.nbytes == 2 * PAGE_SIZE
    assert span.use_count == 0
    assert not span.is_use
    assert len(span.free_list) == 0


def test_span_identity_equality():
    a = Span(page_id=1)
    b = Span(page_id=1)
    assert (a == b) is False
    spans = SpanList()
    spans.push_front(a)
    spans.push_front(b)
    spans.erase(a)
    remaining = list(spans)
    assert len(remaining) == 1
    assert remaining[0] is b


def test_span_list_push_front_order():
    spans = SpanList()
    a, b, c = Span(page_id=1), Span(page_id=2), Span(page_id=3)
    for s in (a, b, c):
        spans.push_front(s)
    assert list(spans) == [c, b, a]
    assert len(spans) == 3
    assert not spans.is_empty()


def test_span_list_pop_front():
    spans = SpanList()
    a, b = Span(), Span()
    spans.push_front(a)
    spans.push_front(b)
    assert spans.pop_front() is b
    assert spans.pop_front() is a
    assert spans.is_empty()
    with pytest.raises(IndexError):
        spans.pop_front()


def test_span_list_insert_before_position():
    spans = SpanList()
    a, b, c = Span(), Span(), Span()
    spans.push_front(a)
    spans.push_front(c)
    spans.insert(a, b)
    assert list(spans) == [c, b, a]


def test_span_list_erase_middle_and_unlinked():
    spans = SpanList()
    a, b, c = Span(), Span(), Span()
    for s in (a, b, c):
        spans.push_front(s)
    spans.erase(b)
    assert list(spans) == [c, a]
    assert b.prev is None and b.next is None
    with pytest.raises(ValueError):
        spans.erase(b)


def test_span_list_iteration_tolerates_erase():
    spans = SpanList()
    items = [Span(page_id=i) for i in range(5)]
    for s in items:
        spans.push_front(s)
    for s in spans:
        if s.page_id % 2 == 0:
            spans.erase(s)
    assert [s.page_id for s in spans] == [3, 1]


def test_span_list_has_lock():
    spans = SpanList()
    with spans.lock:
        assert spans.lock.locked()
    assert not spans.lock.locked()