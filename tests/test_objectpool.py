import pytest

from spanpool.lists import Span
from spanpool.objectpool import ObjectPool


def test_new_returns_fresh_instances():
    pool = ObjectPool(Span)
    a = pool.new()
    b = pool.new()
    assert isinstance(a, Span)
    assert a is not b
    assert pool.created == 2


def test_deleted_object_is_reused_and_reset():
    pool = ObjectPool(Span)
    span = pool.new()
    span.page_id = 42
    span.use_count = 7
    span.is_use = True
    pool.delete(span)
    assert len(pool) == 1
    again = pool.new()
    assert again is span
    assert again.page_id == 0
    assert again.use_count == 0
    assert not again.is_use
    assert len(pool) == 0
    assert pool.created == 1


def test_reuse_is_lifo():
    pool = ObjectPool(Span)
    a, b = pool.new(), pool.new()
    pool.delete(a)
    pool.delete(b)
    assert pool.new() is b
    assert pool.new() is a


def test_double_delete_rejected():
    pool = ObjectPool(Span)
    span = pool.new()
    pool.delete(span)
    with pytest.raises(ValueError):
        pool.delete(span)
    assert len(pool) == 1


def test_many_cycles_do_not_grow():
    pool = ObjectPool(Span)
    for _ in range(3):
        objs = [pool.new() for _ in range(50)]
        for obj in objs:
            pool.delete(obj)
    assert pool.created == 50
    assert len(pool) == 50