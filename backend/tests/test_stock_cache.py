import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from services import stock_cache


def test_invalidate_notifies_link_and_all_stock_keys():
    received = []
    stock_cache.subscribe(received.append)
    stock_cache.set_cached_level("abc", 4)

    stock_cache.invalidate("abc")

    assert received == [stock_cache.stock_key("abc"), stock_cache.ALL_STOCK_KEY]
    assert stock_cache.get_cached_level("abc") is None


def test_unsubscribe_stops_notifications():
    received = []
    unsubscribe = stock_cache.subscribe(received.append)
    unsubscribe()

    stock_cache.invalidate("abc")

    assert received == []


def test_failing_subscriber_does_not_block_others():
    received = []

    def broken(key):
        raise RuntimeError("boom")

    stock_cache.subscribe(broken)
    stock_cache.subscribe(received.append)

    stock_cache.invalidate("abc")

    assert len(received) == 2


def test_optimistic_patch_is_kept_on_success():
    stock_cache.set_cached_level("abc", 4)

    with stock_cache.optimistic("abc", 9):
        assert stock_cache.get_cached_level("abc") == 9

    assert stock_cache.get_cached_level("abc") == 9


def test_optimistic_patch_is_undone_on_failure():
    stock_cache.set_cached_level("abc", 4)

    with pytest.raises(RuntimeError):
        with stock_cache.optimistic("abc", 9):
            raise RuntimeError("remote failed")

    assert stock_cache.get_cached_level("abc") == 4


def test_undo_removes_value_that_was_not_cached_before():
    with pytest.raises(RuntimeError):
        with stock_cache.optimistic("new", 3):
            raise RuntimeError("remote failed")

    assert stock_cache.get_cached_level("new") is None


def test_patch_without_value_is_a_no_op():
    with stock_cache.optimistic("abc", None) as patch:
        assert patch.applied is False
    assert stock_cache.get_cached_level("abc") is None
