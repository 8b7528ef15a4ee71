import os
import sys

import pytest
from sqlalchemy.exc import OperationalError

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from crud import stock as crud_stock
from exceptions import RemoteOperationError, ValidationFailure
from models.stock_movement import MovementType, StockMovement
from schemas.stock import StockStatus, StockStatusPolicy
from services import stock_cache
from services.stock_ledger import StockLedger


@pytest.fixture
def link_id(canelado):
    return canelado.links[0].id


@pytest.fixture
def ledger(db):
    return StockLedger(db)


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (0, StockStatus.CRITICAL),
        (5, StockStatus.CRITICAL),
        (6, StockStatus.WARNING),
        (7, StockStatus.WARNING),
        (10, StockStatus.WARNING),
        (11, StockStatus.SAFE),
        (12, StockStatus.SAFE),
    ],
)
def test_threshold_status(quantity, expected):
    assert StockLedger.calculate_status(quantity, 5) == expected


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (0, StockStatus.CRITICAL),
        (1, StockStatus.WARNING),
        (5, StockStatus.WARNING),
        (6, StockStatus.SAFE),
    ],
)
def test_zero_based_status(quantity, expected):
    assert StockLedger.calculate_status(quantity, 5, StockStatusPolicy.ZERO_BASED) == expected


def test_status_severity_never_increases_with_quantity():
    severity = {StockStatus.CRITICAL: 2, StockStatus.WARNING: 1, StockStatus.SAFE: 0}
    levels = [severity[StockLedger.calculate_status(q, 5)] for q in range(0, 30)]
    assert levels == sorted(levels, reverse=True)


def test_suggested_buy():
    assert StockLedger.calculate_suggested_buy(2, 10, 0.5) == 3
    assert StockLedger.calculate_suggested_buy(6, 10, 0.5) == 0
    assert StockLedger.calculate_suggested_buy(5, 10, 0.5) == 0
    assert StockLedger.calculate_suggested_buy(0, 3, 0.5) == 2


def test_level_of_link_without_stock_is_zero(ledger, link_id):
    assert ledger.get_level(link_id) == 0


def test_register_movements_update_level_and_log(ledger, db, link_id):
    ledger.register_in(link_id, 10, user_id="ana")
    ledger.register_out(link_id, 3, user_id="ana")
    movement = ledger.register_movement(link_id, MovementType.OUT, 50)

    assert movement.old_quantity == 7
    assert movement.new_quantity == 0
    assert ledger.get_level(link_id) == 0
    assert db.query(StockMovement).filter(StockMovement.link_id == link_id).count() == 3


def test_adjust_sets_level(ledger, link_id):
    ledger.register_in(link_id, 4)
    ledger.register_movement(link_id, MovementType.ADJUST, 20)

    assert ledger.get_level(link_id) == 20


def test_zero_stock_with_stock_registers_one_out(ledger, db, link_id):
    ledger.register_in(link_id, 8)

    movement = ledger.zero_stock(link_id)

    assert movement.type == MovementType.OUT
    assert movement.quantity == 8
    assert ledger.get_level(link_id) == 0


def test_zero_stock_without_stock_registers_adjust(ledger, link_id):
    movement = ledger.zero_stock(link_id)

    assert movement.type == MovementType.ADJUST
    assert movement.quantity == 0
    assert ledger.get_level(link_id) == 0


def test_unknown_link_is_a_validation_failure(ledger):
    with pytest.raises(ValidationFailure):
        ledger.register_in("does-not-exist", 1)


@pytest.mark.parametrize("quantity", [-1, 1.5, "3", True])
def test_invalid_quantity_is_rejected(ledger, link_id, quantity):
    with pytest.raises(ValidationFailure):
        ledger.register_movement(link_id, MovementType.IN, quantity)


def test_successful_movement_invalidates_cache(ledger, link_id):
    received = []
    stock_cache.subscribe(received.append)
    ledger.get_level(link_id)

    ledger.register_in(link_id, 2)

    assert stock_cache.stock_key(link_id) in received
    assert stock_cache.ALL_STOCK_KEY in received
    assert stock_cache.get_cached_level(link_id) == 2


def test_store_failure_is_remote_error_and_keeps_cached_level(ledger, link_id, monkeypatch):
    ledger.register_in(link_id, 5)
    assert stock_cache.get_cached_level(link_id) == 5

    def failing_apply(*args, **kwargs):
        raise OperationalError("UPDATE stock_items", {}, Exception("connection lost"))

    monkeypatch.setattr(crud_stock, "apply_stock_movement", failing_apply)

    with pytest.raises(RemoteOperationError) as exc_info:
        ledger.register_out(link_id, 2)

    assert "connection lost" in str(exc_info.value)
    assert stock_cache.get_cached_level(link_id) == 5


def test_predict(ledger, link_id):
    ledger.register_in(link_id, 2)

    prediction = ledger.predict(link_id, target_days=10, avg_daily_consumption=0.5)

    assert prediction.quantity == 2
    assert prediction.status == StockStatus.CRITICAL
    assert prediction.days_until_stockout == 4.0
    assert prediction.suggested_restock == 3


def test_list_movements_returns_log(ledger, link_id):
    ledger.register_in(link_id, 2)
    ledger.register_in(link_id, 3)

    movements = ledger.list_movements(link_id)

    assert len(movements) == 2
    assert {m.new_quantity for m in movements} == {2, 5}
