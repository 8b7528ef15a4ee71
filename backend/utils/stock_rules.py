"""Transition rule for stock movements.

The rule is applied only inside the atomic store operation
(crud.stock.apply_stock_movement); callers never compute a new level themselves.
"""
from models.stock_movement import MovementType


def apply_in(current: int, quantity: int) -> int:
    return current + quantity


def apply_out(current: int, quantity: int) -> int:
    return max(0, current - quantity)


def apply_adjust(current: int, quantity: int) -> int:
    # ADJUST sets the absolute level; the current value is irrelevant.
    return max(0, quantity)


_RULES = {
    MovementType.IN: apply_in,
    MovementType.OUT: apply_out,
    MovementType.ADJUST: apply_adjust,
}


def apply_movement(current: int, movement_type, quantity: int) -> int:
    """Return the new on-hand quantity after applying one movement."""
    if quantity < 0:
        raise ValueError(f"Movement quantity must be >= 0, got {quantity}")
    return _RULES[MovementType(movement_type)](current, quantity)
