import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from models.stock_movement import MovementType
from utils.stock_rules import apply_movement


def test_in_adds_quantity():
    assert apply_movement(10, MovementType.IN, 5) == 15


def test_out_is_floored_at_zero():
    assert apply_movement(3, MovementType.OUT, 10) == 0
    assert apply_movement(10, MovementType.OUT, 4) == 6


def test_adjust_sets_absolute_level():
    assert apply_movement(3, MovementType.ADJUST, 20) == 20
    assert apply_movement(42, MovementType.ADJUST, 0) == 0


def test_accepts_wire_values():
    assert apply_movement(1, "IN", 1) == 2
    assert apply_movement(1, "ADJUST", 7) == 7


def test_result_is_never_negative():
    for current in (0, 1, 5, 100):
        for movement_type in MovementType:
            for quantity in (0, 1, 5, 1000):
                assert apply_movement(current, movement_type, quantity) >= 0


def test_negative_quantity_is_rejected():
    with pytest.raises(ValueError):
        apply_movement(5, MovementType.IN, -1)
