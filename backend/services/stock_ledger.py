import logging
import math
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crud import stock as crud_stock
from exceptions import RemoteOperationError, ValidationFailure
from models.stock_movement import MovementType, StockMovement
from schemas.stock import StockLevel, StockPrediction, StockStatus, StockStatusPolicy
from services import stock_cache
from utils.stock_rules import apply_movement

logger = logging.getLogger(__name__)

DEFAULT_STATUS_THRESHOLD = 5
DEFAULT_AVG_DAILY_CONSUMPTION = 0.5


def _store_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class StockLedger:
    """
    Business rules for stock levels of links.

    Writes always go through the store's atomic apply operation; the ledger
    never reads a level and writes back a computed one. There are no retries:
    a failed call raises and the caller decides what to do.
    """

    def __init__(
        self,
        db: Session,
        threshold: int = DEFAULT_STATUS_THRESHOLD,
        policy: StockStatusPolicy = StockStatusPolicy.THRESHOLD,
    ):
        self.db = db
        self.threshold = threshold
        self.policy = policy

    @staticmethod
    def calculate_status(
        quantity: int,
        threshold: int = DEFAULT_STATUS_THRESHOLD,
        policy: StockStatusPolicy = StockStatusPolicy.THRESHOLD,
    ) -> StockStatus:
        """
        Classify a stock level.

        THRESHOLD: quantity <= T is CRITICAL, <= 2T is WARNING, otherwise SAFE.
        ZERO_BASED: 0 is CRITICAL, <= T is WARNING, otherwise SAFE.
        """
        if StockStatusPolicy(policy) == StockStatusPolicy.ZERO_BASED:
            if quantity <= 0:
                return StockStatus.CRITICAL
            if quantity <= threshold:
                return StockStatus.WARNING
            return StockStatus.SAFE

        if quantity <= threshold:
            return StockStatus.CRITICAL
        if quantity <= threshold * 2:
            return StockStatus.WARNING
        return StockStatus.SAFE

    @staticmethod
    def calculate_suggested_buy(
        current: int,
        target_days: float,
        avg_daily_consumption: float = DEFAULT_AVG_DAILY_CONSUMPTION,
    ) -> int:
        """Rolls to buy so that `current` covers `target_days` of consumption."""
        target = target_days * avg_daily_consumption
        if current < target:
            return math.ceil(target - current)
        return 0

    def status_of(self, quantity: int) -> StockStatus:
        return self.calculate_status(quantity, self.threshold, self.policy)

    def get_level(self, link_id: str) -> int:
        """Current rolls on hand. A link that never had stock is at 0."""
        try:
            stock_item = crud_stock.get_stock_item(self.db, link_id)
        except SQLAlchemyError as e:
            raise RemoteOperationError(_store_message(e)) from e

        quantity = stock_item.quantity_rolls if stock_item and stock_item.quantity_rolls else 0
        stock_cache.set_cached_level(link_id, quantity)
        return quantity

    def get_stock_level(self, link_id: str) -> StockLevel:
        quantity = self.get_level(link_id)
        return StockLevel(link_id=link_id, quantity=quantity, status=self.status_of(quantity))

    def register_movement(
        self,
        link_id: str,
        movement_type: MovementType,
        quantity: int,
        user_id: Optional[str] = None,
    ) -> StockMovement:
        """
        Submit one movement to the store's atomic apply operation.

        Raises:
            ValidationFailure: unknown link or invalid quantity.
            RemoteOperationError: the store failed; carries the store's message.
        """
        movement_type = MovementType(movement_type)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise ValidationFailure(f"Quantity must be a non-negative integer, got {quantity!r}")

        cached = stock_cache.get_cached_level(link_id)
        predicted = apply_movement(cached, movement_type, quantity) if cached is not None else None

        with stock_cache.optimistic(link_id, predicted):
            try:
                movement = crud_stock.apply_stock_movement(
                    self.db, link_id, movement_type, quantity, user_id=user_id
                )
            except LookupError as e:
                raise ValidationFailure(str(e)) from e
            except SQLAlchemyError as e:
                message = _store_message(e)
                logger.error(f"Stock movement {movement_type.value} {quantity} for link {link_id} failed: {message}")
                raise RemoteOperationError(message) from e

        stock_cache.invalidate(link_id)
        stock_cache.set_cached_level(link_id, movement.new_quantity)
        logger.info(
            f"Stock movement {movement_type.value} {quantity} registered for link {link_id} "
            f"by {user_id or 'unknown user'}: {movement.old_quantity} -> {movement.new_quantity}"
        )
        return movement

    def register_in(self, link_id: str, quantity: int, user_id: Optional[str] = None) -> StockMovement:
        return self.register_movement(link_id, MovementType.IN, quantity, user_id=user_id)

    def register_out(self, link_id: str, quantity: int, user_id: Optional[str] = None) -> StockMovement:
        return self.register_movement(link_id, MovementType.OUT, quantity, user_id=user_id)

    def zero_stock(self, link_id: str, user_id: Optional[str] = None) -> StockMovement:
        """
        Bring a link's stock to zero while leaving a meaningful log entry:
        an OUT of everything on hand, or an ADJUST to 0 when nothing is left.
        """
        current = self.get_level(link_id)
        if current > 0:
            return self.register_movement(link_id, MovementType.OUT, current, user_id=user_id)
        return self.register_movement(link_id, MovementType.ADJUST, 0, user_id=user_id)

    def list_movements(self, link_id: str, limit: int = 100) -> List[StockMovement]:
        try:
            return crud_stock.get_stock_movements(self.db, link_id, limit=limit)
        except SQLAlchemyError as e:
            raise RemoteOperationError(_store_message(e)) from e

    def predict(
        self,
        link_id: str,
        target_days: float,
        avg_daily_consumption: float = DEFAULT_AVG_DAILY_CONSUMPTION,
    ) -> StockPrediction:
        quantity = self.get_level(link_id)
        days_until_stockout = None
        if avg_daily_consumption > 0:
            days_until_stockout = round(quantity / avg_daily_consumption, 1)
        return StockPrediction(
            link_id=link_id,
            quantity=quantity,
            status=self.status_of(quantity),
            days_until_stockout=days_until_stockout,
            suggested_restock=self.calculate_suggested_buy(quantity, target_days, avg_daily_consumption),
        )
