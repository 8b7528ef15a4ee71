import logging
from typing import Optional

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from models.link import Link
from models.stock_item import StockItem
from models.stock_movement import StockMovement, MovementType
from utils.stock_rules import apply_movement

logger = logging.getLogger(__name__)


def get_stock_item(db: Session, link_id: str) -> Optional[StockItem]:
    return db.query(StockItem).filter(StockItem.link_id == link_id).first()


def get_stock_movements(db: Session, link_id: str, limit: int = 100):
    return (
        db.query(StockMovement)
        .filter(StockMovement.link_id == link_id)
        .order_by(StockMovement.created_at.desc())
        .limit(limit)
        .all()
    )


_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _ensure_stock_item(db: Session, link_id: str) -> None:
    """Create the link's stock row at zero unless it already exists, without raising on a concurrent insert."""
    insert_for_dialect = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert_for_dialect is None:
        if get_stock_item(db, link_id) is None:
            db.add(StockItem(link_id=link_id, quantity_rolls=0))
            db.flush()
        return
    statement = (
        insert_for_dialect(StockItem)
        .values(link_id=link_id, quantity_rolls=0)
        .on_conflict_do_nothing(index_elements=[StockItem.link_id])
    )
    db.execute(statement)


def apply_stock_movement(
    db: Session,
    link_id: str,
    movement_type: MovementType,
    quantity: int,
    user_id: Optional[str] = None,
) -> StockMovement:
    """
    Atomically apply one movement to a link's stock.

    Reads the current quantity under a row lock, computes the next quantity with
    the transition rule, and persists both the new quantity and the movement log
    row in a single transaction. Any failure rolls the whole thing back.

    Args:
        db: The database session.
        link_id: The link whose stock moves.
        movement_type: IN, OUT or ADJUST.
        quantity: Non-negative movement quantity (absolute level for ADJUST).
        user_id: Acting user, if known.

    Returns:
        The persisted StockMovement.
    """
    movement_type = MovementType(movement_type)
    try:
        link_exists = db.query(Link.id).filter(Link.id == link_id).first()
        if not link_exists:
            raise LookupError(f"Link {link_id} not found")

        _ensure_stock_item(db, link_id)
        stock_item = (
            db.query(StockItem)
            .filter(StockItem.link_id == link_id)
            .with_for_update()
            .populate_existing()
            .one()
        )

        old_quantity = stock_item.quantity_rolls or 0
        new_quantity = apply_movement(old_quantity, movement_type, quantity)
        stock_item.quantity_rolls = new_quantity

        movement = StockMovement(
            link_id=link_id,
            type=movement_type,
            quantity=quantity,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            user_id=user_id,
        )
        db.add(movement)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(movement)
    logger.debug(f"Applied {movement_type.value} {quantity} to link {link_id}: {old_quantity} -> {new_quantity}")
    return movement
