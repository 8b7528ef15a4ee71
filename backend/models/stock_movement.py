import enum
import uuid

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
from utils.time_utils import now_local


class MovementType(str, enum.Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"


class StockMovement(Base):
    """Append-only log entry. Rows are never updated or deleted."""
    __tablename__ = "stock_movements"
    __table_args__ = (CheckConstraint('quantity >= 0', name='ck_stock_movements_quantity_non_negative'),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    link_id = Column(String(36), ForeignKey("links.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(MovementType, native_enum=False, length=8), nullable=False)
    quantity = Column(Integer, nullable=False)
    old_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    user_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_local, nullable=False, index=True)

    link = relationship("Link", back_populates="movements")
