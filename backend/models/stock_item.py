import uuid

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
from utils.time_utils import now_local


class StockItem(Base):
    __tablename__ = "stock_items"
    __table_args__ = (CheckConstraint('quantity_rolls >= 0', name='ck_stock_items_quantity_non_negative'),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    link_id = Column(String(36), ForeignKey("links.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    quantity_rolls = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=now_local, onupdate=now_local)

    link = relationship("Link", back_populates="stock_item")
