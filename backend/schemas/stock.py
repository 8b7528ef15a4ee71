from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.stock_movement import MovementType


class StockStatus(str, Enum):
    SAFE = "SAFE"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class StockStatusPolicy(str, Enum):
    # quantity <= T is CRITICAL, <= 2T is WARNING
    THRESHOLD = "threshold"
    # 0 is CRITICAL, <= T is WARNING
    ZERO_BASED = "zero_based"


class StockMovementCreate(BaseModel):
    """Wire shape of a movement request: {link_id, type, quantity, user_id}."""
    link_id: str
    type: MovementType
    quantity: int = Field(..., ge=0)
    user_id: Optional[str] = None

    @field_validator("link_id")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("link_id is required")
        return v


class StockMovementOut(BaseModel):
    id: str
    link_id: str
    type: MovementType
    quantity: int
    old_quantity: int
    new_quantity: int
    user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StockLevel(BaseModel):
    link_id: str
    quantity: int
    status: StockStatus


class StockPrediction(BaseModel):
    link_id: str
    quantity: int
    status: StockStatus
    days_until_stockout: Optional[float] = None
    suggested_restock: int
