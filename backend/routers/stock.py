from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import app_config as crud_app_config
from exceptions import RemoteOperationError, ValidationFailure
from schemas.stock import StockLevel, StockMovementCreate, StockMovementOut, StockPrediction
from services.stock_ledger import StockLedger, DEFAULT_AVG_DAILY_CONSUMPTION
from utils.request_context import get_user_id

router = APIRouter(prefix="/stock", tags=["Stock"])
logger = logging.getLogger("stock")


def get_stock_ledger(db: Session = Depends(get_db)) -> StockLedger:
    threshold, policy = crud_app_config.get_stock_status_settings(db)
    return StockLedger(db, threshold=threshold, policy=policy)


@router.get("/{link_id}", response_model=StockLevel)
def read_stock_level(link_id: str, ledger: StockLedger = Depends(get_stock_ledger)):
    """Current rolls on hand for a link, with its status."""
    try:
        return ledger.get_stock_level(link_id)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/{link_id}/movements", response_model=List[StockMovementOut])
def read_stock_movements(
    link_id: str,
    limit: int = Query(100, ge=1, le=1000),
    ledger: StockLedger = Depends(get_stock_ledger),
):
    try:
        return ledger.list_movements(link_id, limit=limit)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/{link_id}/prediction", response_model=StockPrediction)
def read_stock_prediction(
    link_id: str,
    target_days: float = Query(30, ge=0),
    avg_daily_consumption: float = Query(DEFAULT_AVG_DAILY_CONSUMPTION, ge=0),
    ledger: StockLedger = Depends(get_stock_ledger),
):
    """Days until the link runs out and how many rolls to buy to cover `target_days`."""
    try:
        return ledger.predict(link_id, target_days, avg_daily_consumption)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/movements", response_model=StockMovementOut, status_code=status.HTTP_201_CREATED)
def create_stock_movement(
    movement: StockMovementCreate,
    ledger: StockLedger = Depends(get_stock_ledger),
    user_id: Optional[str] = Depends(get_user_id),
):
    """Register an IN, OUT or ADJUST movement for a link."""
    acting_user = user_id or movement.user_id
    try:
        return ledger.register_movement(movement.link_id, movement.type, movement.quantity, user_id=acting_user)
    except ValidationFailure as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/{link_id}/zero", response_model=StockMovementOut)
def zero_stock(
    link_id: str,
    ledger: StockLedger = Depends(get_stock_ledger),
    user_id: Optional[str] = Depends(get_user_id),
):
    try:
        movement = ledger.zero_stock(link_id, user_id=user_id)
    except ValidationFailure as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    logger.info(f"Stock of link {link_id} zeroed by {user_id or 'unknown user'}")
    return movement
