from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.app_config import AppConfigCreate, AppConfigUpdate, AppConfigOut
from schemas.audit_log import AuditLogOut
from crud import app_config as crud_app_config
from crud import audit_log as crud_audit_log
from utils.request_context import get_user_id

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/configurations/", response_model=AppConfigOut)
def create_config(config: AppConfigCreate, db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_user_id)):
    if crud_app_config.get_config(db, name=config.name):
        raise HTTPException(status_code=400, detail="Configuration already exists")
    return crud_app_config.create_config(db, config, user_id=user_id)


@router.get("/configurations/", response_model=List[AppConfigOut])
def get_configs(name: Optional[str] = None, db: Session = Depends(get_db)):
    configs = crud_app_config.get_config(db, name=name)
    # Always return a list, even if empty
    if name:
        return [configs] if configs else []
    return configs or []

@router.patch("/configurations/{name}/", response_model=AppConfigOut)
def update_config(name: str, config: AppConfigUpdate, db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_user_id)):
    updated = crud_app_config.update_config_by_name(db, name, config, user_id=user_id)
    if not updated:
        raise HTTPException(status_code=404, detail="Configuration not found")
    logger.info(f"Configuration '{name}' set to '{updated.value}' by {user_id or 'unknown user'}")
    return updated


@router.get("/configurations/{name}/history", response_model=List[AuditLogOut])
def get_config_history(name: str, db: Session = Depends(get_db)):
    """Audit trail of one configuration entry, newest first."""
    db_config = crud_app_config.get_config(db, name=name)
    if not db_config:
        raise HTTPException(status_code=404, detail="Configuration not found")
    return crud_audit_log.get_audit_logs(db, 'app_config', record_id=str(db_config.id))


@router.get("/configurations/initialized")
def are_configurations_initialized(db: Session = Depends(get_db)):
    """
    Checks if the default application configurations are initialized.
    """
    default_config_names = {config["name"] for config in crud_app_config.DEFAULT_CONFIGS}
    existing_config_names = {config.name for config in crud_app_config.get_config(db)}
    return {"configs_initialized": default_config_names.issubset(existing_config_names)}


@router.post("/configurations/initialize", status_code=status.HTTP_201_CREATED)
def initialize_configurations(db: Session = Depends(get_db), user_id: Optional[str] = Depends(get_user_id)):
    """
    Initializes the default set of application configurations.
    This is idempotent; it will not overwrite existing configurations.
    """
    new_configs_created = crud_app_config.initialize_default_configs(db, user_id=user_id)
    if not new_configs_created:
        return {"message": "All default configurations already exist."}

    logger.info(f"Initialized default configs by user {user_id or 'unknown user'}. New configs: {new_configs_created}")
    return {"message": "Successfully initialized default configurations.", "new_configs": new_configs_created}
