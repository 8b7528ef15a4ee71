import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from models.app_config import AppConfig
from schemas.app_config import AppConfigCreate, AppConfigUpdate
from schemas.documents import PdfGenerationConfig
from schemas.stock import StockStatusPolicy
from utils.time_utils import now_local

# Audit imports
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict

logger = logging.getLogger(__name__)

PDF_CONFIG_KEYS = {
    "pdf_max_image_dimension": "max_image_dimension",
    "pdf_image_quality": "image_quality",
    "pdf_max_images_per_page": "max_images_per_page",
    "pdf_max_total_images": "max_total_images",
}

DEFAULT_STOCK_STATUS_THRESHOLD = 5

DEFAULT_CONFIGS = [
    {"name": "pdf_max_image_dimension", "value": "400"},
    {"name": "pdf_image_quality", "value": "0.6"},
    {"name": "pdf_max_images_per_page", "value": "9"},
    {"name": "pdf_max_total_images", "value": "30"},
    {"name": "stock_status_threshold", "value": str(DEFAULT_STOCK_STATUS_THRESHOLD)},
    {"name": "stock_status_policy", "value": StockStatusPolicy.THRESHOLD.value},
]


def _audit(db: Session, db_config: AppConfig, user_id: Optional[str], action: str, old_values: dict):
    try:
        log_entry = AuditLogCreate(
            table_name='app_config',
            record_id=str(db_config.id),
            changed_by=user_id,
            action=action,
            old_values=old_values,
            new_values=sqlalchemy_to_dict(db_config),
        )
        create_audit_log(db, log_entry)
    except Exception:
        db.rollback()
        logger.exception(f"Failed to write audit log for app_config '{db_config.name}'")


# Create a new config entry
def create_config(db: Session, config: AppConfigCreate, user_id: Optional[str] = None):
    db_config = AppConfig(name=config.name, value=config.value, created_by=user_id)
    db.add(db_config)
    db.commit()
    db.refresh(db_config)
    _audit(db, db_config, user_id, 'CREATE', {})
    return db_config


# Get config by name (or all configs)
def get_config(db: Session, name: str = None):
    if name:
        return db.query(AppConfig).filter(AppConfig.name == name).first()
    return db.query(AppConfig).order_by(AppConfig.name).all()


# Update config by name
def update_config_by_name(db: Session, name: str, config: AppConfigUpdate, user_id: Optional[str] = None):
    db_config = db.query(AppConfig).filter(AppConfig.name == name).first()
    if not db_config:
        return None

    old_values = sqlalchemy_to_dict(db_config)
    for field, value in config.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(db_config, field, value)
    db_config.updated_at = now_local()
    db_config.updated_by = user_id
    db.commit()
    db.refresh(db_config)
    _audit(db, db_config, user_id, 'UPDATE', old_values)
    return db_config


def initialize_default_configs(db: Session, user_id: Optional[str] = None) -> list:
    """Create the missing default entries. Existing values are never overwritten."""
    existing_names = {name for (name,) in db.query(AppConfig.name)}
    created = []
    for config_data in DEFAULT_CONFIGS:
        if config_data["name"] not in existing_names:
            create_config(db, AppConfigCreate(**config_data), user_id=user_id)
            created.append(config_data["name"])
    return created


def get_pdf_config(db: Session) -> PdfGenerationConfig:
    """Build the document assembler config from stored overrides, falling back to defaults."""
    rows = db.query(AppConfig).filter(AppConfig.name.in_(PDF_CONFIG_KEYS.keys())).all()
    overrides = {PDF_CONFIG_KEYS[row.name]: row.value for row in rows}
    try:
        return PdfGenerationConfig(**overrides)
    except ValidationError:
        logger.warning(f"Invalid PDF configuration in app_config ({overrides}); using defaults")
        return PdfGenerationConfig()


def get_stock_status_settings(db: Session) -> tuple:
    """Return (threshold, policy) for the stock status classifier."""
    threshold_row = get_config(db, name="stock_status_threshold")
    policy_row = get_config(db, name="stock_status_policy")

    threshold = DEFAULT_STOCK_STATUS_THRESHOLD
    if threshold_row:
        try:
            threshold = int(threshold_row.value)
        except ValueError:
            logger.warning(f"Invalid stock_status_threshold '{threshold_row.value}'; using {threshold}")

    policy = StockStatusPolicy.THRESHOLD
    if policy_row:
        try:
            policy = StockStatusPolicy(policy_row.value)
        except ValueError:
            logger.warning(f"Invalid stock_status_policy '{policy_row.value}'; using {policy.value}")

    return threshold, policy
