from models.tissue import Tissue
from models.color import Color
from models.link import Link, LinkStatus
from models.stock_item import StockItem
from models.stock_movement import StockMovement, MovementType
from models.app_config import AppConfig
from models.audit_log import AuditLog

__all__ = ['AppConfig', 'AuditLog', 'Color', 'Link', 'LinkStatus', 'MovementType', 'StockItem', 'StockMovement', 'Tissue',]
