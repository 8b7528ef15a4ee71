import enum
import uuid

from sqlalchemy import Column, String, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class LinkStatus(str, enum.Enum):
    ACTIVE = "Ativo"
    INACTIVE = "Inativo"


class Link(Base, TimestampMixin):
    """A tissue/color pairing: the sellable, stockable SKU."""
    __tablename__ = "links"
    __table_args__ = (UniqueConstraint('tissue_id', 'color_id', name='_links_tissue_color_uc'),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tissue_id = Column(String(36), ForeignKey("tissues.id", ondelete="CASCADE"), nullable=False, index=True)
    color_id = Column(String(36), ForeignKey("colors.id", ondelete="CASCADE"), nullable=False, index=True)
    sku_filho = Column(String, nullable=False, index=True)  # child SKU, e.g. "T002-VD001"
    image_path = Column(String, nullable=True)  # storage key or absolute URL
    status = Column(
        Enum(LinkStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=16),
        nullable=False,
        default=LinkStatus.ACTIVE,
    )

    tissue = relationship("Tissue", back_populates="links")
    color = relationship("Color", back_populates="links")
    stock_item = relationship("StockItem", back_populates="link", uselist=False)
    movements = relationship("StockMovement", back_populates="link")
