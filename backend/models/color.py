import uuid

from sqlalchemy import Column, String, Float
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class Color(Base, TimestampMixin):
    __tablename__ = "colors"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, index=True)
    sku = Column(String, nullable=False, unique=True, index=True)
    hex = Column(String(9), nullable=True)  # "#RRGGBB"
    # Perceptual CIE Lab coordinates, filled in by colorimeter readings
    lab_l = Column(Float, nullable=True)
    lab_a = Column(Float, nullable=True)
    lab_b = Column(Float, nullable=True)
    family = Column(String, nullable=True)  # e.g. "Verdes", "Neutros"

    links = relationship("Link", back_populates="color")
