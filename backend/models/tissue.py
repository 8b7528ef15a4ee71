import uuid

from sqlalchemy import Column, String, Numeric, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class Tissue(Base, TimestampMixin):
    __tablename__ = "tissues"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, index=True)
    sku = Column(String, nullable=False, unique=True, index=True)
    width = Column(Numeric(8, 2), nullable=False)  # cm
    composition = Column(Text, nullable=True)  # e.g. "100% Algodão"

    links = relationship("Link", back_populates="tissue")
