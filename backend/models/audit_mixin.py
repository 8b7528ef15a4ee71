from sqlalchemy import Column, DateTime, String
from utils.time_utils import now_local


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Catalog records (tissues, colors, links) and configuration entries use it.
    The stock movement log does not: its rows are immutable and carry their own
    creation timestamp and acting user.
    """
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=now_local)
    updated_at = Column(DateTime(timezone=True), onupdate=now_local)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
