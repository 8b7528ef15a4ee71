import enum
from decimal import Decimal

from sqlalchemy import inspect


def sqlalchemy_to_dict(obj):
    """JSON-ready snapshot of a mapped row, used for audit old/new values."""
    if obj is None:
        return None
    snapshot = {}
    for attr in inspect(obj).mapper.column_attrs:
        value = getattr(obj, attr.key)
        if isinstance(value, enum.Enum):
            value = value.value
        elif isinstance(value, Decimal):
            value = float(value)
        elif hasattr(value, 'isoformat'):
            value = value.isoformat()
        snapshot[attr.key] = value
    return snapshot

__all__ = ['sqlalchemy_to_dict']
