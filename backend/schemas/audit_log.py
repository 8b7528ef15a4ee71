from datetime import datetime
from pydantic import BaseModel
from typing import Optional, Dict, Any

class AuditLogCreate(BaseModel):
    table_name: str
    record_id: str
    changed_by: Optional[str] = None
    action: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None

class AuditLogOut(AuditLogCreate):
    id: int
    changed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
