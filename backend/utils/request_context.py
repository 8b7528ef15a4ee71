from typing import Optional

from fastapi import Header


def get_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """Acting user forwarded by the client; movements are logged without one if absent."""
    if x_user_id is not None:
        x_user_id = x_user_id.strip() or None
    return x_user_id
