from typing import Optional

from fastapi import Header

from shared.core.config import settings


def get_owner_id(x_owner_id: Optional[str] = Header(None)) -> Optional[str]:
    """Owner whose properties and tenants a request works on."""
    return x_owner_id or settings.DEFAULT_OWNER_ID
