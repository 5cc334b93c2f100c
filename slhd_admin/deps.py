from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from slhd_admin.db import get_db
from slhd_admin.models import User
from slhd_admin.settings import Settings

def get_settings() -> Settings:
    return Settings()

def require_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    # API_KEY unset → auth disabled
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

def get_actor(
    x_actor_id: int | None = Header(default=None, alias="X-Actor-Id"),
    db: Session = Depends(get_db),
) -> User | None:
    """Acting user for the audit log; token issuance happens upstream."""
    if x_actor_id is None:
        return None
    return db.get(User, x_actor_id)

def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None
