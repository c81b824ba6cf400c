"""
API Dependencies

Shared dependencies for API routers.
"""

from typing import Optional, Union

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from src.config import load_config
from src.cron import verify_cron_secret
from src.database import Database, EmptyCatalog
from web.api.auth import decode_access_token

Catalog = Union[Database, EmptyCatalog]

# Process-wide config and store, set up by the app lifespan
_config: Optional[dict] = None
_db: Optional[Catalog] = None

security = HTTPBearer(auto_error=False)


def get_config() -> dict:
    """Get the loaded configuration."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def open_catalog(config: dict) -> Catalog:
    """Database when the store is enabled, otherwise an always-empty catalog."""
    database = config.get("database") or {}
    if not database.get("enabled", True) or not database.get("path"):
        return EmptyCatalog()

    db = Database(database["path"], check_same_thread=False)
    db.init_schema()
    return db


def get_db() -> Catalog:
    """Get the catalog instance."""
    global _db
    if _db is None:
        _db = open_catalog(get_config())
    return _db


def require_store(db: Catalog = Depends(get_db)) -> Database:
    """Catalog that supports writes; 503 when no store is configured."""
    if not db.enabled:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured",
        )
    return db


def init_db():
    """Initialize configuration and database on startup."""
    global _config, _db
    _config = load_config()
    _db = open_catalog(_config)


def close_db():
    """Close database on shutdown."""
    global _db
    if _db:
        _db.close()
        _db = None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(require_store),
) -> dict:
    """
    Get the current authenticated user from JWT token.
    Raises 401 if not authenticated.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get_user_by_id(token_data.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.get("is_active"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Catalog = Depends(get_db),
) -> Optional[dict]:
    """
    Get the current user if authenticated, otherwise return None.
    """
    if credentials is None or not db.enabled:
        return None

    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        return None

    user = db.get_user_by_id(token_data.user_id)
    if user is None or not user.get("is_active"):
        return None

    return user


async def require_admin(
    current_user: dict = Depends(get_current_user),
) -> dict:
    """
    Require the current user to be an admin.
    """
    if not current_user.get("is_admin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


async def require_cron_secret(
    authorization: Optional[str] = Header(None),
    config: dict = Depends(get_config),
) -> None:
    """
    Require 'Authorization: Bearer <cron secret>'.
    """
    secret = (config.get("cron") or {}).get("secret")
    if not verify_cron_secret(authorization, secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
