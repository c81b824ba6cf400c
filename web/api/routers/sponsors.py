"""
Sponsors Router
"""

from fastapi import APIRouter, Depends

from web.api.deps import Catalog, get_db

router = APIRouter()


@router.get("")
async def list_sponsors(db: Catalog = Depends(get_db)):
    """Active sponsors, premium tier first."""
    return db.get_active_sponsors()
