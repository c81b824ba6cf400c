"""
Categories Router
"""

from fastapi import APIRouter, Depends

from web.api.deps import Catalog, get_db

router = APIRouter()


@router.get("")
async def list_categories(db: Catalog = Depends(get_db)):
    """All categories with their approved tool count."""
    return db.list_categories()
