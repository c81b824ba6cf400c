"""
Tools Router

Public catalog reads: listings, tool detail and per-tool view history.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from web.api.deps import Catalog, get_db

router = APIRouter()

HIGHLIGHT_LIMIT = 10


@router.get("")
async def list_tools(
    sort: str = Query("upvotes", description="upvotes, trend, newest or name"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Catalog = Depends(get_db),
):
    """List approved tools."""
    return db.list_tools(status="approved", sort=sort, limit=limit)


@router.get("/trending")
async def trending_tools(db: Catalog = Depends(get_db)):
    """Most upvoted approved tools."""
    return db.list_tools(status="approved", sort="upvotes", limit=HIGHLIGHT_LIMIT)


@router.get("/fastest-rising")
async def fastest_rising_tools(db: Catalog = Depends(get_db)):
    """Approved tools with the highest trend score."""
    return db.list_tools(status="approved", sort="trend", limit=HIGHLIGHT_LIMIT)


@router.get("/new")
async def new_tools(db: Catalog = Depends(get_db)):
    """Most recently added approved tools."""
    return db.list_tools(status="approved", sort="newest", limit=HIGHLIGHT_LIMIT)


@router.get("/category/{category_id}")
async def tools_by_category(category_id: int, db: Catalog = Depends(get_db)):
    """Approved tools in a category."""
    return db.list_tools(status="approved", sort="upvotes", category_id=category_id)


@router.get("/{slug}")
async def get_tool(slug: str, db: Catalog = Depends(get_db)):
    """Approved tool with its category, features, tags and similar tools."""
    tool = db.get_tool_by_slug(slug, status="approved")
    if not tool:
        raise HTTPException(status_code=404, detail="Tool not found")

    tool["category"] = db.get_category(tool["category_id"])
    tool["features"] = db.get_tool_features(tool["id"])
    tool["tags"] = db.get_tool_tags(tool["id"])
    tool["similar_tools"] = db.get_similar_tools(tool["id"])
    return tool


@router.get("/{slug}/analytics")
async def get_tool_analytics(slug: str, db: Catalog = Depends(get_db)):
    """Views per day over the last 7 days."""
    tool = db.get_tool_by_slug(slug)
    if not tool:
        raise HTTPException(status_code=404, detail="Tool not found")

    return db.get_daily_views(tool["id"], days=7)
