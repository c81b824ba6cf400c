"""
Admin Router

Catalog management for admins: tools and categories.
"""

import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from src.analyzers.base import DEFAULT_ICON, generate_slug
from src.database import TOOL_STATUSES, Database
from web.api.deps import require_admin, require_store

router = APIRouter(dependencies=[Depends(require_admin)])


class ToolCreate(BaseModel):
    """Tool creation request."""
    name: str
    tagline: str
    logo: str
    category_id: int
    slug: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    screenshots: Optional[list[str]] = None
    pricing: Optional[dict] = None
    status: str = "approved"
    features: Optional[list[str]] = None
    tags: Optional[list[str]] = None


class ToolUpdate(BaseModel):
    """Tool update request; only fields that are set are written."""
    name: Optional[str] = None
    slug: Optional[str] = None
    tagline: Optional[str] = None
    logo: Optional[str] = None
    category_id: Optional[int] = None
    description: Optional[str] = None
    website: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    screenshots: Optional[list[str]] = None
    pricing: Optional[dict] = None
    status: Optional[str] = None
    features: Optional[list[str]] = None
    tags: Optional[list[str]] = None


class CategoryCreate(BaseModel):
    """Category creation request."""
    name: str
    slug: Optional[str] = None
    icon: str = DEFAULT_ICON
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    """Category update request."""
    name: Optional[str] = None
    slug: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None


def _check_status(value: Optional[str]):
    if value is not None and value not in TOOL_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status. Must be one of: {', '.join(TOOL_STATUSES)}",
        )


def _check_slug(slug: Optional[str]):
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Slug must contain letters or digits",
        )


def _check_category(db: Database, category_id: Optional[int]):
    if category_id is not None and not db.get_category(category_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown category")


def _get_tool(db: Database, tool_id: int) -> dict:
    tool = db.get_tool(tool_id)
    if not tool:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tool not found")
    return tool


def _get_category(db: Database, category_id: int) -> dict:
    category = db.get_category(category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


# --- Tools ---

@router.get("/tools")
async def list_tools(
    status: Optional[str] = Query(None, description="pending, approved or rejected"),
    db: Database = Depends(require_store),
):
    """All tools regardless of status unless filtered, newest first."""
    return db.list_tools(status=status, sort="newest")


@router.post("/tools", status_code=status.HTTP_201_CREATED)
async def create_tool(data: ToolCreate, db: Database = Depends(require_store)):
    """Create a tool directly, bypassing the submission queue."""
    _check_status(data.status)
    _check_category(db, data.category_id)

    fields = data.model_dump(exclude={"features", "tags"})
    fields["slug"] = data.slug or generate_slug(data.name)
    _check_slug(fields["slug"])
    try:
        tool_id = db.add_tool(**fields)
    except sqlite3.IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A tool with slug '{fields['slug']}' already exists",
        )

    if data.features:
        db.set_tool_features(tool_id, data.features)
    if data.tags:
        db.set_tool_tags(tool_id, data.tags)
    return db.get_tool(tool_id)


@router.put("/tools/{tool_id}")
async def update_tool(tool_id: int, data: ToolUpdate, db: Database = Depends(require_store)):
    """Update a tool's fields, features or tags."""
    _get_tool(db, tool_id)
    _check_status(data.status)
    _check_category(db, data.category_id)

    fields = data.model_dump(exclude_unset=True, exclude={"features", "tags"})
    if "slug" in fields:
        _check_slug(fields["slug"])
    try:
        tool = db.update_tool(tool_id, fields)
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug already in use")

    if data.features is not None:
        db.set_tool_features(tool_id, data.features)
    if data.tags is not None:
        db.set_tool_tags(tool_id, data.tags)
    return tool


@router.delete("/tools/{tool_id}")
async def delete_tool(tool_id: int, db: Database = Depends(require_store)):
    """Delete a tool and everything hanging off it."""
    _get_tool(db, tool_id)
    db.delete_tool(tool_id)
    return {"success": True}


# --- Categories ---

@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(data: CategoryCreate, db: Database = Depends(require_store)):
    """Create a category."""
    slug = data.slug or generate_slug(data.name)
    _check_slug(slug)
    try:
        category_id = db.add_category(data.name, slug, icon=data.icon, description=data.description)
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category already exists")
    return db.get_category(category_id)


@router.put("/categories/{category_id}")
async def update_category(category_id: int, data: CategoryUpdate, db: Database = Depends(require_store)):
    """Rename or re-icon a category."""
    _get_category(db, category_id)
    try:
        return db.update_category(category_id, data.model_dump(exclude_unset=True))
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category already exists")


@router.delete("/categories/{category_id}")
async def delete_category(category_id: int, db: Database = Depends(require_store)):
    """Delete an empty category."""
    _get_category(db, category_id)
    if db.count_tools_in_category(category_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category still has tools",
        )
    db.delete_category(category_id)
    return {"success": True}
