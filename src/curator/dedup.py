"""
Deduplication Module

Slug-based duplicate detection and category resolution for new tools.
"""

import sqlite3
from typing import Optional

from src.analyzers.base import category_icon, generate_slug
from src.database import Database


def find_existing_tool(db: Database, name: str) -> Optional[dict]:
    """Existing tool whose slug matches the slug of this name."""
    slug = generate_slug(name)
    if not slug:
        return None
    return db.get_tool_by_slug(slug)


def resolve_category(db: Database, name: str) -> int:
    """Get a category ID by name, creating the category if needed."""
    existing = db.get_category_by_name(name)
    if existing:
        return existing['id']

    slug = generate_slug(name)
    try:
        return db.add_category(
            name=name,
            slug=slug,
            icon=category_icon(name),
            description=f"Tools for {name.lower()}",
        )
    except sqlite3.IntegrityError:
        # Created meanwhile, or a different name mapping to the same slug
        existing = db.get_category_by_name(name) or db.get_category_by_slug(slug)
        if existing is None:
            raise
        return existing['id']
