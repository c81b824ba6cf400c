"""
Search Router

Text search over approved tools and the embeddable badge.
"""

from html import escape
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from web.api.deps import Catalog, get_config, get_db

router = APIRouter()

BADGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ margin: 0; padding: 8px; font-family: system-ui, -apple-system, sans-serif; }}
    .badge {{
      display: inline-flex;
      align-items: center;
      gap: 8px;
      padding: 8px 12px;
      background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      color: white;
      text-decoration: none;
      border-radius: 8px;
      font-size: 14px;
      font-weight: 600;
    }}
    .badge-logo {{ width: 24px; height: 24px; border-radius: 4px; }}
    .badge-text {{ display: flex; flex-direction: column; gap: 2px; }}
    .badge-votes {{ font-size: 12px; opacity: 0.9; }}
  </style>
</head>
<body>
  <a href="{url}" class="badge" target="_blank">
    <img src="{logo}" alt="{name}" class="badge-logo" />
    <div class="badge-text">
      <div class="badge-name">{name}</div>
      <div class="badge-votes">⬆ {upvotes} upvotes on AITRENDSDATA</div>
    </div>
  </a>
</body>
</html>"""


@router.get("/search")
async def search_tools(
    q: Optional[str] = Query(None, description="Text to match in name, tagline or description"),
    category: Optional[int] = Query(None, description="Category ID"),
    db: Catalog = Depends(get_db),
):
    """Search approved tools, most upvoted first."""
    return db.search_tools(text=q, category_id=category)


@router.get("/badge/{slug}", response_class=HTMLResponse)
async def get_badge(slug: str, db: Catalog = Depends(get_db), config: dict = Depends(get_config)):
    """Embeddable HTML badge linking back to the tool page."""
    tool = db.get_tool_by_slug(slug, status="approved")
    if not tool:
        raise HTTPException(status_code=404, detail="Tool not found")

    app_url = (config.get("app") or {}).get("url", "http://localhost:5000").rstrip("/")
    return BADGE_TEMPLATE.format(
        url=escape(f"{app_url}/tools/{tool['slug']}"),
        logo=escape(tool["logo"]),
        name=escape(tool["name"]),
        upvotes=tool["upvotes"],
    )
