"""
Engagement Router

Upvotes and analytics events (views, clicks).
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from src.database import Database
from web.api.deps import get_current_user_optional, require_store

router = APIRouter()


class UpvoteRequest(BaseModel):
    """Upvote request."""
    tool_id: int
    user_id: Optional[int] = None
    ip_address: Optional[str] = None


class EventRequest(BaseModel):
    """Analytics event request."""
    tool_id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None


def _require_tool(db: Database, tool_id: int) -> dict:
    tool = db.get_tool(tool_id)
    if not tool:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tool not found")
    return tool


def _event_fields(event: EventRequest, request: Request) -> dict:
    return {
        "ip_address": event.ip_address or (request.client.host if request.client else None),
        "user_agent": event.user_agent or request.headers.get("user-agent"),
        "referrer": event.referrer or request.headers.get("referer"),
    }


@router.post("/upvotes")
async def upvote(
    vote: UpvoteRequest,
    request: Request,
    db: Database = Depends(require_store),
    current_user: Optional[dict] = Depends(get_current_user_optional),
):
    """Upvote a tool once per user, or once per IP for anonymous visitors."""
    _require_tool(db, vote.tool_id)

    user_id = current_user["id"] if current_user else vote.user_id
    ip_address = vote.ip_address or (request.client.host if request.client else None)

    if db.has_upvoted(vote.tool_id, user_id=user_id, ip_address=ip_address):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already upvoted")

    db.add_upvote(vote.tool_id, user_id=user_id, ip_address=ip_address)
    return {"success": True}


@router.post("/analytics/view")
async def track_view(event: EventRequest, request: Request, db: Database = Depends(require_store)):
    """Log a view and bump the tool's view counters."""
    _require_tool(db, event.tool_id)
    db.record_view(event.tool_id, **_event_fields(event, request))
    return {"success": True}


@router.post("/analytics/click")
async def track_click(event: EventRequest, request: Request, db: Database = Depends(require_store)):
    """Log an outbound click."""
    _require_tool(db, event.tool_id)
    db.add_analytics_event(event.tool_id, "click", **_event_fields(event, request))
    return {"success": True}
