"""
Submissions Router

Public tool submissions and their admin review.
"""

import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, EmailStr

from src.analyzers.base import generate_slug
from src.database import Database
from web.api.deps import require_admin, require_store

router = APIRouter()


class SubmissionCreate(BaseModel):
    """Tool submission request."""
    name: str
    tagline: str
    logo: str
    category_id: int
    submitter_email: EmailStr
    description: Optional[str] = None
    website: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    screenshots: Optional[list[str]] = None
    pricing: Optional[dict] = None
    submitter_name: Optional[str] = None


def _get_submission(db: Database, submission_id: int) -> dict:
    submission = db.get_submission(submission_id)
    if not submission:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
    return submission


def _require_pending(submission: dict) -> dict:
    if submission["status"] != "pending":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Submission already reviewed")
    return submission


@router.post("")
async def create_submission(data: SubmissionCreate, db: Database = Depends(require_store)):
    """Submit a tool for review."""
    if not db.get_category(data.category_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown category")

    submission_id = db.add_submission(**data.model_dump())
    return db.get_submission(submission_id)


@router.get("")
async def list_submissions(
    status: Optional[str] = Query(None, description="pending, approved or rejected"),
    db: Database = Depends(require_store),
    admin: dict = Depends(require_admin),
):
    """List submissions, newest first."""
    return db.list_submissions(status)


@router.patch("/{submission_id}/approve")
async def approve_submission(
    submission_id: int,
    db: Database = Depends(require_store),
    admin: dict = Depends(require_admin),
):
    """Promote a submission to an approved tool."""
    submission = _require_pending(_get_submission(db, submission_id))

    slug = generate_slug(submission["name"])
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Submission name must contain letters or digits",
        )
    try:
        tool_id = db.add_tool(
            name=submission["name"],
            slug=slug,
            tagline=submission["tagline"],
            logo=submission["logo"],
            category_id=submission["category_id"],
            status="approved",
            description=submission["description"],
            website=submission["website"],
            twitter=submission["twitter"],
            github=submission["github"],
            screenshots=submission["screenshots"],
            pricing=submission["pricing"],
        )
    except sqlite3.IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A tool with slug '{slug}' already exists",
        )

    db.set_submission_status(submission_id, "approved", reviewed_by=admin["id"])
    return db.get_tool(tool_id)


@router.patch("/{submission_id}/reject")
async def reject_submission(
    submission_id: int,
    db: Database = Depends(require_store),
    admin: dict = Depends(require_admin),
):
    """Reject a pending submission."""
    _require_pending(_get_submission(db, submission_id))
    return db.set_submission_status(submission_id, "rejected", reviewed_by=admin["id"])
