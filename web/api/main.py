"""
AI Trends Web API

FastAPI backend for the directory site, admin panel and cron triggers.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import load_config
from src.logging_setup import setup_logging
from web.api.deps import close_db, init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    setup_logging(load_config())
    init_db()
    yield
    close_db()


app = FastAPI(
    title="AI Trends API",
    description="API for the AI tools directory and its automation pipeline",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend (development)
cors_origins = os.environ.get(
    "CORS_ORIGINS",
    "http://localhost:5173,http://localhost:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Import and include routers after app is created
from web.api.routers import (  # noqa: E402
    admin,
    auth,
    automation,
    categories,
    engagement,
    search,
    sponsors,
    submissions,
    tools,
)

# Public catalog
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(tools.router, prefix="/api/tools", tags=["tools"])
app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
app.include_router(sponsors.router, prefix="/api/sponsors", tags=["sponsors"])
app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(engagement.router, prefix="/api", tags=["engagement"])
app.include_router(submissions.router, prefix="/api/submissions", tags=["submissions"])

# Admin and automation
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
app.include_router(automation.router, prefix="/api", tags=["automation"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "aitrends-api"}
