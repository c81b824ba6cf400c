"""
Automation Router

Cron trigger for the pipeline runs and the automation dashboard feeds.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.cron import run_cron_job
from src.database import Database
from src.errors import AITrendsError, UnknownCronJob
from web.api.deps import Catalog, get_config, get_db, require_cron_secret, require_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/cron/{job_type}", dependencies=[Depends(require_cron_secret)])
def trigger_cron(
    job_type: str,
    db: Database = Depends(require_store),
    config: dict = Depends(get_config),
):
    """
    Run a pipeline job: discover-tools, update-metrics or refresh-tools.

    Runs synchronously in the worker thread pool and returns the run counters.
    """
    try:
        result = run_cron_job(db, job_type, config)
    except UnknownCronJob as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AITrendsError as e:
        logger.error("Cron job %s failed: %s", job_type, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return {"success": True, "job": job_type, "result": asdict(result)}


@router.get("/automation-logs")
async def list_automation_logs(
    limit: int = Query(20, ge=1, le=200),
    type: Optional[str] = Query(None, description="discovery, metrics-update or tool-refresh"),
    db: Catalog = Depends(get_db),
):
    """Recent automation runs, newest first."""
    return db.list_automation_logs(limit=limit, log_type=type)


@router.get("/discovered-tools")
async def list_discovered_tools(
    limit: int = Query(50, ge=1, le=500),
    status: Optional[str] = Query(None, description="discovered, processing, processed or failed"),
    db: Catalog = Depends(get_db),
):
    """Discovery queue, newest first."""
    return db.list_discovered(limit=limit, status=status)
