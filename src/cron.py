"""
Cron Jobs

Build pipeline collaborators from config and dispatch scheduled runs by name.
"""

import hmac
import logging
from typing import Callable, Optional

from src.analyzers.classifier import ToolClassifier
from src.config import get_api_key, get_section
from src.curator.discovery import run_discovery
from src.database import Database
from src.errors import UnknownCronJob
from src.scouts.jina import JinaClient
from src.scraper.scraper import ToolScraper
from src.throttle import Throttle
from src.tracker.metrics import GitHubClient, run_metrics_update
from src.tracker.refresher import run_refresh

logger = logging.getLogger(__name__)


def discover_tools(db: Database, config: dict):
    client = JinaClient(
        api_key=get_api_key(config, 'jina'),
        throttle=Throttle(get_section(config, 'discovery')['query_delay']),
    )
    try:
        return run_discovery(
            db, config,
            search_client=client,
            scraper=ToolScraper(client),
            classifier=ToolClassifier.from_config(config),
        )
    finally:
        client.close()


def update_metrics(db: Database, config: dict):
    client = JinaClient(api_key=get_api_key(config, 'jina'))
    github = GitHubClient(token=get_api_key(config, 'github'))
    try:
        return run_metrics_update(db, config, github=github, search_client=client)
    finally:
        github.close()
        client.close()


def refresh_tools(db: Database, config: dict):
    client = JinaClient(api_key=get_api_key(config, 'jina'))
    try:
        return run_refresh(
            db, config,
            scraper=ToolScraper(client),
            classifier=ToolClassifier.from_config(config),
        )
    finally:
        client.close()


CRON_JOBS: dict[str, Callable] = {
    'discover-tools': discover_tools,
    'update-metrics': update_metrics,
    'refresh-tools': refresh_tools,
}


def run_cron_job(db: Database, job_type: str, config: dict, jobs: Optional[dict] = None):
    """Run a named job. Raises UnknownCronJob for names not in CRON_JOBS."""
    jobs = jobs or CRON_JOBS
    job = jobs.get(job_type)
    if job is None:
        raise UnknownCronJob(f"Unknown cron job: {job_type}")

    logger.info("Running cron job %s", job_type)
    return job(db, config)


def verify_cron_secret(authorization: Optional[str], secret: Optional[str]) -> bool:
    """Check an Authorization header against 'Bearer <secret>'."""
    if not secret or not authorization:
        return False
    return hmac.compare_digest(authorization.encode(), f"Bearer {secret}".encode())
