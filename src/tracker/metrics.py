"""
Metrics Updater

Snapshot traffic, trend and popularity scores for every approved tool.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

import httpx

from src.automation import LOG_METRICS, AutomationRun
from src.config import get_section
from src.database import Database
from src.errors import SearchError
from src.scouts.base import get_hostname
from src.scouts.jina import JinaClient
from src.throttle import Throttle
from src.tracker.scoring import (
    ViewCounts,
    popularity_score,
    traffic_score,
    trend_score,
)

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com/repos"
GITHUB_REPO_PATTERN = re.compile(r'github\.com/([^/\s?#]+)/([^/\s?#]+)', re.IGNORECASE)
SERP_RESULT_COUNT = 20


@dataclass
class ToolMetrics:
    """Computed metrics for one tool."""
    views: ViewCounts
    github_stars: int
    serp_position: Optional[int]
    traffic_score: int
    trend_score: int
    popularity_score: int


@dataclass
class MetricsResult:
    """Counters for one metrics run."""
    tools_updated: int = 0
    tools_failed: int = 0
    errors: list[str] = field(default_factory=list)
    status: str = 'running'
    log_id: Optional[int] = None


def parse_github_repo(github_url: str) -> Optional[tuple[str, str]]:
    """'https://github.com/owner/repo.git' -> ('owner', 'repo')."""
    match = GITHUB_REPO_PATTERN.search(github_url or '')
    if not match:
        return None
    owner, repo = match.groups()
    if repo.endswith('.git'):
        repo = repo[:-4]
    return owner, repo


class GitHubClient:
    """Star counts from the GitHub REST API."""

    def __init__(self, token: Optional[str] = None, client: Optional[httpx.Client] = None):
        self.token = token
        self.client = client or httpx.Client(timeout=30.0, follow_redirects=True)

    def get_stars(self, github_url: str) -> int:
        """Star count for a repository URL; any failure counts as 0 stars."""
        repo = parse_github_repo(github_url)
        if not repo:
            return 0

        owner, name = repo
        headers = {'Accept': 'application/vnd.github.v3+json'}
        if self.token:
            headers['Authorization'] = f'token {self.token}'

        try:
            response = self.client.get(f"{GITHUB_API_URL}/{owner}/{name}", headers=headers)
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"unexpected payload type {type(data).__name__}")
            return int(data.get('stargazers_count') or 0)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("GitHub API error for %s/%s: %s", owner, name, e)
            return 0

    def close(self):
        self.client.close()


def find_serp_position(search_client: JinaClient, name: str, website: Optional[str]) -> Optional[int]:
    """1-indexed rank of the tool's own hostname when searching its name."""
    hostname = get_hostname(website or '')
    if not hostname:
        return None

    try:
        results = search_client.search(name, count=SERP_RESULT_COUNT)
    except SearchError as e:
        logger.warning("Search ranking lookup failed for %s: %s", name, e)
        return None

    for position, result in enumerate(results, start=1):
        if hostname in result.url:
            return position
    return None


class MetricsUpdater:
    """Compute and persist metrics snapshots."""

    def __init__(self, db: Database, github: GitHubClient,
                 search_client: Optional[JinaClient] = None, check_serp: bool = True):
        self.db = db
        self.github = github
        self.search_client = search_client
        self.check_serp = check_serp and search_client is not None

    def view_counts(self, tool_id: int) -> ViewCounts:
        return ViewCounts(
            daily=self.db.count_events(tool_id, 'view', 1),
            weekly=self.db.count_events(tool_id, 'view', 7),
            monthly=self.db.count_events(tool_id, 'view', 30),
        )

    def compute(self, tool: dict) -> ToolMetrics:
        views = self.view_counts(tool['id'])
        stars = self.github.get_stars(tool['github']) if tool.get('github') else 0

        position = None
        if self.check_serp:
            position = find_serp_position(self.search_client, tool['name'], tool.get('website'))

        previous = self.db.get_latest_tool_metrics(tool['id'])
        traffic = traffic_score(views)
        trend = trend_score(views.weekly, previous['weekly_views'] if previous else None)
        popularity = popularity_score(
            views=views.weekly,
            upvotes=tool.get('upvotes') or 0,
            github_stars=stars,
            traffic=traffic,
            trend=trend,
        )
        return ToolMetrics(
            views=views,
            github_stars=stars,
            serp_position=position,
            traffic_score=traffic,
            trend_score=trend,
            popularity_score=popularity,
        )

    def update_tool(self, tool: dict) -> ToolMetrics:
        """Compute, append a tool_metrics row and copy derived fields onto the tool."""
        logger.info("Updating metrics for %s", tool['name'])
        metrics = self.compute(tool)

        self.db.add_tool_metrics(
            tool_id=tool['id'],
            daily_views=metrics.views.daily,
            weekly_views=metrics.views.weekly,
            monthly_views=metrics.views.monthly,
            github_stars=metrics.github_stars,
            traffic_score=metrics.traffic_score,
            trend_score=metrics.trend_score,
            popularity_score=metrics.popularity_score,
            serp_position=metrics.serp_position,
        )
        self.db.update_tool_metrics_fields(
            tool['id'],
            trend_percentage=metrics.trend_score,
            views_today=metrics.views.daily,
            views_week=metrics.views.weekly,
        )
        return metrics


def run_metrics_update(db: Database, config: dict, github: GitHubClient,
                       search_client: Optional[JinaClient] = None,
                       throttle: Optional[Throttle] = None) -> MetricsResult:
    """Update metrics for all approved tools and record the run."""
    settings = get_section(config, 'metrics')
    throttle = throttle or Throttle(settings['tool_delay'])
    updater = MetricsUpdater(db, github, search_client, check_serp=settings['check_serp'])

    run = AutomationRun(db, LOG_METRICS)
    result = MetricsResult(log_id=run.log_id)

    try:
        tools = db.get_tools_by_status('approved')
        logger.info("Updating metrics for %d tools", len(tools))

        for tool in throttle.iterate(tools):
            try:
                updater.update_tool(tool)
                result.tools_updated += 1
            except Exception as e:
                logger.error("Error updating metrics for %s: %s", tool['name'], e)
                result.tools_failed += 1
                result.errors.append(f"{tool['name']}: {e}")

    except Exception as e:
        logger.exception("Metrics update failed")
        run.fail(e)
        raise

    result.status = run.finish(
        {
            'tools_updated': result.tools_updated,
            'tools_failed': result.tools_failed,
            'errors': result.errors,
        },
        failures=result.tools_failed,
    )
    logger.info("Metrics update finished: %d updated, %d failed",
                result.tools_updated, result.tools_failed)
    return result
