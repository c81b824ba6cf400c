"""
AI Trends Tracker Module

Keep cataloged tools current: metrics snapshots and content refresh.
"""

from src.tracker.metrics import (
    GitHubClient,
    MetricsResult,
    MetricsUpdater,
    find_serp_position,
    run_metrics_update,
)
from src.tracker.refresher import RefreshResult, ToolRefresher, diff_tool, run_refresh
from src.tracker.scoring import (
    ViewCounts,
    popularity_score,
    traffic_score,
    trend_score,
)

__all__ = [
    'GitHubClient',
    'MetricsResult',
    'MetricsUpdater',
    'find_serp_position',
    'run_metrics_update',
    'RefreshResult',
    'ToolRefresher',
    'diff_tool',
    'run_refresh',
    'ViewCounts',
    'popularity_score',
    'traffic_score',
    'trend_score',
]
