"""
Tool Refresher

Re-scrape and re-classify approved tools and apply only the fields that
changed.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from src.analyzers.base import ClassifiedTool
from src.analyzers.classifier import ToolClassifier
from src.automation import LOG_REFRESH, AutomationRun
from src.config import get_section
from src.database import Database
from src.scraper.scraper import ToolScraper
from src.throttle import Throttle

logger = logging.getLogger(__name__)

TEXT_FIELDS = ('tagline', 'description', 'logo')
JSON_FIELDS = ('screenshots', 'pricing')
LINK_FIELDS = ('twitter', 'github')
REFRESH_FIELDS = TEXT_FIELDS + JSON_FIELDS + LINK_FIELDS


@dataclass
class RefreshResult:
    """Counters for one refresh run."""
    tools_refreshed: int = 0
    tools_updated: int = 0
    tools_failed: int = 0
    changes: dict[str, list[str]] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    status: str = 'running'
    log_id: Optional[int] = None


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True)


def diff_tool(tool: dict, classified: ClassifiedTool) -> dict:
    """Fields whose fresh value is non-empty and differs from the stored one."""
    updates = {}
    for name in REFRESH_FIELDS:
        fresh = getattr(classified, name)
        if not fresh:
            continue
        stored = tool.get(name)
        if name in JSON_FIELDS:
            if _canonical(fresh) != _canonical(stored):
                updates[name] = fresh
        elif fresh != stored:
            updates[name] = fresh
    return updates


class ToolRefresher:
    """Refresh stored tools from their websites."""

    def __init__(self, db: Database, scraper: ToolScraper, classifier: ToolClassifier):
        self.db = db
        self.scraper = scraper
        self.classifier = classifier

    def refresh_tool(self, tool: dict) -> list[str]:
        """Refresh one tool. Returns the names of the changed fields."""
        if not tool.get('website'):
            raise ValueError("tool has no website")

        logger.info("Refreshing %s", tool['name'])
        scraped = self.scraper.scrape(tool['website'])
        classified = self.classifier.classify(scraped)

        updates = diff_tool(tool, classified)
        # updated_at always moves so the oldest-first batch rotates
        self.db.update_tool(tool['id'], updates)

        if updates:
            logger.info("Updated %d fields on %s: %s", len(updates), tool['name'], ', '.join(updates))
        return list(updates)


def run_refresh(db: Database, config: dict, scraper: ToolScraper, classifier: ToolClassifier,
                throttle: Optional[Throttle] = None) -> RefreshResult:
    """Refresh a batch of the least recently updated approved tools."""
    settings = get_section(config, 'refresh')
    throttle = throttle or Throttle(settings['tool_delay'])
    refresher = ToolRefresher(db, scraper, classifier)

    run = AutomationRun(db, LOG_REFRESH)
    result = RefreshResult(log_id=run.log_id)

    try:
        tools = db.get_tools_for_refresh(
            limit=settings['batch_size'], stale_days=settings.get('stale_days')
        )
        logger.info("Refreshing %d tools", len(tools))

        for tool in throttle.iterate(tools):
            try:
                changed = refresher.refresh_tool(tool)
            except Exception as e:
                logger.error("Error refreshing %s: %s", tool['name'], e)
                result.tools_failed += 1
                result.errors.append(f"{tool['name']}: {e}")
                continue

            result.tools_refreshed += 1
            if changed:
                result.tools_updated += 1
                result.changes[tool['name']] = changed

    except Exception as e:
        logger.exception("Tool refresh failed")
        run.fail(e)
        raise

    result.status = run.finish(
        {
            'tools_refreshed': result.tools_refreshed,
            'tools_updated': result.tools_updated,
            'tools_failed': result.tools_failed,
            'changes': [f"{name}: {', '.join(fields)}" for name, fields in result.changes.items()],
            'errors': result.errors,
        },
        failures=result.tools_failed,
    )
    logger.info("Tool refresh finished: %d refreshed, %d updated, %d failed",
                result.tools_refreshed, result.tools_updated, result.tools_failed)
    return result
