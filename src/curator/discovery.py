"""
Discovery Module

Search for new AI tools, queue their URLs, then scrape, classify and
catalog a batch of queued URLs.

Each queued URL moves through discovered -> processing -> processed | failed.
"""

import logging
import sqlite3
from dataclasses import asdict, dataclass, field
from typing import Optional

from src.analyzers.base import generate_slug
from src.analyzers.classifier import ToolClassifier
from src.automation import LOG_DISCOVERY, AutomationRun
from src.config import get_section
from src.curator.dedup import find_existing_tool, resolve_category
from src.database import Database
from src.scouts.jina import JinaClient
from src.scouts.websearch import WebSearchScout
from src.scraper.scraper import ToolScraper

logger = logging.getLogger(__name__)

APPROVAL_CONFIDENCE = 70
SIMILAR_TOOLS_LIMIT = 5


@dataclass
class DiscoveryResult:
    """Counters for one discovery run."""
    tools_discovered: int = 0
    tools_queued: int = 0
    tools_processed: int = 0
    tools_created: int = 0
    tools_duplicate: int = 0
    tools_failed: int = 0
    errors: list[str] = field(default_factory=list)
    status: str = 'running'
    log_id: Optional[int] = None


@dataclass
class ProcessOutcome:
    tool_id: int
    created: bool


def placeholder_logo(name: str) -> str:
    initial = (name or '?')[0].upper()
    return f"https://via.placeholder.com/128?text={initial}"


def process_discovered_tool(db: Database, discovered: dict, scraper: ToolScraper,
                            classifier: ToolClassifier) -> ProcessOutcome:
    """Scrape, classify and catalog one discovered URL.

    Raises on scrape/classify/insert failures; the caller marks the row failed.
    """
    discovered_id = discovered['id']
    url = discovered['url']
    logger.info("Processing %s", url)

    db.mark_discovered_processing(discovered_id)

    scraped = scraper.scrape(url)
    classified = classifier.classify(scraped)
    slug = generate_slug(classified.name)
    if not slug:
        raise ValueError(f"Could not derive a slug from name {classified.name!r}")

    existing = find_existing_tool(db, classified.name)
    if existing:
        logger.info("Tool %s already exists, skipping", slug)
        db.mark_discovered_processed(discovered_id, existing['id'])
        return ProcessOutcome(tool_id=existing['id'], created=False)

    category_id = resolve_category(db, classified.primary_category)

    try:
        tool_id = db.add_tool(
            name=classified.name,
            slug=slug,
            tagline=classified.tagline or f"AI-powered {classified.name}",
            logo=classified.logo or placeholder_logo(classified.name),
            category_id=category_id,
            status='approved' if classified.confidence > APPROVAL_CONFIDENCE else 'pending',
            description=classified.description,
            website=classified.website,
            twitter=classified.twitter,
            github=classified.github,
            screenshots=classified.screenshots,
            pricing=classified.pricing,
        )
    except sqlite3.IntegrityError:
        # Slug taken between the lookup and the insert
        existing = db.get_tool_by_slug(slug)
        if existing is None:
            raise
        db.mark_discovered_processed(discovered_id, existing['id'])
        return ProcessOutcome(tool_id=existing['id'], created=False)

    db.set_tool_features(tool_id, classified.features)
    db.set_tool_tags(tool_id, classified.tags)
    db.link_similar_tools(tool_id, category_id, limit=SIMILAR_TOOLS_LIMIT)

    db.mark_discovered_processed(discovered_id, tool_id, raw_data=scraped.to_dict())
    logger.info("Tool created: %s (%s)", classified.name, slug)
    return ProcessOutcome(tool_id=tool_id, created=True)


def run_discovery(db: Database, config: dict, search_client: JinaClient,
                  scraper: ToolScraper, classifier: ToolClassifier) -> DiscoveryResult:
    """Run one discovery pass and record it in automation_logs.

    1. Search all discovery queries and queue new tool URLs
    2. Process a batch of queued URLs, oldest first
    3. Failures are isolated per URL and reported in the log
    """
    settings = get_section(config, 'discovery')
    run = AutomationRun(db, LOG_DISCOVERY)
    result = DiscoveryResult(log_id=run.log_id)
    logger.info("Starting tool discovery")

    try:
        scout = WebSearchScout(db, search_client, settings)
        scouted = scout.run()
        result.tools_discovered = scouted.urls_found
        result.tools_queued = len(scouted.queued)

        batch = db.get_discovered_batch('discovered', limit=settings['batch_size'])
        logger.info("Processing %d discovered tools", len(batch))

        for discovered in batch:
            try:
                outcome = process_discovered_tool(db, discovered, scraper, classifier)
            except Exception as e:
                logger.error("Error processing %s: %s", discovered['url'], e)
                db.mark_discovered_failed(discovered['id'], str(e) or type(e).__name__)
                result.tools_failed += 1
                result.errors.append(f"Processing failed: {discovered['url']}: {e}")
                continue

            result.tools_processed += 1
            if outcome.created:
                result.tools_created += 1
            else:
                result.tools_duplicate += 1

    except Exception as e:
        logger.exception("Tool discovery failed")
        run.fail(e)
        raise

    metadata = asdict(result)
    for key in ('status', 'log_id'):
        metadata.pop(key)
    result.status = run.finish(metadata, failures=result.tools_failed)
    logger.info(
        "Discovery finished: %d queued, %d processed, %d failed",
        result.tools_queued, result.tools_processed, result.tools_failed,
    )
    return result
