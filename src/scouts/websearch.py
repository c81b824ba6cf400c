"""
Web Search Scout

Runs the discovery queries through the search client and queues every new
candidate tool URL in discovered_tools.
"""

import logging
from dataclasses import dataclass, field

from src.database import Database
from src.scouts.base import SearchResult, is_tool_url
from src.scouts.jina import JinaClient

logger = logging.getLogger(__name__)

SOURCE_NAME = 'jina-search'

# Default search queries for finding new AI tools
DISCOVERY_QUERIES = [
    'new ai tools 2025',
    'latest ai tools',
    'best ai tools launched today',
    'top ai websites 2025',
    'trending ai tools',
    'ai tools for developers',
    'ai productivity tools',
    'ai image generation tools',
    'ai code assistants',
    'ai writing tools 2025',
]


@dataclass
class ScoutResult:
    """Outcome of one scout run."""
    urls_found: int = 0
    queued: list[str] = field(default_factory=list)
    known: list[str] = field(default_factory=list)


def collect_tool_urls(results_by_query: dict[str, list[SearchResult]]) -> list[str]:
    """Deduplicated tool URLs across all queries, in first-seen order."""
    seen = set()
    urls = []
    for results in results_by_query.values():
        for result in results:
            url = result.url.strip()
            if url in seen or not is_tool_url(url):
                continue
            seen.add(url)
            urls.append(url)
    return urls


class WebSearchScout:
    """Queue candidate tool URLs found by web search."""

    source_name = SOURCE_NAME

    def __init__(self, db: Database, search_client: JinaClient, config: dict = None):
        self.db = db
        self.search_client = search_client
        self.config = config or {}
        self.queries = self.config.get('queries') or DISCOVERY_QUERIES
        self.results_per_query = self.config.get('results_per_query', 10)

    def run(self) -> ScoutResult:
        """Search all queries and queue URLs not seen before."""
        logger.info("Searching %d queries", len(self.queries))
        results = self.search_client.batch_search(self.queries, count=self.results_per_query)

        urls = collect_tool_urls(results)
        outcome = ScoutResult(urls_found=len(urls))

        for url in urls:
            if self.db.add_discovered_url(url, self.source_name):
                outcome.queued.append(url)
            else:
                outcome.known.append(url)

        logger.info("Found %d tool URLs (%d new)", len(urls), len(outcome.queued))
        return outcome
