"""
Tool Scraper

Fetch a tool's page through the reader API and extract structured fields.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Optional

from src.scouts.base import ReaderResult
from src.scouts.jina import JinaClient
from src.scraper import extractors

logger = logging.getLogger(__name__)


@dataclass
class ScrapedTool:
    """Structured data extracted from a tool's website."""
    name: str
    website: str
    tagline: Optional[str] = None
    description: Optional[str] = None
    features: list[str] = field(default_factory=list)
    pricing: Optional[dict] = None
    logo: Optional[str] = None
    screenshots: list[str] = field(default_factory=list)
    twitter: Optional[str] = None
    github: Optional[str] = None
    linkedin: Optional[str] = None
    discord: Optional[str] = None
    slack: Optional[str] = None
    youtube: Optional[str] = None
    docs: Optional[str] = None
    api_docs: Optional[str] = None
    blog: Optional[str] = None
    changelog: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    raw_content: str = ""
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def extract_tool_data(page: ReaderResult, url: str) -> ScrapedTool:
    """Apply every extractor to one reader result."""
    text = page.content or ''
    return ScrapedTool(
        name=extractors.extract_name(page.title, page.metadata, url),
        website=url,
        tagline=extractors.extract_tagline(page.description, text),
        description=extractors.extract_description(text),
        features=extractors.extract_features(text),
        pricing=extractors.extract_pricing(text),
        logo=extractors.extract_logo(page.images, page.metadata, url),
        screenshots=extractors.extract_screenshots(page.images),
        tags=extractors.extract_tags(text, page.metadata),
        raw_content=text,
        metadata=page.metadata or {},
        **extractors.extract_social_links(page.links, text),
        **extractors.extract_doc_links(page.links, text),
    )


class ToolScraper:
    """Scrape tool websites via the reader API."""

    def __init__(self, client: JinaClient):
        self.client = client

    def scrape(self, url: str, bypass_cache: bool = False) -> ScrapedTool:
        """Scrape a URL. Reader failures propagate as ScrapeError."""
        logger.info("Scraping tool from %s", url)
        page = self.client.read(url, bypass_cache=bypass_cache)
        return extract_tool_data(page, url)
