"""
AI Trends Scouts Module

Search and reader clients plus the URL collector for discovery.
"""

from src.scouts.base import (
    EXCLUDED_DOMAINS,
    ReaderResult,
    SearchResult,
    extract_urls,
    get_hostname,
    is_tool_url,
)
from src.scouts.jina import JinaClient
from src.scouts.websearch import DISCOVERY_QUERIES, ScoutResult, WebSearchScout, collect_tool_urls

__all__ = [
    # Base
    'SearchResult',
    'ReaderResult',
    'EXCLUDED_DOMAINS',
    'extract_urls',
    'get_hostname',
    'is_tool_url',
    # Jina
    'JinaClient',
    # Web Search
    'DISCOVERY_QUERIES',
    'ScoutResult',
    'WebSearchScout',
    'collect_tool_urls',
]
