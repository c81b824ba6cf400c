"""
Jina Client

Search and reader API client used by discovery, metrics and refresh runs.

Search:  GET https://s.jina.ai/?q=...   -> ordered organic results
Reader:  GET https://r.jina.ai/<url>    -> page title, text, images, links
"""

import logging
from typing import Optional

import httpx

from src.errors import ScrapeError, SearchError
from src.scouts.base import ReaderResult, SearchResult
from src.throttle import Throttle

logger = logging.getLogger(__name__)

JINA_SEARCH_URL = "https://s.jina.ai/"
JINA_READER_URL = "https://r.jina.ai/"


def _as_list(value) -> list[str]:
    """Reader images/links come back as either a list or a {label: url} map."""
    if not value:
        return []
    if isinstance(value, dict):
        return [v for v in value.values() if isinstance(v, str)]
    if isinstance(value, list):
        urls = []
        for item in value:
            if isinstance(item, str):
                urls.append(item)
            elif isinstance(item, dict) and item.get('url'):
                urls.append(item['url'])
        return urls
    return []


class JinaClient:
    """Client for the Jina search and reader APIs.

    Pass an ``httpx.Client`` to control transport (tests use
    ``httpx.MockTransport``) and a ``Throttle`` to control delays.
    """

    def __init__(self, api_key: Optional[str] = None, client: Optional[httpx.Client] = None,
                 throttle: Optional[Throttle] = None):
        self.api_key = api_key
        self.client = client or httpx.Client(timeout=30.0, follow_redirects=True)
        self.throttle = throttle or Throttle(1.0)

    def _headers(self) -> dict:
        headers = {'Accept': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f'Bearer {self.api_key}'
        return headers

    def search(self, query: str, count: Optional[int] = None, country: Optional[str] = None,
               language: Optional[str] = None, location: Optional[str] = None,
               fetch_favicons: bool = False) -> list[SearchResult]:
        """Run one search query. Raises SearchError on any failure."""
        params = {'q': query}
        if count:
            params['count'] = str(count)
        if country:
            params['country'] = country
        if language:
            params['language'] = language
        if location:
            params['location'] = location

        headers = self._headers()
        if fetch_favicons:
            headers['X-With-Generated-Alt'] = 'true'

        try:
            response = self.client.get(JINA_SEARCH_URL, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SearchError(f"Search failed for {query!r}: {e}") from e

        items = data.get('data') if isinstance(data, dict) else None
        if not isinstance(items, list):
            return []

        results = []
        for item in items:
            if not isinstance(item, dict) or not item.get('url'):
                continue
            results.append(SearchResult(
                url=item['url'],
                title=item.get('title') or '',
                content=item.get('content') or item.get('description') or '',
                favicon=item.get('favicon'),
            ))
        return results

    def batch_search(self, queries: list[str], **options) -> dict[str, list[SearchResult]]:
        """Run queries sequentially; a failed query maps to an empty list."""
        results = {}
        for query in self.throttle.iterate(queries):
            try:
                results[query] = self.search(query, **options)
            except SearchError as e:
                logger.error("Error searching for %r: %s", query, e)
                results[query] = []
        return results

    def read(self, url: str, bypass_cache: bool = False) -> ReaderResult:
        """Fetch page content through the reader API. Raises ScrapeError on failure."""
        headers = self._headers()
        headers['X-Return-Format'] = 'json'
        if bypass_cache:
            headers['X-No-Cache'] = 'true'

        try:
            response = self.client.get(f"{JINA_READER_URL}{url}", headers=headers)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ScrapeError(f"Reader failed for {url}: {e}") from e

        if not isinstance(data, dict):
            raise ScrapeError(f"Reader returned no content for {url}")

        # Newer responses wrap the page in {"code", "status", "data": {...}}
        page = data.get('data') if isinstance(data.get('data'), dict) else data

        metadata = page.get('metadata') if isinstance(page.get('metadata'), dict) else {}
        return ReaderResult(
            url=page.get('url') or url,
            title=page.get('title') or '',
            content=page.get('content') or '',
            description=page.get('description') or '',
            images=_as_list(page.get('images')),
            links=_as_list(page.get('links')),
            metadata=metadata,
        )

    def close(self):
        self.client.close()
