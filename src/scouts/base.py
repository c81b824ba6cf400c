"""
Scout Base Module

Shared result types and URL helpers for the search/reader clients.
"""

import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse


@dataclass
class SearchResult:
    """One organic result from the search API."""
    url: str
    title: str = ""
    content: str = ""
    favicon: Optional[str] = None


@dataclass
class ReaderResult:
    """Page content returned by the reader API."""
    url: str
    title: str = ""
    content: str = ""
    description: str = ""
    images: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)


# Domains that never point at a tool's own site
EXCLUDED_DOMAINS = [
    'wikipedia.org', 'facebook.com', 'twitter.com', 'x.com', 'linkedin.com',
    'youtube.com', 'reddit.com', 'medium.com', 'instagram.com',
    'pinterest.com', 'quora.com', 'tiktok.com',
]

# Path prefixes excluded on otherwise allowed domains
EXCLUDED_PATHS = [
    'github.com/topics',
]


def get_hostname(url: str) -> str:
    """Hostname of a URL without a leading www."""
    hostname = (urlparse(url).hostname or '').lower()
    if hostname.startswith('www.'):
        hostname = hostname[4:]
    return hostname


def is_valid_url(url: str) -> bool:
    """Check that a URL is absolute http(s) with a host."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ('http', 'https') and bool(parsed.hostname)


def is_excluded(url: str) -> bool:
    """Check a URL against the excluded domain and path lists."""
    hostname = get_hostname(url)
    for domain in EXCLUDED_DOMAINS:
        if hostname == domain or hostname.endswith('.' + domain):
            return True

    host_and_path = hostname + urlparse(url).path.lower()
    return any(host_and_path.startswith(prefix) for prefix in EXCLUDED_PATHS)


def is_tool_url(url: str) -> bool:
    """Check whether a URL may point at a tool's site."""
    return is_valid_url(url) and not is_excluded(url)


# URL extraction pattern
URL_PATTERN = re.compile(
    r'https?://[^\s<>\[\]()"\'\`]+',
    re.IGNORECASE
)


def extract_urls(text: str) -> list[str]:
    """Extract URLs from text, in order of first appearance."""
    if not text:
        return []
    seen = set()
    urls = []
    for url in URL_PATTERN.findall(text):
        url = url.rstrip('.,;:!?)\'\"')
        if url and url not in seen:
            seen.add(url)
            urls.append(url)
    return urls
