"""
Heuristic extractors that turn reader output into tool fields.

Each extractor is a pure function over the page text, images, links and
metadata so it can be tested without any network access.
"""

import re
from typing import Optional

from src.scouts.base import extract_urls, get_hostname

NAME_SEPARATORS = re.compile(r'\s+[-|–—]\s+|\s*\|\s*|:\s')

TAGLINE_LABEL = re.compile(r'(?:tagline|slogan|motto):\s*(.+)', re.IGNORECASE)
FIRST_SENTENCE = re.compile(r'^(.{20,150}?[.!?])(?:\s|$)', re.MULTILINE)

FEATURE_HEADING = re.compile(
    r'^\s*#*\s*\**\s*(?:key features|features|capabilities|what we offer)\s*\**\s*:?\s*\**\s*$',
    re.IGNORECASE,
)
BULLET = re.compile(r'^\s*[-•*]\s+(.+)$')

# Checked in order; freemium before free so "freemium" is not read as "free"
PRICING_MODELS = ['freemium', 'free', 'paid', 'subscription', 'one-time', 'enterprise']
PRICING_SECTION = re.compile(r'(?:pricing|plans)\s*:?\s*\n([\s\S]{0,1000})', re.IGNORECASE)
PRICE = re.compile(
    r'\$(\d+(?:\.\d{2})?)\s*(?:/\s*|per\s+)?(month|mo|year|yr)?\b',
    re.IGNORECASE,
)
MAX_PLANS = 10

LOGO_HINT = re.compile(r'logo|icon|brand', re.IGNORECASE)
SCREENSHOT_HINT = re.compile(r'screenshot|screen-shot|preview|demo', re.IGNORECASE)
MAX_SCREENSHOTS = 5

# field -> hostnames it is recognised by
SOCIAL_DOMAINS = {
    'twitter': ['twitter.com', 'x.com'],
    'github': ['github.com'],
    'linkedin': ['linkedin.com'],
    'discord': ['discord.gg', 'discord.com'],
    'slack': ['slack.com'],
    'youtube': ['youtube.com', 'youtu.be'],
}

# field -> path pattern; api_docs is tested before docs
DOC_PATTERNS = [
    ('api_docs', re.compile(r'api[/-]?docs?|api-reference', re.IGNORECASE)),
    ('docs', re.compile(r'\bdocs?\b|documentation|guide', re.IGNORECASE)),
    ('blog', re.compile(r'blog|news|updates', re.IGNORECASE)),
    ('changelog', re.compile(r'changelog|release|versions', re.IGNORECASE)),
]

AI_KEYWORDS = [
    'ai', 'artificial intelligence', 'machine learning', 'deep learning',
    'nlp', 'computer vision', 'neural network', 'gpt', 'llm',
    'chatbot', 'automation', 'analytics', 'api', 'saas',
    'productivity', 'developer tools', 'no-code', 'low-code',
]
MAX_TAGS = 15


def _dedupe(items: list[str]) -> list[str]:
    """Remove duplicates, keeping first occurrence order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def name_from_hostname(url: str) -> str:
    """'https://www.example.ai' -> 'Example'."""
    hostname = get_hostname(url)
    label = hostname.split('.')[0] if hostname else ''
    return label.capitalize()


def extract_name(title: str, metadata: dict, url: str = '') -> str:
    """Site name from og:site_name, else title before a separator."""
    site_name = (metadata or {}).get('og:site_name')
    if isinstance(site_name, str) and site_name.strip():
        return site_name.strip()

    title = (title or '').strip()
    if title:
        name = NAME_SEPARATORS.split(title, maxsplit=1)[0].strip()
        return name or title

    return name_from_hostname(url)


def extract_tagline(description: str, content: str) -> Optional[str]:
    if description and description.strip():
        return description.strip()[:200]

    if not content:
        return None

    match = TAGLINE_LABEL.search(content)
    if match:
        return match.group(1).strip()[:200]

    match = FIRST_SENTENCE.search(content)
    if match:
        return match.group(1).strip()

    return None


def extract_description(content: str) -> str:
    """First three lines longer than 50 chars, capped at 1000 chars."""
    paragraphs = [line.strip() for line in (content or '').split('\n') if len(line.strip()) > 50]
    return '\n'.join(paragraphs[:3])[:1000]


def extract_features(content: str) -> list[str]:
    """Bullets under a features heading, else generic bullets."""
    lines = (content or '').split('\n')
    features = []

    i = 0
    while i < len(lines):
        if FEATURE_HEADING.match(lines[i]):
            i += 1
            while i < len(lines) and not lines[i].strip():
                i += 1
            while i < len(lines):
                match = BULLET.match(lines[i])
                if not match:
                    break
                features.append(match.group(1).strip())
                i += 1
        else:
            i += 1

    if features:
        return _dedupe(features)[:15]

    bullets = []
    for line in lines:
        match = BULLET.match(line)
        if match:
            text = match.group(1).strip()
            if 10 < len(text) < 200:
                bullets.append(text)
    return _dedupe(bullets)[:10]


def extract_pricing(content: str) -> Optional[dict]:
    """Pricing model keyword and $ amounts, or None when neither is found."""
    text = content or ''
    lower = text.lower()

    model = None
    for candidate in PRICING_MODELS:
        if re.search(r'\b' + re.escape(candidate) + r'\b', lower):
            model = candidate
            break

    section = PRICING_SECTION.search(text)
    scope = section.group(0) if section else text

    plans = []
    for match in PRICE.finditer(scope):
        period = match.group(2)
        plans.append({
            'name': 'Plan',
            'price': f"${match.group(1)}" + (f"/{period.lower()}" if period else ''),
            'features': [],
        })
        if len(plans) >= MAX_PLANS:
            break

    if model is None and not plans:
        return None

    pricing = {'model': model}
    if plans:
        pricing['plans'] = plans
    return pricing


def extract_logo(images: list[str], metadata: dict, url: str) -> Optional[str]:
    metadata = metadata or {}
    for key in ('og:image', 'twitter:image'):
        if isinstance(metadata.get(key), str) and metadata[key]:
            return metadata[key]

    if images:
        for image in images:
            if LOGO_HINT.search(image):
                return image
        return images[0]

    hostname = get_hostname(url)
    if hostname:
        return f"https://logo.clearbit.com/{hostname}"
    return None


def extract_screenshots(images: list[str]) -> list[str]:
    return [image for image in (images or []) if SCREENSHOT_HINT.search(image)][:MAX_SCREENSHOTS]


def _all_links(links: list[str], content: str) -> list[str]:
    return _dedupe(list(links or []) + extract_urls(content or ''))


def _host_matches(hostname: str, domains: list[str]) -> bool:
    return any(hostname == d or hostname.endswith('.' + d) for d in domains)


def extract_social_links(links: list[str], content: str) -> dict:
    """Social profile links by domain; the first link per network wins."""
    found = {}
    for link in _all_links(links, content):
        hostname = get_hostname(link)
        for field_name, domains in SOCIAL_DOMAINS.items():
            if field_name not in found and _host_matches(hostname, domains):
                found[field_name] = link
                break
    return found


def extract_doc_links(links: list[str], content: str) -> dict:
    """Docs/API docs/blog/changelog links by path keyword; first match wins."""
    found = {}
    for link in _all_links(links, content):
        hostname = get_hostname(link)
        if any(_host_matches(hostname, domains) for domains in SOCIAL_DOMAINS.values()):
            continue
        target = link.split('://', 1)[-1]
        for field_name, pattern in DOC_PATTERNS:
            if pattern.search(target):
                if field_name not in found:
                    found[field_name] = link
                break
    return found


def extract_tags(content: str, metadata: dict) -> list[str]:
    tags = []

    keywords = (metadata or {}).get('keywords')
    if isinstance(keywords, str):
        tags.extend(k.strip() for k in keywords.split(',') if k.strip())

    lower = (content or '').lower()
    for keyword in AI_KEYWORDS:
        if re.search(r'\b' + re.escape(keyword) + r'\b', lower):
            tags.append(keyword)

    return _dedupe(tags)[:MAX_TAGS]
