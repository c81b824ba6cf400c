"""
Analyzer Base Module

Category vocabulary, classification result type and the LLM provider interface.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Optional

# Closed category vocabulary; classifier output is always a subset of this list
AI_CATEGORIES = [
    'AI Assistants',
    'Image Generation',
    'Video Generation',
    'Audio Tools',
    'Music AI',
    'Coding AI',
    'Writing Tools',
    'SEO Tools',
    'Agents',
    'Productivity AI',
    'LLMs & Models',
    'Voice & Speech',
    'Developer Tools',
    'Design & Editing',
    'OCR & Computer Vision',
    'Data Analysis',
    'Marketing AI',
    'Customer Support AI',
    'API Tools',
    'Automation Tools',
    'Agents & Orchestrators',
    'Research AI',
]

DEFAULT_CATEGORY = 'AI Assistants'

# Category name -> icon name rendered by the frontend
CATEGORY_ICONS = {
    'AI Assistants': 'MessageSquare',
    'Image Generation': 'Image',
    'Video Generation': 'Video',
    'Audio Tools': 'Mic',
    'Music AI': 'Music',
    'Coding AI': 'Code',
    'Writing Tools': 'PenTool',
    'SEO Tools': 'Search',
    'Agents': 'Bot',
    'Productivity AI': 'Zap',
    'LLMs & Models': 'Brain',
    'Voice & Speech': 'Mic2',
    'Developer Tools': 'Terminal',
    'Design & Editing': 'Palette',
    'OCR & Computer Vision': 'Eye',
    'Data Analysis': 'BarChart',
    'Marketing AI': 'TrendingUp',
    'Customer Support AI': 'Headphones',
    'API Tools': 'Webhook',
    'Automation Tools': 'Workflow',
    'Agents & Orchestrators': 'Network',
    'Research AI': 'BookOpen',
}

DEFAULT_ICON = 'Box'

PRICING_MODELS = ['free', 'freemium', 'paid', 'subscription', 'one-time', 'enterprise']


def category_icon(name: str) -> str:
    """Icon for a category name, 'Box' for anything outside the vocabulary."""
    return CATEGORY_ICONS.get(name, DEFAULT_ICON)


def generate_slug(name: str) -> str:
    """URL slug: lowercase, non-alphanumeric runs collapsed to '-'."""
    return re.sub(r'[^a-z0-9]+', '-', (name or '').lower()).strip('-')


@dataclass
class ClassifiedTool:
    """Cleaned and categorised tool record."""
    name: str
    tagline: str
    description: str
    website: str
    features: list[str] = field(default_factory=list)
    pricing: dict = field(default_factory=lambda: {'model': 'freemium'})
    categories: list[str] = field(default_factory=lambda: [DEFAULT_CATEGORY])
    tags: list[str] = field(default_factory=list)
    seo_summary: str = ''
    logo: Optional[str] = None
    screenshots: list[str] = field(default_factory=list)
    twitter: Optional[str] = None
    github: Optional[str] = None
    confidence: int = 50
    provider: str = 'fallback'

    @property
    def slug(self) -> str:
        return generate_slug(self.name)

    @property
    def primary_category(self) -> str:
        return self.categories[0] if self.categories else DEFAULT_CATEGORY

    def to_dict(self) -> dict:
        return asdict(self)


class LLMProvider(ABC):
    """A chat-completion backend that turns a prompt into response text."""

    name: str = 'llm'

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Return the raw response text. Raises ProviderError on failure."""
        pass
