"""
AI Trends Analyzers Module

Classify scraped tools into the category vocabulary.
"""

from src.analyzers.base import (
    AI_CATEGORIES,
    CATEGORY_ICONS,
    DEFAULT_CATEGORY,
    ClassifiedTool,
    LLMProvider,
    category_icon,
    generate_slug,
)
from src.analyzers.claude import ClaudeProvider
from src.analyzers.classifier import (
    ToolClassifier,
    fallback_classification,
    parse_classification,
)
from src.analyzers.gpt import OpenAIProvider

__all__ = [
    'AI_CATEGORIES',
    'CATEGORY_ICONS',
    'DEFAULT_CATEGORY',
    'ClassifiedTool',
    'LLMProvider',
    'category_icon',
    'generate_slug',
    'ClaudeProvider',
    'OpenAIProvider',
    'ToolClassifier',
    'fallback_classification',
    'parse_classification',
]
