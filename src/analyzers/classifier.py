"""
Tool Classifier

Clean and categorise scraped tool data with an LLM, falling back to a
keyword matcher when no provider answers.
"""

import json
import logging
import re
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.analyzers.base import (
    AI_CATEGORIES,
    DEFAULT_CATEGORY,
    PRICING_MODELS,
    ClassifiedTool,
    LLMProvider,
)
from src.analyzers.claude import ClaudeProvider
from src.analyzers.gpt import OpenAIProvider
from src.config import get_api_key, get_section
from src.errors import ProviderError
from src.scraper.scraper import ScrapedTool

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 50
DEFAULT_CONFIDENCE = 70

MAX_CATEGORIES = 3
MAX_FEATURES = 15
MAX_TAGS = 20
MAX_TAGLINE = 200
MAX_SEO_SUMMARY = 160
RAW_CONTENT_PREVIEW = 2000

CLASSIFICATION_PROMPT = '''You are an AI tool analyst. Analyze the following scraped data from an AI tool website and return structured, clean JSON.

Tool Data:
Name: {name}
Website: {website}
Tagline: {tagline}
Description: {description}
Raw Content Preview: {raw_content}

Please analyze and return a JSON object with these fields:

1. name: Clean, proper name (no extra text)
2. tagline: Catchy, clear tagline (max 100 chars)
3. description: Well-written description (200-500 words)
4. features: Array of 5-10 key features (clear, benefit-focused)
5. pricing: Object with:
   - model: One of [{pricing_models}]
   - plans: Array of pricing tiers (if available)
6. categories: Array of 1-3 categories from this list ONLY: {categories}
7. tags: Array of 8-15 relevant tags
8. seoSummary: SEO-optimized summary (150-160 chars, include main keywords)
9. confidence: Your confidence in this classification (0-100)

Important:
- Categories MUST be from the provided list
- Description should be engaging and informative
- Features should be specific benefits, not generic
- Tags should include technology stack, use cases, and target users
- Ensure all text is grammatically correct and professional

Return ONLY valid JSON, no markdown or explanation.'''

# Keyword matcher used when no LLM answers. Order decides which
# categories survive the MAX_CATEGORIES cap.
FALLBACK_KEYWORDS = [
    ('Image Generation', ['image', 'photo', 'picture', 'visual', 'midjourney', 'stable diffusion']),
    ('Video Generation', ['video', 'animation', 'motion', 'film']),
    ('Coding AI', ['code', 'programming', 'developer', 'github', 'copilot']),
    ('Writing Tools', ['writing', 'content', 'copywriting', 'blog', 'article']),
    ('AI Assistants', ['chat', 'conversation', 'messaging', 'support']),
    ('Voice & Speech', ['voice', 'speech', 'audio', 'tts', 'stt']),
    ('Data Analysis', ['data', 'analytics', 'insights', 'visualization']),
]


def build_prompt(scraped: ScrapedTool) -> str:
    """Classification prompt for one scraped tool."""
    return CLASSIFICATION_PROMPT.format(
        name=scraped.name,
        website=scraped.website,
        tagline=scraped.tagline or 'Not provided',
        description=scraped.description or 'Not provided',
        raw_content=(scraped.raw_content or '')[:RAW_CONTENT_PREVIEW],
        pricing_models=', '.join(PRICING_MODELS),
        categories=', '.join(AI_CATEGORIES),
    )


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


class PricingPayload(BaseModel):
    model: str = 'freemium'
    plans: list[dict] = Field(default_factory=list)

    @field_validator('model', mode='before')
    @classmethod
    def _model(cls, value):
        return str(value).strip().lower() if value else 'freemium'

    @field_validator('plans', mode='before')
    @classmethod
    def _plans(cls, value):
        if not isinstance(value, list):
            return []
        return [plan for plan in value if isinstance(plan, dict)]


class ClassificationPayload(BaseModel):
    """Schema for the JSON object returned by an LLM."""
    name: Optional[str] = None
    tagline: Optional[str] = None
    description: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    pricing: PricingPayload = Field(default_factory=PricingPayload)
    categories: list[str] = Field(default_factory=lambda: [DEFAULT_CATEGORY])
    tags: list[str] = Field(default_factory=list)
    seo_summary: str = Field('', alias='seoSummary')
    confidence: float = DEFAULT_CONFIDENCE

    model_config = {'populate_by_name': True}

    @field_validator('name', 'tagline', 'description', mode='before')
    @classmethod
    def _text(cls, value):
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator('features', mode='before')
    @classmethod
    def _features(cls, value):
        return _string_list(value)[:MAX_FEATURES]

    @field_validator('tags', mode='before')
    @classmethod
    def _tags(cls, value):
        return _string_list(value)[:MAX_TAGS]

    @field_validator('categories', mode='before')
    @classmethod
    def _categories(cls, value):
        valid = []
        for category in _string_list(value):
            if category in AI_CATEGORIES and category not in valid:
                valid.append(category)
        return valid[:MAX_CATEGORIES] or [DEFAULT_CATEGORY]

    @field_validator('pricing', mode='before')
    @classmethod
    def _pricing(cls, value):
        return value if isinstance(value, dict) else {}

    @field_validator('seo_summary', mode='before')
    @classmethod
    def _seo_summary(cls, value):
        return str(value)[:MAX_SEO_SUMMARY] if value else ''

    @field_validator('confidence', mode='before')
    @classmethod
    def _confidence(cls, value):
        if value is None or value == '':
            return DEFAULT_CONFIDENCE
        return min(100.0, max(0.0, float(value)))


def strip_code_fences(text: str) -> str:
    """Remove ```json ... ``` wrapping around a response."""
    text = (text or '').strip()
    match = re.match(r'^```[a-zA-Z]*\s*\n?([\s\S]*?)\n?```$', text)
    if match:
        return match.group(1).strip()
    return text


def parse_classification(response_text: str, scraped: ScrapedTool,
                         provider: str = 'llm') -> ClassifiedTool:
    """Validate an LLM response; malformed output yields the fallback classification."""
    try:
        data = json.loads(strip_code_fences(response_text))
        if not isinstance(data, dict):
            raise ValueError("response is not a JSON object")
        payload = ClassificationPayload.model_validate(data)
    except (ValueError, ValidationError) as e:
        logger.warning("Unusable classification for %s (%s), using fallback", scraped.name, e)
        return fallback_classification(scraped)

    return ClassifiedTool(
        name=payload.name or scraped.name,
        tagline=(payload.tagline or scraped.tagline or '')[:MAX_TAGLINE],
        description=payload.description or scraped.description or '',
        website=scraped.website,
        features=payload.features,
        pricing=payload.pricing.model_dump(),
        categories=payload.categories,
        tags=payload.tags,
        seo_summary=payload.seo_summary,
        logo=scraped.logo,
        screenshots=list(scraped.screenshots),
        twitter=scraped.twitter,
        github=scraped.github,
        confidence=int(payload.confidence),
        provider=provider,
    )


def fallback_categories(scraped: ScrapedTool) -> list[str]:
    """Keyword-matched categories from the vocabulary, never empty."""
    text = ' '.join([
        scraped.name or '',
        scraped.tagline or '',
        scraped.description or '',
        ' '.join(scraped.features or []),
        scraped.github or '',
    ]).lower()

    matched = []
    for category, keywords in FALLBACK_KEYWORDS:
        if category not in matched and any(keyword in text for keyword in keywords):
            matched.append(category)
    return matched[:MAX_CATEGORIES] or [DEFAULT_CATEGORY]


def fallback_classification(scraped: ScrapedTool) -> ClassifiedTool:
    """Deterministic classification used when no LLM result is usable."""
    return ClassifiedTool(
        name=scraped.name,
        tagline=(scraped.tagline or f"AI-powered {scraped.name}")[:MAX_TAGLINE],
        description=scraped.description or f"{scraped.name} is an innovative AI tool.",
        website=scraped.website,
        features=list(scraped.features or [])[:MAX_FEATURES],
        pricing=scraped.pricing or {'model': 'freemium'},
        categories=fallback_categories(scraped),
        tags=list(scraped.tags or [])[:MAX_TAGS],
        seo_summary=f"{scraped.name} - AI tool for productivity and automation"[:MAX_SEO_SUMMARY],
        logo=scraped.logo,
        screenshots=list(scraped.screenshots or []),
        twitter=scraped.twitter,
        github=scraped.github,
        confidence=FALLBACK_CONFIDENCE,
        provider='fallback',
    )


class ToolClassifier:
    """Classify scraped tools, trying each provider in order."""

    def __init__(self, providers: list[LLMProvider]):
        self.providers = providers

    @classmethod
    def from_config(cls, config: dict) -> 'ToolClassifier':
        """Claude first, OpenAI second, keys from env/config."""
        settings = get_section(config, 'classifier')
        return cls([
            ClaudeProvider(
                api_key=get_api_key(config, 'anthropic'),
                model=settings['claude_model'],
                max_tokens=settings['max_tokens'],
            ),
            OpenAIProvider(
                api_key=get_api_key(config, 'openai'),
                model=settings['openai_model'],
            ),
        ])

    def classify(self, scraped: ScrapedTool) -> ClassifiedTool:
        logger.info("Classifying %s", scraped.name)
        prompt = build_prompt(scraped)

        for provider in self.providers:
            try:
                response_text = provider.complete(prompt)
            except ProviderError as e:
                logger.warning("%s classification failed: %s", provider.name, e)
                continue
            return parse_classification(response_text, scraped, provider=provider.name)

        logger.warning("No provider classified %s, using keyword fallback", scraped.name)
        return fallback_classification(scraped)
