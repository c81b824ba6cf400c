"""
AI Trends error types.
"""


class AITrendsError(Exception):
    """Base class for pipeline errors."""
    pass


class SearchError(AITrendsError):
    """The search API call failed."""
    pass


class ScrapeError(AITrendsError):
    """The reader API could not fetch a page."""
    pass


class ProviderError(AITrendsError):
    """An LLM provider call failed or returned nothing usable."""
    pass


class ProviderNotConfigured(ProviderError):
    """An LLM provider has no API key."""
    pass


class UnknownCronJob(AITrendsError):
    """Requested cron job type does not exist."""
    pass
