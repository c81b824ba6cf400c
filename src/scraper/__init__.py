"""
AI Trends Scraper Module

Turn tool websites into structured records.
"""

from src.scraper.scraper import ScrapedTool, ToolScraper, extract_tool_data

__all__ = [
    'ScrapedTool',
    'ToolScraper',
    'extract_tool_data',
]
