"""
AI Trends Curator Module

Discovery orchestration and duplicate handling.
"""

from src.curator.dedup import find_existing_tool, resolve_category
from src.curator.discovery import DiscoveryResult, process_discovered_tool, run_discovery

__all__ = [
    'find_existing_tool',
    'resolve_category',
    'DiscoveryResult',
    'process_discovered_tool',
    'run_discovery',
]
