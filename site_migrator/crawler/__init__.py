"""
Crawler for the source site.

Handles the discovery phase - walking the site breadth-first and
persisting one raw record per page.
"""

from .frontier import Frontier
from .pagination import PaginationDiscovery, PaginationResult
from .scheduler import CrawlScheduler, CrawlSetupError, CrawlSummary

__all__ = [
    "Frontier",
    "PaginationDiscovery",
    "PaginationResult",
    "CrawlScheduler",
    "CrawlSetupError",
    "CrawlSummary",
]
