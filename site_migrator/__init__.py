"""
Site Migrator - moves a website's content into a JSON content store.

Architecture:
- core/: Stable foundation (models, URLs, classifier, DOM selectors,
  render capability, blob store, HTTP client)
- extractors/: Per-type field extraction from rendered pages
- crawler/: Frontier, pagination discovery and the crawl scheduler
- content/: Cleaning, structured field recovery and content preparation
- assets/: Image download and R2 upload
- config/: YAML-driven site definition
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
