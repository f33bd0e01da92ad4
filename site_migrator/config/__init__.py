"""
Configuration module for the migrated site.

Provides:
- YAML config loading with validation
- Site definition (seeds, pagination, output, assets, content rules)
- Environment variable substitution
"""

from .loader import ConfigLoader, load_site_config
from .site import SiteConfig

__all__ = ["ConfigLoader", "SiteConfig", "load_site_config"]
