"""
Loader for the site definition file.

site.yml is read as text, ${VAR} / ${VAR:-default} placeholders are
filled from the environment, and the result is parsed with PyYAML into
a SiteConfig.
"""

import os
import re
from pathlib import Path
from typing import Optional

import yaml
import structlog

from site_migrator.config.site import SiteConfig

logger = structlog.get_logger(__name__)


DEFAULT_CONFIG_FILE = "site.yml"

ENV_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def _placeholder_value(match: re.Match) -> str:
    expression = match.group(1)

    name, has_default, default = expression.partition(":-")
    if has_default:
        return os.environ.get(name, default)

    value = os.environ.get(name)
    if value is None:
        logger.warning("env_var_not_set", var=name)
        return ""
    return value


def substitute_env_vars(text: str) -> str:
    """
    Fill environment placeholders in text.

    ${NAME} becomes "" (with a warning) when NAME is unset;
    ${NAME:-fallback} uses the fallback instead.
    """
    return ENV_PLACEHOLDER.sub(_placeholder_value, text)


class ConfigLoader:
    """Reads YAML files from one config directory."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Args:
            config_dir: Directory holding the files (the packaged
                        config directory when omitted)
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Read one YAML file with placeholders filled.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = self.config_dir / filename
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")

        logger.info("loading_config", file=str(path))
        raw = path.read_text(encoding="utf-8")

        return yaml.safe_load(substitute_env_vars(raw)) or {}

    def load_site(self, filename: str = DEFAULT_CONFIG_FILE) -> SiteConfig:
        """
        Load the site definition.

        Raises:
            ValueError: If site.base_url is missing
        """
        site = SiteConfig.from_dict(self.load_file(filename))

        logger.info(
            "site_loaded",
            base_url=site.base_url,
            seeds=len(site.seeds),
            paginated_sections=len(site.paginated_sections),
        )
        return site


def load_site_config(config_path: Optional[str] = None) -> SiteConfig:
    """Load site.yml from config_path, or the packaged one."""
    if not config_path:
        return ConfigLoader().load_site()

    path = Path(config_path)
    return ConfigLoader(str(path.parent)).load_site(path.name)
