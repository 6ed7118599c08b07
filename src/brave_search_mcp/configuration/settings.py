"""Server configuration loader"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..shared.errors import ConfigurationError

import logging
logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.search.brave.com/res/v1"
SAFESEARCH_LEVELS = ("off", "moderate", "strict")
LOCAL_ID_POLICIES = ("chunk_all", "truncate")

# Environment variable -> config field
ENV_OVERRIDES = {
    "BRAVE_API_KEY": "api_key",
    "BRAVE_SEARCH_BASE_URL": "base_url",
    "BRAVE_SEARCH_TIMEOUT": "request_timeout",
    "BRAVE_SEARCH_SAFESEARCH": "safesearch",
    "BRAVE_LOCAL_ID_POLICY": "local_id_policy",
    "BRAVE_IMAGE_CACHE_SIZE": "image_cache_size",
    "LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class BraveSearchConfig:
    """Settings for the Brave Search MCP server"""
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = 30.0
    safesearch: str = "strict"
    local_id_policy: str = "chunk_all"
    image_cache_size: int = 50
    log_level: str = "INFO"

    def validated(self) -> "BraveSearchConfig":
        """Return a copy with coerced types, raising ConfigurationError on bad values."""
        if not self.api_key:
            raise ConfigurationError("BRAVE_API_KEY environment variable is required")
        try:
            timeout = float(self.request_timeout)
            cache_size = int(self.image_cache_size)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc
        if timeout <= 0:
            raise ConfigurationError(f"request_timeout must be positive, got {timeout}")
        if cache_size < 1:
            raise ConfigurationError(f"image_cache_size must be at least 1, got {cache_size}")

        safesearch = str(self.safesearch).lower()
        if safesearch not in SAFESEARCH_LEVELS:
            raise ConfigurationError(
                f"safesearch must be one of {', '.join(SAFESEARCH_LEVELS)}, got '{self.safesearch}'"
            )
        policy = str(self.local_id_policy).lower()
        if policy not in LOCAL_ID_POLICIES:
            raise ConfigurationError(
                f"local_id_policy must be one of {', '.join(LOCAL_ID_POLICIES)}, got '{self.local_id_policy}'"
            )
        return replace(
            self,
            base_url=str(self.base_url).rstrip("/"),
            request_timeout=timeout,
            safesearch=safesearch,
            local_id_policy=policy,
            image_cache_size=cache_size,
            log_level=str(self.log_level).upper(),
        )


def default_config_path(environ: Optional[Dict[str, str]] = None) -> Path:
    """Location of brave_search.yaml when no explicit path is given."""
    environ = os.environ if environ is None else environ
    env_path = environ.get("BRAVE_SEARCH_CONFIG")
    if env_path:
        return Path(env_path)
    current_file = Path(__file__).resolve()
    project_root = current_file.parents[3]  # Up 3 levels from src/brave_search_mcp/configuration/settings.py
    return project_root / "brave_search.yaml"


def load_config_file(
    path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Load settings from a YAML file.

    Returns:
        Mapping of config field names to values.
        Empty if the file does not exist.
    """
    config_file = Path(path) if path is not None else default_config_path(environ)

    if not config_file.exists():
        logger.warning(f"{config_file} not found, using default settings")
        return {}

    with open(config_file, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_file} must contain a mapping, got {type(data).__name__}")

    section = data.get("brave_search", data) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"{config_file}: brave_search must be a mapping")
    known = {f.name for f in fields(BraveSearchConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning(f"Ignoring unknown settings in {config_file}: {', '.join(unknown)}")
    return {key: value for key, value in section.items() if key in known}


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> BraveSearchConfig:
    """Build the server configuration.

    Precedence, lowest first: defaults, YAML file, environment variables.

    Args:
        path: Explicit YAML file. Defaults to ``BRAVE_SEARCH_CONFIG`` or the
            project root ``brave_search.yaml``.
        environ: Environment mapping, ``os.environ`` if omitted.

    Raises:
        ConfigurationError: If the API key is missing or a value is invalid.
    """
    environ = os.environ if environ is None else environ
    values = load_config_file(path, environ)

    for env_name, field_name in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            values[field_name] = value

    return BraveSearchConfig(**values).validated()
