"""Configuration system - Settings loading from YAML and environment"""

from .settings import BraveSearchConfig, load_config

__all__ = [
    "BraveSearchConfig",
    "load_config",
]
