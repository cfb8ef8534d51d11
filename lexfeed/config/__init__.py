"""Configuration management for the legal feed pipeline."""

from .loader import Config, load_config, load_sources, save_config, save_sources
from .models import (
    ConfigModel,
    EnrichmentConfig,
    HttpConfig,
    JudgmentsConfig,
    LLMConfig,
    PostgresConfig,
    RelevanceConfig,
    SourceConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "EnrichmentConfig",
    "HttpConfig",
    "JudgmentsConfig",
    "LLMConfig",
    "PostgresConfig",
    "RelevanceConfig",
    "SourceConfig",
    "load_config",
    "load_sources",
    "save_config",
    "save_sources",
]
