from .loader import ConfigError, DatabaseConfig, ImportConfig, load_config
from .schema_resolver import resolve_schema

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "ImportConfig",
    "load_config",
    "resolve_schema",
]
