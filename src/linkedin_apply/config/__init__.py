from linkedin_apply.config.config_loader import (
    AppConfig,
    ConfigError,
    load_config,
    load_queries,
)

__all__ = ["AppConfig", "ConfigError", "load_config", "load_queries"]
