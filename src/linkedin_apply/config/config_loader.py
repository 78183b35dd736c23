"""Central configuration loader for applier.yaml and queries.yaml with env var overrides."""

import os
from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from linkedin_apply.model.job_search_state import MAX_PAGES_PER_QUERY
from linkedin_apply.model.types import Query


class ConfigError(Exception):
    """Raised when a configuration or query file cannot be loaded."""


class LinkedInConfig(BaseModel):
    email: str = ""
    password: str = ""
    cookie_path: str = "./tmp/li_at_cookie.json"


class BrowserConfig(BaseModel):
    headless: bool = False
    use_undetected: bool = True
    browser_type: str = "chrome"
    chrome_version: Optional[int] = None  # Force specific ChromeDriver version
    chrome_binary_path: Optional[str] = None  # Path to Chrome binary
    wait_timeout: float = 10.0
    slow_mo: float = 0.3  # Pause after each click, seconds


class LedgerConfig(BaseModel):
    backend: Literal["json", "sqlite"] = "json"
    path: str = "./tmp/applied_jobs.json"
    db_url: str = "sqlite:///./tmp/applied_jobs.db"
    record_board_applied: bool = False


class RunnerConfig(BaseModel):
    max_pages_per_query: int = Field(default=MAX_PAGES_PER_QUERY, ge=1, le=MAX_PAGES_PER_QUERY)
    max_wizard_steps: int = Field(default=25, ge=1)
    recursion_limit: int = Field(default=1000, ge=25)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_file: Optional[str] = None


class AppConfig(BaseModel):
    linkedin: LinkedInConfig = Field(default_factory=LinkedInConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    queries_path: str = "./config/queries.yaml"


_DEFAULT_CONFIG_PATH = Path("config") / "applier.yaml"
_cached_config: Optional[AppConfig] = None


def _read_yaml(path: Path) -> Dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load config from YAML file and merge with environment variable overrides.

    Priority: env vars > YAML file > defaults. Overrides are validated like
    YAML values, so a bad env value raises ConfigError too.
    """
    global _cached_config

    if _cached_config is not None and config_path is None:
        return _cached_config

    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
    if config_path and not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    data: Dict = _read_yaml(path) if path.exists() else {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")

    # Env var overrides
    env_overrides = {
        "linkedin.email": os.getenv("LINKEDIN_EMAIL"),
        "linkedin.password": os.getenv("LINKEDIN_PASSWORD"),
        "linkedin.cookie_path": os.getenv("LINKEDIN_COOKIE_PATH"),
        "ledger.path": os.getenv("APPLIED_JOBS_PATH"),
        "ledger.backend": os.getenv("LEDGER_BACKEND"),
        "ledger.db_url": os.getenv("LEDGER_DB_URL"),
        "browser.headless": os.getenv("BROWSER_HEADLESS"),
        "observability.log_level": os.getenv("LOG_LEVEL"),
        "queries_path": os.getenv("QUERIES_PATH"),
    }

    for dotted_key, value in env_overrides.items():
        if value is not None:
            parts = dotted_key.split(".")
            section = data
            for part in parts[:-1]:
                if not isinstance(section.get(part), dict):
                    section[part] = {}
                section = section[part]
            section[parts[-1]] = value.strip()

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    if config_path is None:
        _cached_config = config

    return config


def load_queries(queries_path: str) -> List[Query]:
    """Load query definitions, expanding each entry's ``locations`` list.

    An entry with ``locations: [a, b]`` becomes one query per location, in order.
    """
    path = Path(queries_path)
    if not path.exists():
        raise ConfigError(f"Queries file not found: {path}")

    data = _read_yaml(path)
    entries = data.get("queries") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ConfigError(f"{path} must contain a 'queries' list")

    queries: List[Query] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(f"Query #{index} in {path} must be a mapping")
        entry = dict(entry)
        locations = entry.pop("locations", None) or []
        try:
            query = Query(**entry)
        except ValidationError as e:
            raise ConfigError(f"Invalid query #{index} in {path}: {e}") from e

        if locations:
            queries.extend(query.with_location(location) for location in locations)
        else:
            queries.append(query)

    return queries
