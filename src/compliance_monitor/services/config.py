"""
Loads and handles config from config.yml
Secrets (FORWARD_SECRET, NEWSAPI_KEY, MEDIASTACK_KEY) are loaded from .env
"""
import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

from compliance_monitor.ingestion.base import SourceReliability

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_QUERY = "tariff OR embargo OR sanctions OR \"export ban\" OR \"import quota\""


class SourceConfig(BaseModel):
    """Configuration for a single upstream source."""
    type: str  # newsapi, mediastack, rss, simulated
    enabled: bool = True
    name: Optional[str] = None
    reliability: SourceReliability = SourceReliability.MEDIUM
    feeds: Optional[List[str]] = None  # For rss
    base_url: Optional[str] = None  # For newsapi / mediastack
    api_key: Optional[str] = None  # Resolved from the environment


class Config(BaseModel):
    # State
    DATA_DIR: str = "data"
    STATE_BACKEND: str = "json"  # json, sqlite, memory
    DATABASE_PATH: str = "data/compliance.db"

    # Scheduling
    CHECK_INTERVAL_MINUTES: int = 20
    RUN_ON_STARTUP: bool = True

    # Extraction
    SEARCH_QUERY: str = DEFAULT_SEARCH_QUERY
    MIN_CONFIDENCE: int = 70
    FETCH_TIMEOUT_SECONDS: float = 10.0

    # Forwarding
    FORWARD_ENDPOINT: Optional[str] = None
    FORWARD_SECRET: Optional[str] = None
    FORWARD_SECRET_HEADER: str = "X-API-Key"
    FORWARD_TIMEOUT_SECONDS: float = 10.0

    # Web
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    sources: List[SourceConfig] = []


def _bool(value: str | bool) -> bool:
    """Convert string or bool to boolean."""
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("1", "true", "yes", "on")


def _get_config_path() -> str:
    """Get the path to config.yml, handling different working directories."""
    env_path = os.getenv("COMPLIANCE_CONFIG")
    if env_path:
        return env_path

    # Try relative path first
    if os.path.exists('resources/config.yml'):
        return 'resources/config.yml'

    # Try from project root
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
    config_path = os.path.join(project_root, 'resources', 'config.yml')
    if os.path.exists(config_path):
        return config_path

    raise FileNotFoundError("Cannot find resources/config.yml")


_API_KEY_ENV = {
    "newsapi": "NEWSAPI_KEY",
    "mediastack": "MEDIASTACK_KEY",
}


def _parse_source_config(data: Dict[str, Any]) -> SourceConfig:
    """Parse a single source entry from YAML data."""
    source_type = str(data.get("type", "")).lower()
    key_env = data.get("api_key_env") or _API_KEY_ENV.get(source_type)

    return SourceConfig(
        type=source_type,
        enabled=_bool(data.get("enabled", True)),
        name=data.get("name"),
        reliability=data.get("reliability", SourceReliability.MEDIUM),
        feeds=data.get("feeds"),
        base_url=data.get("base_url"),
        api_key=os.getenv(key_env) if key_env else None,
    )


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from config.yml and secrets from .env."""
    # Load .env for sensitive credentials
    load_dotenv()

    config_path = path or _get_config_path()

    with open(config_path, 'r', encoding='utf-8') as file:
        config = yaml.safe_load(file) or {}

    sources = []
    for src in config.get("sources", []) or []:
        try:
            sources.append(_parse_source_config(src))
        except Exception as e:
            logger.error(f"Failed to parse source '{src}': {e}")

    defaults = Config()

    return Config(
        DATA_DIR=config.get("DATA_DIR", defaults.DATA_DIR),
        STATE_BACKEND=str(config.get("STATE_BACKEND", defaults.STATE_BACKEND)).lower(),
        DATABASE_PATH=config.get("DATABASE_PATH", defaults.DATABASE_PATH),

        CHECK_INTERVAL_MINUTES=int(config.get("CHECK_INTERVAL_MINUTES", defaults.CHECK_INTERVAL_MINUTES)),
        RUN_ON_STARTUP=_bool(config.get("RUN_ON_STARTUP", defaults.RUN_ON_STARTUP)),

        SEARCH_QUERY=config.get("SEARCH_QUERY", defaults.SEARCH_QUERY),
        MIN_CONFIDENCE=int(config.get("MIN_CONFIDENCE", defaults.MIN_CONFIDENCE)),
        FETCH_TIMEOUT_SECONDS=float(config.get("FETCH_TIMEOUT_SECONDS", defaults.FETCH_TIMEOUT_SECONDS)),

        FORWARD_ENDPOINT=os.getenv("FORWARD_ENDPOINT") or config.get("FORWARD_ENDPOINT"),
        FORWARD_SECRET=os.getenv("FORWARD_SECRET"),
        FORWARD_SECRET_HEADER=config.get("FORWARD_SECRET_HEADER", defaults.FORWARD_SECRET_HEADER),
        FORWARD_TIMEOUT_SECONDS=float(config.get("FORWARD_TIMEOUT_SECONDS", defaults.FORWARD_TIMEOUT_SECONDS)),

        HOST=config.get("HOST", defaults.HOST),
        PORT=int(os.getenv("PORT") or config.get("PORT", defaults.PORT)),

        sources=sources,
    )


def get_enabled_sources(config: Config) -> List[SourceConfig]:
    """Get only enabled sources from the config."""
    return [src for src in config.sources if src.enabled]
