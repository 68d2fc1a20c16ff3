"""
Configuration loader for paperledger.

What it does:
- Reads static settings from `config/config.yaml` (all sections optional;
  a missing file means defaults).
- Applies deployment overrides from environment variables:
  `PAPER_TRADES_FILE`, `PAPER_TRADES_JOURNAL`, `CLOB_HTTP_URL`,
  `PROMETHEUS_PORT`.
- Validates the result with Pydantic models.

Where it is used:
- Called by `paperledger.main` to build the ledger engine, its store and its
  quote source.
"""

import os
import yaml
from typing import Any, Dict
from pydantic import BaseModel, Field
import pathlib


class LedgerConfig(BaseModel):
    """Where the ledger lives and how positions are closed."""
    path: str = "paper_trades.json"
    # positions at or below this many tokens count as closed
    dust_tokens: float = Field(default=0.01, ge=0)
    # warn when a dust closure discards more cost basis than this (USD)
    residual_warn_usd: float = Field(default=0.01, ge=0)
    journal_path: str = ""


class MarketDataConfig(BaseModel):
    clob_http_url: str = "https://clob.polymarket.com"
    timeout_s: float = Field(default=10.0, gt=0)


class MetricsConfig(BaseModel):
    port: int = Field(default=0, ge=0)


class Settings(BaseModel):
    """Runtime settings assembled from YAML + environment variables."""
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    market_data: MarketDataConfig = Field(default_factory=MarketDataConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)


_ENV_OVERRIDES = {
    "PAPER_TRADES_FILE": ("ledger", "path"),
    "PAPER_TRADES_JOURNAL": ("ledger", "journal_path"),
    "CLOB_HTTP_URL": ("market_data", "clob_http_url"),
    "PROMETHEUS_PORT": ("metrics", "port"),
}


def _read_yaml(path: str) -> Dict[str, Any]:
    p = pathlib.Path(path)
    if not p.exists():
        return {}
    with open(p, "r") as f:
        return yaml.safe_load(f) or {}


def load_settings(path: str = "config/config.yaml") -> Settings:
    """Load YAML config, apply env-var overrides, and return Settings."""
    config = _read_yaml(path)
    for section in ("ledger", "market_data", "metrics"):
        if config.get(section) is None:
            config[section] = {}
    for env_name, (section, field) in _ENV_OVERRIDES.items():
        val = os.getenv(env_name)
        if val:
            config[section][field] = val
    return Settings(**config)
