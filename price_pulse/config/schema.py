"""
Configuration schema and loading.

Tracked pairs, schedule cadence, price-source and Telegram settings. Values
come from an optional YAML file, with secrets read from the environment
(``.env`` supported). The bot token is never read from YAML.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class CurrencyDescriptor(BaseModel):
    """Locale and currency code used to render one side of a pair."""

    model_config = ConfigDict(frozen=True)

    locale: str
    currency: str

    @field_validator("locale")
    @classmethod
    def _normalize_locale(cls, v: str) -> str:
        # Babel expects en_US, config may say en-US
        v = v.strip().replace("-", "_")
        if not v:
            raise ValueError("locale must not be empty")
        return v

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("currency must not be empty")
        return v


class TrackedPair(BaseModel):
    """An asset-price pair the service reports on."""

    model_config = ConfigDict(frozen=True)

    pair_id: str
    base: CurrencyDescriptor
    quote: CurrencyDescriptor

    @field_validator("pair_id")
    @classmethod
    def _normalize_pair_id(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("pair_id must not be empty")
        return v


def default_pairs() -> List[TrackedPair]:
    return [
        TrackedPair(
            pair_id="USDTIRT",
            base=CurrencyDescriptor(locale="en-US", currency="USD"),
            quote=CurrencyDescriptor(locale="fa-IR", currency="IRR"),
        ),
        TrackedPair(
            pair_id="BTCIRT",
            base=CurrencyDescriptor(locale="en-US", currency="BTC"),
            quote=CurrencyDescriptor(locale="fa-IR", currency="IRR"),
        ),
    ]


class TelegramConfig(BaseModel):
    bot_token: str = Field(default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN", ""))
    # Private chats only unless explicitly enabled
    allow_groups: bool = False
    send_timeout_s: float = 10.0

    def require_token(self) -> str:
        if not self.bot_token:
            raise RuntimeError("TELEGRAM_BOT_TOKEN is required but not provided or set in environment")
        return self.bot_token


class PriceSourceConfig(BaseModel):
    base_url: str = "https://api.nobitex.ir"
    timeout_s: float = 10.0

    @field_validator("timeout_s")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_s must be positive")
        return v


class ScheduleConfig(BaseModel):
    tick_interval_s: float = 30 * 60
    fetch_timeout_s: float = 15.0
    run_on_start: bool = False

    @field_validator("tick_interval_s", "fetch_timeout_s")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("intervals and timeouts must be positive")
        return v


class AppConfig(BaseModel):
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    price_source: PriceSourceConfig = Field(default_factory=PriceSourceConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    pairs: List[TrackedPair] = Field(default_factory=default_pairs)

    @field_validator("pairs")
    @classmethod
    def _unique_pairs(cls, v: List[TrackedPair]) -> List[TrackedPair]:
        if not v:
            raise ValueError("at least one tracked pair is required")
        seen = set()
        for pair in v:
            if pair.pair_id in seen:
                raise ValueError(f"duplicate pair_id: {pair.pair_id}")
            seen.add(pair.pair_id)
        return v


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load configuration from an optional YAML file and the environment.

    Args:
        path: YAML config path. A ``.env`` next to it is loaded first. When
            omitted, only ``.env`` in the working directory and the process
            environment are used.

    Raises:
        RuntimeError: If the YAML is unreadable or fails validation
    """
    data: dict = {}
    if path is not None:
        path = Path(path)
        load_dotenv(path.parent / ".env", override=True)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            raise RuntimeError(f"Config file not found: {path}") from e
        except yaml.YAMLError as e:
            raise RuntimeError(f"Invalid YAML in config: {e}") from e
        if not isinstance(data, dict):
            raise RuntimeError(f"Config root must be a mapping: {path}")
    else:
        load_dotenv()

    # Non-mapping sections are left for pydantic to reject
    telegram = data.get("telegram") or {}
    if isinstance(telegram, dict) and "bot_token" in telegram:
        logger.warning("Ignoring telegram.bot_token from config file; use TELEGRAM_BOT_TOKEN")
        telegram = {k: v for k, v in telegram.items() if k != "bot_token"}
        data = {**data, "telegram": telegram}

    try:
        cfg = AppConfig(**data)
    except ValidationError as e:
        raise RuntimeError(f"Invalid config: {e}") from e

    logger.info(
        "Config loaded: %d pairs, tick every %ss",
        len(cfg.pairs),
        cfg.schedule.tick_interval_s,
    )
    return cfg
