"""
Settings: process environment, optionally seeded from a .env file.

Every key is prefixed with BAZAAR_. A malformed value fails loudly at
startup with a RuntimeError naming the key.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from bazaar._types import DEFAULT_CURRENCY
from bazaar.guard import GuardPolicy
from bazaar.pricing import COD_FEE, EXPRESS_COST, FREE_SHIPPING_THRESHOLD, STANDARD_COST, PricingRules, RuleBook

PREFIX = "BAZAAR_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _get_str(env: Mapping[str, str | None], name: str, fallback: str) -> str:
    raw_value = env.get(PREFIX + name)
    if raw_value is None or not raw_value.strip():
        return fallback
    return raw_value.strip()


def _get_int(env: Mapping[str, str | None], name: str, fallback: int, minimum: int = 0) -> int:
    raw_value = env.get(PREFIX + name)
    if raw_value is None or not raw_value.strip():
        return fallback
    try:
        value = int(raw_value.strip())
    except ValueError:
        raise RuntimeError(f"Invalid integer in environment variable: {PREFIX}{name}={raw_value!r}") from None
    if value < minimum:
        raise RuntimeError(f"Environment variable {PREFIX}{name} must be >= {minimum}, got {value}")
    return value


def _get_bool(env: Mapping[str, str | None], name: str, fallback: bool) -> bool:
    raw_value = env.get(PREFIX + name)
    if raw_value is None:
        return fallback
    lowered = raw_value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise RuntimeError(f"Invalid boolean in environment variable: {PREFIX}{name}={raw_value!r}")


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite+aiosqlite:///./bazaar.db"
    currency: str = DEFAULT_CURRENCY
    dedup_window_seconds: int = 120
    allow_self_purchase: bool = False
    free_shipping_threshold_minor: int = FREE_SHIPPING_THRESHOLD
    standard_shipping_minor: int = STANDARD_COST
    express_shipping_minor: int = EXPRESS_COST
    cod_fee_minor: int = COD_FEE
    storage_retries: int = 1
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, env_file: str | Path | None = ".env") -> "Settings":
        """Read settings; the process environment wins over the .env file."""
        env: dict[str, str | None] = {}
        if env_file is not None:
            env.update(dotenv_values(env_file))
        env.update(os.environ)

        return cls(
            database_url=_get_str(env, "DATABASE_URL", cls.database_url),
            currency=_get_str(env, "CURRENCY", cls.currency).upper(),
            dedup_window_seconds=_get_int(env, "DEDUP_WINDOW_SECONDS", cls.dedup_window_seconds, minimum=1),
            allow_self_purchase=_get_bool(env, "ALLOW_SELF_PURCHASE", cls.allow_self_purchase),
            free_shipping_threshold_minor=_get_int(
                env, "FREE_SHIPPING_THRESHOLD_MINOR", cls.free_shipping_threshold_minor
            ),
            standard_shipping_minor=_get_int(env, "STANDARD_SHIPPING_MINOR", cls.standard_shipping_minor),
            express_shipping_minor=_get_int(env, "EXPRESS_SHIPPING_MINOR", cls.express_shipping_minor),
            cod_fee_minor=_get_int(env, "COD_FEE_MINOR", cls.cod_fee_minor),
            storage_retries=_get_int(env, "STORAGE_RETRIES", cls.storage_retries),
            log_level=_get_str(env, "LOG_LEVEL", cls.log_level).upper(),
            log_json=_get_bool(env, "LOG_JSON", cls.log_json),
        )

    def pricing_rules(self) -> PricingRules:
        return (
            PricingRules()
            .with_currency(self.currency)
            .with_free_shipping(threshold=self.free_shipping_threshold_minor)
            .with_shipping(standard=self.standard_shipping_minor, express=self.express_shipping_minor)
            .with_cod_fee(self.cod_fee_minor)
        )

    def rule_book(self) -> RuleBook:
        return RuleBook(default=self.pricing_rules())

    def guard_policy(self) -> GuardPolicy:
        return GuardPolicy().with_window(seconds=self.dedup_window_seconds)


__all__ = (
    "PREFIX",
    "Settings",
)
