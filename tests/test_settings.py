import os
from datetime import timedelta

import pytest

from bazaar.orders import MemoryOrderRepository, OrderService
from bazaar.catalog import MemoryCatalog
from bazaar.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("BAZAAR_"):
            monkeypatch.delenv(key)


def test_defaults():
    settings = Settings.from_env(env_file=None)
    assert settings == Settings()
    assert settings.currency == "TRY"
    assert settings.dedup_window_seconds == 120
    assert settings.allow_self_purchase is False


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("BAZAAR_CURRENCY", "eur")
    monkeypatch.setenv("BAZAAR_DEDUP_WINDOW_SECONDS", "300")
    monkeypatch.setenv("BAZAAR_ALLOW_SELF_PURCHASE", "yes")
    monkeypatch.setenv("BAZAAR_COD_FEE_MINOR", "750")
    monkeypatch.setenv("BAZAAR_LOG_JSON", "true")

    settings = Settings.from_env(env_file=None)

    assert settings.currency == "EUR"
    assert settings.allow_self_purchase is True
    assert settings.log_json is True
    assert settings.guard_policy().window == timedelta(seconds=300)

    rules = settings.rule_book().rules_for("EUR")
    assert rules.currency == "EUR"
    assert rules.cod_fee == 750
    assert rules.standard_cost == 999


def test_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("BAZAAR_STORAGE_RETRIES=3\n")
    assert Settings.from_env(env_file=env_file).storage_retries == 3


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("BAZAAR_DEDUP_WINDOW_SECONDS", "two minutes"),
        ("BAZAAR_DEDUP_WINDOW_SECONDS", "0"),
        ("BAZAAR_COD_FEE_MINOR", "-1"),
        ("BAZAAR_ALLOW_SELF_PURCHASE", "maybe"),
    ],
)
def test_malformed_values_name_the_key(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(RuntimeError, match=key):
        Settings.from_env(env_file=None)


def test_service_from_settings():
    settings = Settings(allow_self_purchase=True, storage_retries=2, dedup_window_seconds=60)
    service = OrderService.from_settings(settings, MemoryCatalog(), MemoryOrderRepository())
    assert service.guard.policy.window == timedelta(seconds=60)
