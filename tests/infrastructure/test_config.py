"""Tests for settings loading and the objects built from them."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from mycomarket.domain.model.order import OrderStatus
from mycomarket.infrastructure import bootstrap
from mycomarket.infrastructure.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    bootstrap.session_factory.cache_clear()
    bootstrap.engine.cache_clear()


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MYCOMARKET_PLATFORM_FEE_PERCENTAGE", raising=False)
        settings = Settings(_env_file=None)

        assert settings.platform_fee_percentage == Decimal("10")
        assert settings.finalized_order_status == "DELIVERED"
        assert settings.sweep_interval_seconds == 60
        assert settings.conflict_retry_attempts == 3

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MYCOMARKET_PLATFORM_FEE_PERCENTAGE", "12.5")
        monkeypatch.setenv("MYCOMARKET_FINALIZED_ORDER_STATUS", "CONFIRMED")
        monkeypatch.setenv("MYCOMARKET_SWEEP_BATCH_SIZE", "25")

        settings = Settings(_env_file=None)

        assert settings.platform_fee_percentage == Decimal("12.5")
        assert settings.finalized_order_status == "CONFIRMED"
        assert settings.sweep_batch_size == 25

    @pytest.mark.parametrize("name, value", [
        ("MYCOMARKET_PLATFORM_FEE_PERCENTAGE", "101"),
        ("MYCOMARKET_PLATFORM_FEE_PERCENTAGE", "-1"),
        ("MYCOMARKET_FINALIZED_ORDER_STATUS", "SHIPPED"),
        ("MYCOMARKET_SWEEP_INTERVAL_SECONDS", "0"),
        ("MYCOMARKET_CONFLICT_RETRY_ATTEMPTS", "0"),
    ])
    def test_invalid_values_rejected(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestBootstrap:

    def test_ledger_policy_follows_settings(self, monkeypatch):
        monkeypatch.setenv("MYCOMARKET_PLATFORM_FEE_PERCENTAGE", "7")
        monkeypatch.setenv("MYCOMARKET_FINALIZED_ORDER_STATUS", "CONFIRMED")

        policy = bootstrap.ledger_policy()

        assert policy.commission_percentage == Decimal("7")
        assert policy.finalized_status == OrderStatus.CONFIRMED

    def test_sweep_handler_uses_configured_batch(self, monkeypatch):
        monkeypatch.setenv("MYCOMARKET_SWEEP_BATCH_SIZE", "5")
        monkeypatch.setenv("MYCOMARKET_CONFLICT_RETRY_ATTEMPTS", "4")

        handler = bootstrap.sweep_handler()

        assert handler.retry_attempts == 4
        assert handler._batch_size == 5
