"""
Tests for EnginePolicy, money helpers and the error hierarchy
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from lodgetix_registration.kernel.errors import (
    CatalogEntryNotFound,
    ConfigurationError,
    DraftDecodeError,
    DraftNotFound,
    EmptyPackageIncludes,
    InvalidQuantity,
    InvariantViolation,
    LodgetixError,
    ModeMismatch,
    NegativePrice,
    PersistenceError,
)
from lodgetix_registration.kernel.money import format_currency, quantize_money
from lodgetix_registration.kernel.policy import CardFeeRate, EnginePolicy


# Policy


def test_policy_defaults() -> None:
    policy = EnginePolicy()

    assert policy.currency == "AUD"
    assert policy.low_stock_threshold == 10
    assert policy.fee_mode == "pass_to_customer"
    assert policy.card_rate(True).percentage == Decimal("0.017")
    assert policy.card_rate(False).percentage == Decimal("0.035")


def test_policy_from_env_overrides() -> None:
    """Only LODGETIX_* variables that are set override defaults"""
    policy = EnginePolicy.from_env(
        {
            "LODGETIX_CURRENCY": "NZD",
            "LODGETIX_RETRY_ATTEMPTS": "5",
            "LODGETIX_FEE_MODE": "absorb",
            "LODGETIX_DRAFT_API_BASE_URL": "https://lodgetix.example",
            "UNRELATED": "ignored",
        }
    )

    assert policy.currency == "NZD"
    assert policy.retry_attempts == 5
    assert policy.fee_mode == "absorb"
    assert policy.draft_api_base_url == "https://lodgetix.example"
    assert policy.low_stock_threshold == 10


def test_policy_from_env_rejects_invalid_values() -> None:
    with pytest.raises(ValidationError):
        EnginePolicy.from_env({"LODGETIX_FEE_MODE": "split"})

    with pytest.raises(ValidationError):
        EnginePolicy.from_env({"LODGETIX_RETRY_ATTEMPTS": "0"})


def test_card_fee_rate_describe() -> None:
    rate = CardFeeRate(percentage=Decimal("0.017"), fixed=Decimal("0.30"))
    assert rate.describe("AUD") == "1.7% + $0.30 AUD"


def test_card_fee_rate_must_be_below_one() -> None:
    with pytest.raises(ValidationError):
        CardFeeRate(percentage=Decimal("1"), fixed=Decimal("0"))


# Money


def test_quantize_money_rounds_half_up() -> None:
    assert quantize_money(Decimal("2.005")) == Decimal("2.01")
    assert quantize_money(Decimal("2.004")) == Decimal("2.00")
    assert quantize_money(180) == Decimal("180.00")
    assert str(quantize_money("3900")) == "3900.00"


def test_format_currency() -> None:
    assert format_currency(Decimal("3900")) == "$3,900.00"
    assert format_currency(Decimal("180")) == "$180.00"
    assert format_currency(Decimal("0")) == "$0.00"


# Errors


def test_error_hierarchy() -> None:
    assert issubclass(EmptyPackageIncludes, ConfigurationError)
    assert issubclass(CatalogEntryNotFound, ConfigurationError)
    assert issubclass(InvalidQuantity, InvariantViolation)
    assert issubclass(NegativePrice, InvariantViolation)
    assert issubclass(DraftNotFound, PersistenceError)
    assert issubclass(DraftDecodeError, PersistenceError)
    for error in (ConfigurationError, InvariantViolation, ModeMismatch, PersistenceError):
        assert issubclass(error, LodgetixError)


def test_error_messages_carry_context() -> None:
    assert "pkg_empty" in str(EmptyPackageIncludes("pkg_empty"))
    assert str(CatalogEntryNotFound("package", "pkg_x")) == "Package pkg_x not found in captured catalog"
    assert "unset" in str(ModeMismatch("add_package_selection", None))

    error = InvalidQuantity("pkg_789", 0)
    assert error.item_id == "pkg_789"
    assert error.quantity == 0


def test_persistence_error_retryability() -> None:
    assert PersistenceError("network down").retryable is True
    assert DraftNotFound("draft_1").retryable is False

    decode = DraftDecodeError("bad shape", draft_id="draft_1")
    assert decode.retryable is False
    assert decode.draft_id == "draft_1"
    assert decode.reason == "bad shape"
