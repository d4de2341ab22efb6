"""
Tests for advisory processing fee estimates
"""

from decimal import Decimal

from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.pricing.fees import (
    calculate_processing_fees,
    is_domestic_card,
    processing_fee_label,
)


def test_pass_to_customer_domestic() -> None:
    """(100 + 0.30) / (1 - 0.017) = 102.0346 -> 102.03"""
    fees = calculate_processing_fees(Decimal("100.00"))

    assert fees.subtotal == Decimal("100.00")
    assert fees.total == Decimal("102.03")
    assert fees.processing_fee == Decimal("2.03")
    assert fees.platform_fee == Decimal("0.00")
    assert fees.fee_mode == "pass_to_customer"
    assert fees.is_domestic is True


def test_pass_to_customer_international() -> None:
    fees = calculate_processing_fees(Decimal("100.00"), is_domestic=False)

    assert fees.total == Decimal("103.94")
    assert fees.processing_fee == Decimal("3.94")
    assert fees.is_domestic is False


def test_full_weekend_package_fee() -> None:
    fees = calculate_processing_fees(Decimal("180.00"))

    assert fees.total == Decimal("183.42")
    assert fees.processing_fee == Decimal("3.42")


def test_absorb_keeps_total_at_subtotal() -> None:
    fees = calculate_processing_fees(Decimal("100.00"), fee_mode="absorb")

    assert fees.total == Decimal("100.00")
    assert fees.processing_fee == Decimal("2.00")
    assert fees.fee_mode == "absorb"


def test_policy_fee_mode_is_default() -> None:
    fees = calculate_processing_fees(Decimal("100.00"), EnginePolicy(fee_mode="absorb"))
    assert fees.fee_mode == "absorb"


def test_platform_fee_on_subtotal_only() -> None:
    policy = EnginePolicy(platform_fee_percentage=Decimal("0.05"))

    fees = calculate_processing_fees(Decimal("100.00"), policy)

    assert fees.platform_fee == Decimal("5.00")
    assert fees.total == Decimal("102.03")


def test_zero_subtotal_has_no_fees() -> None:
    fees = calculate_processing_fees(Decimal("0"))

    assert fees.subtotal == Decimal("0.00")
    assert fees.processing_fee == Decimal("0.00")
    assert fees.total == Decimal("0.00")


def test_fee_breakdown_wire_shape() -> None:
    wire = calculate_processing_fees(Decimal("100.00")).to_wire()

    assert wire["processingFee"] == "2.03"
    assert wire["feeMode"] == "pass_to_customer"


def test_is_domestic_card() -> None:
    assert is_domestic_card("AU")
    assert is_domestic_card("au")
    assert not is_domestic_card("NZ")
    assert not is_domestic_card(None)
    assert is_domestic_card("NZ", domestic_country="NZ")


def test_processing_fee_label() -> None:
    assert processing_fee_label(True) == "Processing Fee"
    assert processing_fee_label(False) == "International Processing Fee"
