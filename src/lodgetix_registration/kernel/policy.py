"""
Engine Policy - Configuration for pricing, availability and draft persistence

The EnginePolicy gathers every tunable the engine reads: currency, the
low-stock threshold used in availability snapshots, advisory card-fee
rates, and how to reach the draft API.

Values can be overridden from LODGETIX_* environment variables with
EnginePolicy.from_env().
"""

import os
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field

ENV_PREFIX = "LODGETIX_"


class CardFeeRate(BaseModel):
    """Percentage + fixed card processing rate"""

    percentage: Decimal = Field(..., ge=0, lt=1)
    fixed: Decimal = Field(..., ge=0)

    def describe(self, currency: str) -> str:
        """Human-readable rate, e.g. '1.7% + $0.30 AUD'"""
        percent = (self.percentage * 100).normalize()
        return f"{percent}% + ${self.fixed:.2f} {currency}"


class EnginePolicy(BaseModel):
    """
    Registration engine configuration

    Pricing produced under this policy is advisory: final amounts are
    reconciled server-side before payment capture.
    """

    currency: str = Field(
        default="AUD",
        min_length=3,
        max_length=3,
        description="ISO currency code for all captured prices",
    )

    low_stock_threshold: int = Field(
        default=10,
        ge=0,
        description="Available count at or below which a ticket is reported as low stock",
    )

    # Advisory processing fee estimate
    domestic_card_rate: CardFeeRate = Field(
        default=CardFeeRate(percentage=Decimal("0.017"), fixed=Decimal("0.30")),
        description="Card fee rate for domestic cards",
    )

    international_card_rate: CardFeeRate = Field(
        default=CardFeeRate(percentage=Decimal("0.035"), fixed=Decimal("0.30")),
        description="Card fee rate for international cards",
    )

    platform_fee_percentage: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        lt=1,
        description="Platform fee, always calculated on the subtotal only",
    )

    fee_mode: Literal["pass_to_customer", "absorb"] = Field(
        default="pass_to_customer",
        description="Whether processing fees are added to the total or absorbed",
    )

    # Draft persistence
    draft_api_base_url: str = Field(
        default="http://localhost:3000",
        description="Root URL of the draft-save API",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for a single draft API request",
    )

    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for transient draft API failures",
    )

    retry_min_wait_ms: int = Field(default=100, ge=0)
    retry_max_wait_ms: int = Field(default=1000, ge=0)

    def card_rate(self, is_domestic: bool = True) -> CardFeeRate:
        """Get the card fee rate for a domestic or international card"""
        return self.domestic_card_rate if is_domestic else self.international_card_rate

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "EnginePolicy":
        """
        Build a policy from LODGETIX_* environment variables

        Unset variables keep their defaults. Recognised variables:
        LODGETIX_CURRENCY, LODGETIX_LOW_STOCK_THRESHOLD,
        LODGETIX_PLATFORM_FEE_PERCENTAGE, LODGETIX_FEE_MODE,
        LODGETIX_DRAFT_API_BASE_URL, LODGETIX_HTTP_TIMEOUT_SECONDS,
        LODGETIX_RETRY_ATTEMPTS

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated EnginePolicy

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        for field_name in (
            "currency",
            "low_stock_threshold",
            "platform_fee_percentage",
            "fee_mode",
            "draft_api_base_url",
            "http_timeout_seconds",
            "retry_attempts",
        ):
            value = env.get(f"{ENV_PREFIX}{field_name.upper()}")
            if value is not None:
                overrides[field_name] = value
        return cls(**overrides)
