"""
Finance Settings for the Comex credit engine.

Default rates and terms offered when an administrator finalizes a credit
application without overriding them.

Environment variables use the FINANCE_ prefix:
    FINANCE_DEFAULT_DOWN_PAYMENT_RATE=30
    FINANCE_DEFAULT_ADMIN_FEE_RATE=10
    FINANCE_DEFAULT_TERMS=[30,60,90,120]
"""

from decimal import Decimal
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FinanceSettings(BaseSettings):
    """
    Configurable financial defaults.

    Rates are percentages in [0, 100]. Terms are installment day-counts.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_down_payment_rate: Decimal = Field(
        default=Decimal("30"),
        ge=0,
        le=100,
        description="Down payment percentage applied when none is set at finalization",
    )
    default_admin_fee_rate: Decimal = Field(
        default=Decimal("10"),
        ge=0,
        le=100,
        description="Admin fee percentage (on the financed amount) when none is set",
    )
    default_terms: List[int] = Field(
        default=[30, 60, 90, 120],
        description="Installment day-counts when none are set",
    )

    @field_validator("default_terms")
    @classmethod
    def validate_terms(cls, v: List[int]) -> List[int]:
        if not v:
            raise ValueError("default_terms cannot be empty")
        if any(term <= 0 for term in v):
            raise ValueError("default_terms must be positive day-counts")
        return v


@lru_cache
def get_finance_settings() -> FinanceSettings:
    """Get cached finance settings instance."""
    return FinanceSettings()


finance_settings = get_finance_settings()
