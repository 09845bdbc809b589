"""
Financial Computation Module for the Comex credit engine
"""

from .calculator import FinancialBreakdown, calculate_financials, parse_terms
from .settings import FinanceSettings, finance_settings

__all__ = [
    "FinanceSettings",
    "finance_settings",
    "FinancialBreakdown",
    "calculate_financials",
    "parse_terms",
]
