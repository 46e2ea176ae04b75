"""
Calculators Package

Provides all calculation components for contract processing.
"""

from .amendments import AmendmentLedger, annual_from_monthly, apply_amendment, snapshot_initial_values
from .currency import CurrencyFormatter, format_currency, parse_currency, quantize_money
from .deadlines import DeadlineCalculator, compute_deadlines
from .financial import EntryPayloadBuilder, compute_net, gross_value

__all__ = [
    "AmendmentLedger",
    "CurrencyFormatter",
    "DeadlineCalculator",
    "EntryPayloadBuilder",
    "annual_from_monthly",
    "apply_amendment",
    "compute_deadlines",
    "compute_net",
    "format_currency",
    "gross_value",
    "parse_currency",
    "quantize_money",
    "snapshot_initial_values",
]
