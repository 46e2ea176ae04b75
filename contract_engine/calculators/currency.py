"""
Currency Formatter/Parser

Monetary input fields are typed as an unbroken digit stream interpreted as
cents: typing "12345" yields R$ 123,45. Display uses the pt-BR convention
(thousands '.', decimals ',').
"""

import re
from decimal import ROUND_HALF_UP, Decimal

from ..exceptions import InvalidInput

CENT = Decimal("0.01")

# Swap US separators for pt-BR ones in a single pass
_BR_SEPARATORS = str.maketrans({",": ".", ".": ","})


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places using ROUND_HALF_UP."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class CurrencyFormatter:
    """Round-trips monetary values through their pt-BR display form."""

    SYMBOL = "R$"

    def format(self, value) -> str:
        """Render with exactly two decimals: 1234.5 -> '1.234,50'."""
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidInput(f"Cannot format a non-finite value: {value!r}")
        amount = quantize_money(amount)
        sign = "-" if amount < 0 else ""
        return sign + f"{abs(amount):,.2f}".translate(_BR_SEPARATORS)

    def format_brl(self, value) -> str:
        """Render with the currency symbol: 'R$ 1.234,50'."""
        return f"{self.SYMBOL} {self.format(value)}"

    def parse(self, display: str | None) -> Decimal:
        """
        Read a display string back as a value.

        Every non-digit is ignored and the digits are taken as cents, so
        '1.234,56', '123456' and 'R$ 1.234,56' all parse to 1234.56. A leading
        '-' makes the value negative. Empty or digit-less input parses to 0.
        """
        text = (display or "").strip()
        digits = re.sub(r"\D", "", text)
        if not digits:
            return Decimal("0.00")

        amount = (Decimal(int(digits)) * CENT).quantize(CENT)
        return -amount if text.startswith("-") else amount


_formatter = CurrencyFormatter()


def parse_currency(display: str | None) -> Decimal:
    return _formatter.parse(display)


def format_currency(value) -> str:
    return _formatter.format(value)
