"""
Output Builder

Constructs API responses and persistence payloads from calculation results.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from .calculators.currency import CurrencyFormatter
from .models import DeadlineInfo, FinancialEntry, UpdatedContract

_currency = CurrencyFormatter()


def to_money(value: Decimal | None) -> float | None:
    """Convert Decimal to float with 2 decimal places."""
    if value is None:
        return None
    return round(float(value), 2)


def _fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return _currency.format_brl(value)


def jsonable(value):
    """Recursively convert Decimals, dates and enums into JSON-friendly values."""
    if isinstance(value, Decimal):
        return to_money(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(item) for item in value]
    return value


class OutputBuilder:
    """Builds the final output responses."""

    def build_deadlines(self, info: DeadlineInfo) -> dict:
        if info.suggestion is not None:
            return {
                "mode": "suggestion",
                "suggested_expiration": info.suggestion.suggested_expiration.isoformat(),
                "legal_limit": info.suggestion.legal_limit.isoformat(),
            }

        report = info.report
        return {
            "mode": "report",
            "expiration_date": report.expiration_date.isoformat(),
            "today": report.today.isoformat(),
            "days_remaining": report.days_remaining,
            "renewal_request_deadline": report.renewal_request_deadline.isoformat(),
            "is_expired": report.is_expired,
            "is_critical_window": report.is_critical_window,
            "is_past_renewal_deadline": report.is_past_renewal_deadline,
            "alert_level": report.alert_level,
        }

    def build_amendment(self, result: UpdatedContract) -> dict:
        """Amendment result with value and description for each figure."""
        amendment = result.amendment
        delta = amendment.value_delta
        previous = result.previous_annual_value
        new = result.new_annual_value

        if result.expiration_changed:
            expiration_desc = (
                f"Extended from {result.previous_expiration_date} to {result.new_expiration_date}"
                if result.previous_expiration_date
                else f"Set to {result.new_expiration_date}"
            )
        else:
            expiration_desc = "Expiration unchanged by this amendment"

        return {
            "amendment": {
                "contrato_id": amendment.contract_id,
                "numero_sequencial": amendment.sequence,
                "data_assinatura": jsonable(amendment.signature_date),
                "valor": to_money(delta),
                "nova_data_vencimento": jsonable(amendment.new_expiration_date),
            },
            "calculations": {
                "previous_annual_value": {
                    "value": to_money(previous),
                    "description": "Annual value before this amendment",
                },
                "value_delta": {
                    "value": to_money(delta),
                    "description": "Reduction" if delta < 0 else "Increase" if delta > 0 else "No value change",
                },
                "new_annual_value": {
                    "value": to_money(new),
                    "description": f"{_fmt(previous)} + ({_fmt(delta)}) = {_fmt(new)}",
                },
                "new_expiration_date": {
                    "value": jsonable(result.new_expiration_date),
                    "description": expiration_desc,
                },
            },
            "updated_contract": jsonable(result.to_payload()),
            "snapshot": {
                "valor_mensal_inicial": to_money(result.contract.initial_monthly_value),
                "valor_anual_inicial": to_money(result.contract.initial_annual_value),
                "data_vencimento_inicial": jsonable(result.contract.initial_expiration_date),
            },
            "warnings": [{"code": w.code, "message": w.message} for w in result.warnings],
        }

    def build_entry(self, entry: FinancialEntry, payload: dict) -> dict:
        return {
            "tipo_documento": entry.kind.value,
            "valor_bruto": to_money(payload["valor_bruto"]),
            "valor_liquido": to_money(payload["valor_liquido"]),
            "display": {
                "valor_bruto": _fmt(payload["valor_bruto"]),
                "valor_liquido": _fmt(payload["valor_liquido"]),
            },
            "payload": jsonable(payload),
        }
