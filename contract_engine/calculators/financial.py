"""
Financial Entry Calculators

Gross/net values and persistence payloads for commitments (empenhos),
invoices (notas fiscais), settlements (liquidações) and reversals (estornos).
"""

import re
from datetime import datetime
from decimal import Decimal

from .currency import quantize_money
from ..dates import reference_month
from ..models import DocumentKind, FinancialEntry


def gross_value(entry: FinancialEntry) -> Decimal:
    """The kind-specific primary value of an entry."""
    if entry.kind is DocumentKind.COMMITMENT:
        # A commitment request only registers the SEI process, no amount yet
        if entry.is_commitment_request:
            return Decimal("0")
        return entry.commitment_value
    if entry.kind is DocumentKind.INVOICE:
        return entry.invoice_value
    if entry.kind is DocumentKind.SETTLEMENT:
        return entry.settlement_value
    if entry.kind is DocumentKind.REVERSAL:
        return entry.reversal_value
    raise ValueError(f"Unknown document kind: {entry.kind!r}")


def compute_net(entry: FinancialEntry) -> Decimal:
    """
    Net value of an entry.

    Settlement: settlement - withholding - ISS - deduction.
    Every other kind: net equals gross.
    """
    if entry.kind is DocumentKind.SETTLEMENT:
        net = (
            entry.settlement_value
            - entry.withholding_value
            - entry.tax_value
            - entry.deduction_value
        )
        return quantize_money(net)
    return quantize_money(gross_value(entry))


def normalize_commitment_number(number: str, year: int) -> str:
    """A purely numeric commitment number gets the '/<year>' suffix."""
    number = (number or "").strip()
    if re.fullmatch(r"\d+", number):
        return f"{number}/{year}"
    return number


def reversal_document_number(now: datetime) -> str:
    """Synthetic document number for reversals: EST- + last 6 digits of epoch ms."""
    millis = str(int(now.timestamp() * 1000))
    return f"EST-{millis[-6:]}"


class EntryPayloadBuilder:
    """Builds the persistence payload for a financial entry."""

    def build(self, entry: FinancialEntry, now: datetime) -> dict:
        """
        Every payload carries numero_documento, valor_bruto and valor_liquido
        plus the kind-specific columns. Kind dates default to the entry date.
        """
        payload = {
            "contrato_id": entry.contract_id,
            "processo_execucao_id": entry.process_id,
            "data_lancamento": entry.entry_date,
            "tipo_documento": entry.kind.value,
        }

        builders = {
            DocumentKind.COMMITMENT: self._commitment,
            DocumentKind.INVOICE: self._invoice,
            DocumentKind.SETTLEMENT: self._settlement,
            DocumentKind.REVERSAL: self._reversal,
        }
        payload.update(builders[entry.kind](entry, now))

        payload["valor_bruto"] = quantize_money(gross_value(entry))
        payload["valor_liquido"] = compute_net(entry)
        if entry.notes:
            payload["observacoes"] = entry.notes
        return payload

    def _commitment(self, entry: FinancialEntry, now: datetime) -> dict:
        if entry.is_commitment_request:
            return {
                "is_pedido_empenho": True,
                "pedido_empenho_sei": entry.commitment_request_sei,
                "data_pedido_empenho": entry.commitment_request_date or entry.entry_date,
                "numero_documento": entry.commitment_request_sei,
            }

        number = normalize_commitment_number(entry.commitment_number, now.year)
        return {
            "numero_empenho": number,
            "data_empenho": entry.commitment_date or entry.entry_date,
            "valor_empenho": entry.commitment_value,
            "numero_documento": number,
        }

    def _invoice(self, entry: FinancialEntry, now: datetime) -> dict:
        fields = {
            "numero_nf": entry.invoice_number,
            "data_nf": entry.invoice_date or entry.entry_date,
            "valor_nf": entry.invoice_value,
            "numero_documento": entry.invoice_number,
        }
        if entry.invoice_date:
            fields["mes_referencia"] = reference_month(entry.invoice_date)
            fields["ano_referencia"] = entry.invoice_date.year
        return fields

    def _settlement(self, entry: FinancialEntry, now: datetime) -> dict:
        return {
            "numero_nf": entry.invoice_number,
            "data_nf": entry.invoice_date,
            # Invoice value is assumed equal to the settlement when not informed
            "valor_nf": entry.invoice_value or entry.settlement_value,
            "numero_liquidacao": entry.settlement_number,
            "data_liquidacao": entry.settlement_date or entry.entry_date,
            "valor_liquidacao": entry.settlement_value,
            "valor_retencoes": entry.withholding_value,
            "valor_iss": entry.tax_value,
            "valor_glosa": entry.deduction_value,
            "numero_documento": entry.invoice_number,
        }

    def _reversal(self, entry: FinancialEntry, now: datetime) -> dict:
        return {
            "estorno_valor": entry.reversal_value,
            "estorno_motivo": entry.reversal_reason,
            "estorno_data": entry.reversal_date or entry.entry_date,
            "numero_documento": reversal_document_number(now),
        }
