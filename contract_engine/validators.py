"""
Input Validation for the Contract Engine

Validates entities before any calculation or persistence call.
Raises InvalidInput with clear messages for any constraint violation.
"""

from decimal import Decimal

from .exceptions import InvalidAmendment, InvalidInput
from .models import (
    Amendment,
    Contract,
    DocumentKind,
    FinancialEntry,
    MonthlyExecutionProcess,
    Role,
    UserProvisioningRequest,
)

MIN_PASSWORD_LENGTH = 6


class InputValidator:
    """Validates contract-management input according to business rules."""

    def validate_contract(self, contract: Contract) -> None:
        """Validate a contract form before it is saved."""
        required = {
            "numero_processo": contract.process_number,
            "empresa_contratada": contract.contractor_name,
            "objeto": contract.object_description,
        }
        for name, value in required.items():
            if not value or not value.strip():
                raise InvalidInput(f"{name} is required")

        if contract.signature_date is None:
            raise InvalidInput("data_assinatura is required")

        if contract.monthly_value < 0:
            raise InvalidInput(f"valor_mensal cannot be negative, got: {contract.monthly_value}")

        if contract.annual_value < 0:
            raise InvalidInput(f"valor_anual cannot be negative, got: {contract.annual_value}")

        if contract.expiration_date and contract.expiration_date < contract.signature_date:
            raise InvalidInput(
                f"data_vencimento ({contract.expiration_date}) cannot be before "
                f"data_assinatura ({contract.signature_date})"
            )

    def validate_amendment(self, amendment: Amendment) -> None:
        """Amendment-level checks that do not need the owning contract."""
        if not amendment.contract_id:
            raise InvalidAmendment("contrato_id is required")

        if amendment.sequence is not None and amendment.sequence < 1:
            raise InvalidAmendment(f"numero_sequencial must be 1 or greater, got: {amendment.sequence}")

        delta = amendment.value_delta
        if delta is None or not delta.is_finite():
            raise InvalidAmendment(f"valor must be a number, got: {delta!r}")

        if amendment.signature_date is None:
            raise InvalidAmendment("data_assinatura is required")

    def validate_process(self, process: MonthlyExecutionProcess) -> None:
        if not process.contract_id:
            raise InvalidInput("contrato_id is required")

        if process.month is None or not (1 <= process.month <= 12):
            raise InvalidInput(f"mes_referencia must be between 1 and 12, got: {process.month}")

        if process.year is None or process.year <= 1900:
            raise InvalidInput(f"ano_referencia must be after 1900, got: {process.year}")

    def validate_entry(self, entry: FinancialEntry) -> None:
        """Kind-specific required fields, mirroring the entry form."""
        if not entry.contract_id:
            raise InvalidInput("contrato_id is required")

        if entry.entry_date is None:
            raise InvalidInput("data_lancamento is required")

        for name in ("commitment_value", "invoice_value", "settlement_value", "withholding_value",
                     "tax_value", "deduction_value", "reversal_value"):
            value: Decimal = getattr(entry, name)
            if not value.is_finite() or value < 0:
                raise InvalidInput(f"{name} cannot be negative, got: {value}")

        if entry.kind is DocumentKind.COMMITMENT:
            if entry.is_commitment_request:
                if not entry.commitment_request_sei:
                    raise InvalidInput("SEI process number is required for a commitment request")
            elif not entry.commitment_number or not entry.commitment_value:
                raise InvalidInput("Commitment number and value are required")

        elif entry.kind is DocumentKind.INVOICE:
            if not entry.invoice_number or not entry.invoice_value:
                raise InvalidInput("Invoice number and value are required")

        elif entry.kind is DocumentKind.SETTLEMENT:
            if not entry.invoice_number or not entry.settlement_value:
                raise InvalidInput("Invoice number and settlement value are required")

        elif entry.kind is DocumentKind.REVERSAL:
            if not entry.reversal_value:
                raise InvalidInput("Reversal value is required")

    def validate_user(self, request: UserProvisioningRequest, is_new: bool = True) -> None:
        """
        Validate a user form.

        Organizational rules per role:
        - fiscal: management unit and sector required
        - gerente: management unit required, no sector
        - diretor: sector required (the directorate's own sector)
        """
        if not request.display_name:
            raise InvalidInput("nome is required")

        if not request.username:
            raise InvalidInput("username is required")

        if " " in request.username:
            raise InvalidInput("username cannot contain spaces")

        if request.role is None:
            raise InvalidInput("role is required")

        self._validate_org_units(request)

        if is_new:
            if not request.email:
                raise InvalidInput("email is required")
            if "@" not in request.email:
                raise InvalidInput(f"Invalid email: {request.email!r}")
            if len(request.password) < MIN_PASSWORD_LENGTH:
                raise InvalidInput(f"password must have at least {MIN_PASSWORD_LENGTH} characters")

    def _validate_org_units(self, request: UserProvisioningRequest) -> None:
        if request.role is Role.INSPECTOR:
            if not request.management_unit_id:
                raise InvalidInput("gerencia_id is required for fiscal users")
            if not request.sector_id:
                raise InvalidInput("setor_id is required for fiscal users")

        elif request.role is Role.MANAGER:
            if not request.management_unit_id:
                raise InvalidInput("gerencia_id is required for gerente users")
            if request.sector_id:
                raise InvalidInput("gerente users cannot be linked to a sector")

        elif request.role is Role.DIRECTOR:
            if not request.sector_id:
                raise InvalidInput("setor_id is required for diretor users")
