"""
Amendment Ledger

Applies amendments (aditivos) to a contract's running totals while leaving
the creation-time snapshot untouched.
"""

from dataclasses import replace
from decimal import Decimal

from .currency import format_currency
from ..exceptions import InvalidAmendment
from ..models import Amendment, ConsistencyWarning, Contract, UpdatedContract


def annual_from_monthly(monthly_value: Decimal) -> Decimal:
    """Default annual value for a 12-month term."""
    return monthly_value * 12


def snapshot_initial_values(contract: Contract) -> Contract:
    """
    Capture the creation-time snapshot.

    Only unset snapshot fields are written, so calling this on an existing
    contract never alters its original values.
    """
    return replace(
        contract,
        initial_monthly_value=(
            contract.initial_monthly_value
            if contract.initial_monthly_value is not None
            else contract.monthly_value
        ),
        initial_annual_value=(
            contract.initial_annual_value
            if contract.initial_annual_value is not None
            else contract.annual_value
        ),
        initial_expiration_date=contract.initial_expiration_date or contract.expiration_date,
    )


class AmendmentLedger:
    """Applies amendments to contracts."""

    @staticmethod
    def next_sequence(existing: list[Amendment]) -> int:
        """Sequence number for a new amendment (1-based)."""
        return len(existing) + 1

    def apply(self, contract: Contract, amendment: Amendment) -> UpdatedContract:
        """
        Apply one amendment.

        new annual value = current annual value + delta
        new expiration   = amendment's new expiration, or the current one

        The monthly value and the snapshot fields are not touched. The sequence
        number is trusted as given.
        """
        self._check(contract, amendment)

        new_annual = contract.annual_value + amendment.value_delta
        new_expiration = amendment.new_expiration_date or contract.expiration_date

        updated = replace(contract, annual_value=new_annual, expiration_date=new_expiration)

        return UpdatedContract(
            contract=updated,
            amendment=amendment,
            previous_annual_value=contract.annual_value,
            previous_expiration_date=contract.expiration_date,
            warnings=self._warnings(updated, amendment),
        )

    def apply_all(self, contract: Contract, amendments: list[Amendment]) -> UpdatedContract | None:
        """
        Replay amendments in sequence order.

        Returns None when there is nothing to apply. ``previous_*`` values in
        the result refer to the contract before the first amendment.
        """
        if not amendments:
            return None

        ordered = sorted(amendments, key=lambda a: a.sequence or 0)
        sequences = [a.sequence for a in ordered]
        if len(set(sequences)) != len(sequences):
            raise InvalidAmendment(f"Duplicate amendment sequence numbers: {sequences}")

        current = contract
        warnings: list[ConsistencyWarning] = []
        for amendment in ordered:
            step = self.apply(current, amendment)
            current = step.contract
            warnings.extend(step.warnings)

        return UpdatedContract(
            contract=current,
            amendment=ordered[-1],
            previous_annual_value=contract.annual_value,
            previous_expiration_date=contract.expiration_date,
            warnings=warnings,
        )

    def _check(self, contract: Contract, amendment: Amendment) -> None:
        if amendment.contract_id != contract.id:
            raise InvalidAmendment(
                f"Amendment belongs to contract {amendment.contract_id!r}, not {contract.id!r}"
            )

        delta = amendment.value_delta
        if delta is None or not isinstance(delta, Decimal) or not delta.is_finite():
            raise InvalidAmendment(f"Amendment value must be a number, got: {delta!r}")

        if amendment.signature_date is None:
            raise InvalidAmendment("Amendment signature date is required")

    def _warnings(self, updated: Contract, amendment: Amendment) -> list[ConsistencyWarning]:
        warnings = []

        if updated.annual_value < 0:
            warnings.append(ConsistencyWarning(
                code="negative_annual_value",
                message=f"Annual value is negative after amendment: R$ {format_currency(updated.annual_value)}",
            ))

        if (
            amendment.new_expiration_date
            and updated.legal_limit_date
            and amendment.new_expiration_date > updated.legal_limit_date
        ):
            warnings.append(ConsistencyWarning(
                code="exceeds_legal_limit",
                message=(
                    f"New expiration {amendment.new_expiration_date.isoformat()} is past the legal "
                    f"limit {updated.legal_limit_date.isoformat()}"
                ),
            ))

        if amendment.value_delta == 0 and amendment.new_expiration_date is None:
            warnings.append(ConsistencyWarning(
                code="no_op_amendment",
                message=f"Amendment {amendment.sequence} changes neither value nor expiration",
            ))

        return warnings


def apply_amendment(contract: Contract, amendment: Amendment) -> UpdatedContract:
    return AmendmentLedger().apply(contract, amendment)
