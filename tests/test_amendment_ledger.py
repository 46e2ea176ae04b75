"""
Unit Tests for Amendment Ledger

Running totals change, the creation-time snapshot never does.
"""

from datetime import date
from decimal import Decimal

import pytest

from contract_engine.calculators.amendments import (
    AmendmentLedger,
    annual_from_monthly,
    apply_amendment,
    snapshot_initial_values,
)
from contract_engine.exceptions import InvalidAmendment
from contract_engine.models import Amendment, Contract


def make_contract(**overrides) -> Contract:
    values = dict(
        id="c-1",
        process_number="SEI 0001/2024",
        contractor_name="Limpeza Brasil LTDA",
        object_description="Serviços de limpeza predial",
        monthly_value=Decimal("10000.00"),
        annual_value=Decimal("120000.00"),
        signature_date=date(2024, 3, 15),
        expiration_date=date(2025, 3, 14),
        legal_limit_date=date(2029, 3, 15),
        initial_monthly_value=Decimal("10000.00"),
        initial_annual_value=Decimal("120000.00"),
        initial_expiration_date=date(2025, 3, 14),
    )
    values.update(overrides)
    return Contract(**values)


def make_amendment(**overrides) -> Amendment:
    values = dict(
        contract_id="c-1",
        sequence=1,
        signature_date=date(2024, 9, 1),
        value_delta=Decimal("15000.00"),
    )
    values.update(overrides)
    return Amendment(**values)


class TestApplyAmendment:
    """Single amendment application."""

    @pytest.fixture
    def ledger(self):
        return AmendmentLedger()

    def test_value_increase_keeps_expiration(self, ledger):
        """R$ 120.000,00 + R$ 15.000,00 = R$ 135.000,00, expiration unchanged."""
        result = ledger.apply(make_contract(), make_amendment())

        assert result.new_annual_value == Decimal("135000.00")
        assert result.new_expiration_date == date(2025, 3, 14)
        assert result.expiration_changed is False
        assert result.previous_annual_value == Decimal("120000.00")
        assert result.warnings == []

    def test_new_expiration_replaces_current(self, ledger):
        amendment = make_amendment(value_delta=Decimal("0"), new_expiration_date=date(2026, 3, 14))

        result = ledger.apply(make_contract(), amendment)

        assert result.new_expiration_date == date(2026, 3, 14)
        assert result.previous_expiration_date == date(2025, 3, 14)
        assert result.expiration_changed is True
        assert result.new_annual_value == Decimal("120000.00")

    def test_reduction(self, ledger):
        """R$ 120.000,00 - R$ 30.000,00 = R$ 90.000,00"""
        result = ledger.apply(make_contract(), make_amendment(value_delta=Decimal("-30000.00")))

        assert result.new_annual_value == Decimal("90000.00")

    def test_monthly_value_not_derived(self, ledger):
        result = ledger.apply(make_contract(), make_amendment())

        assert result.contract.monthly_value == Decimal("10000.00")

    def test_snapshot_untouched(self, ledger):
        amendment = make_amendment(new_expiration_date=date(2026, 3, 14))

        result = ledger.apply(make_contract(), amendment)

        assert result.contract.initial_annual_value == Decimal("120000.00")
        assert result.contract.initial_monthly_value == Decimal("10000.00")
        assert result.contract.initial_expiration_date == date(2025, 3, 14)

    def test_input_contract_not_mutated(self, ledger):
        contract = make_contract()
        ledger.apply(contract, make_amendment())

        assert contract.annual_value == Decimal("120000.00")

    @pytest.mark.parametrize("delta", ["0.01", "-0.01", "999999.99", "-120000.00", "37.5"])
    def test_new_total_is_old_plus_delta(self, ledger, delta):
        result = ledger.apply(make_contract(), make_amendment(value_delta=Decimal(delta)))

        assert result.new_annual_value == Decimal("120000.00") + Decimal(delta)
        assert result.contract.initial_annual_value == Decimal("120000.00")

    def test_payload(self, ledger):
        result = ledger.apply(make_contract(), make_amendment())

        assert result.to_payload() == {
            "valor_anual": Decimal("135000.00"),
            "data_vencimento": date(2025, 3, 14),
        }

    def test_sequence_is_trusted(self, ledger):
        """The ledger does not re-derive sequence numbers."""
        result = ledger.apply(make_contract(), make_amendment(sequence=7))

        assert result.amendment.sequence == 7

    def test_module_level_helper(self):
        result = apply_amendment(make_contract(), make_amendment())
        assert result.new_annual_value == Decimal("135000.00")


class TestAmendmentFailures:

    @pytest.fixture
    def ledger(self):
        return AmendmentLedger()

    def test_missing_value(self, ledger):
        with pytest.raises(InvalidAmendment, match="value"):
            ledger.apply(make_contract(), make_amendment(value_delta=None))

    def test_nan_value(self, ledger):
        with pytest.raises(InvalidAmendment, match="value"):
            ledger.apply(make_contract(), make_amendment(value_delta=Decimal("NaN")))

    @pytest.mark.parametrize("delta", ["Infinity", "-Infinity"])
    def test_infinite_value(self, ledger, delta):
        with pytest.raises(InvalidAmendment, match="value"):
            ledger.apply(make_contract(), make_amendment(value_delta=Decimal(delta)))

    def test_missing_signature_date(self, ledger):
        with pytest.raises(InvalidAmendment, match="signature date"):
            ledger.apply(make_contract(), make_amendment(signature_date=None))

    def test_wrong_contract(self, ledger):
        with pytest.raises(InvalidAmendment, match="c-2"):
            ledger.apply(make_contract(), make_amendment(contract_id="c-2"))

    def test_invalid_amendment_is_value_error(self, ledger):
        with pytest.raises(ValueError):
            ledger.apply(make_contract(), make_amendment(value_delta=None))


class TestConsistencyWarnings:
    """Conditions reported to the operator, never raised."""

    @pytest.fixture
    def ledger(self):
        return AmendmentLedger()

    def test_negative_total_allowed_with_warning(self, ledger):
        """R$ 120.000,00 - R$ 150.000,00 = -R$ 30.000,00"""
        result = ledger.apply(make_contract(), make_amendment(value_delta=Decimal("-150000.00")))

        assert result.new_annual_value == Decimal("-30000.00")
        assert [w.code for w in result.warnings] == ["negative_annual_value"]
        assert "-30.000,00" in result.warnings[0].message

    def test_expiration_past_legal_limit(self, ledger):
        amendment = make_amendment(new_expiration_date=date(2029, 6, 1))

        result = ledger.apply(make_contract(), amendment)

        assert [w.code for w in result.warnings] == ["exceeds_legal_limit"]
        assert result.new_expiration_date == date(2029, 6, 1)

    def test_no_legal_limit_no_warning(self, ledger):
        amendment = make_amendment(new_expiration_date=date(2035, 1, 1))

        result = ledger.apply(make_contract(legal_limit_date=None), amendment)

        assert result.warnings == []

    def test_zero_delta_without_expiration_is_no_op(self, ledger):
        result = ledger.apply(make_contract(), make_amendment(value_delta=Decimal("0")))

        assert [w.code for w in result.warnings] == ["no_op_amendment"]
        assert result.new_annual_value == Decimal("120000.00")


class TestAmendmentHistory:
    """Sequencing and replay."""

    @pytest.fixture
    def ledger(self):
        return AmendmentLedger()

    def test_next_sequence(self, ledger):
        assert ledger.next_sequence([]) == 1
        assert ledger.next_sequence([make_amendment(), make_amendment(sequence=2)]) == 3

    def test_apply_all_in_sequence_order(self, ledger):
        amendments = [
            make_amendment(sequence=2, value_delta=Decimal("-5000.00"), new_expiration_date=date(2027, 3, 14)),
            make_amendment(sequence=1, value_delta=Decimal("15000.00"), new_expiration_date=date(2026, 3, 14)),
        ]

        result = ledger.apply_all(make_contract(), amendments)

        assert result.new_annual_value == Decimal("130000.00")
        assert result.new_expiration_date == date(2027, 3, 14)
        assert result.previous_annual_value == Decimal("120000.00")
        assert result.amendment.sequence == 2
        assert result.contract.initial_annual_value == Decimal("120000.00")

    def test_apply_all_empty(self, ledger):
        assert ledger.apply_all(make_contract(), []) is None

    def test_apply_all_duplicate_sequence(self, ledger):
        with pytest.raises(InvalidAmendment, match="Duplicate"):
            ledger.apply_all(make_contract(), [make_amendment(), make_amendment()])


class TestContractCreationHelpers:

    def test_annual_from_monthly(self):
        """R$ 10.000,00 x 12 = R$ 120.000,00"""
        assert annual_from_monthly(Decimal("10000.00")) == Decimal("120000.00")

    def test_snapshot_on_creation(self):
        contract = make_contract(
            id=None,
            initial_monthly_value=None,
            initial_annual_value=None,
            initial_expiration_date=None,
        )

        snapped = snapshot_initial_values(contract)

        assert snapped.initial_monthly_value == Decimal("10000.00")
        assert snapped.initial_annual_value == Decimal("120000.00")
        assert snapped.initial_expiration_date == date(2025, 3, 14)

    def test_snapshot_never_overwritten(self):
        contract = make_contract(annual_value=Decimal("200000.00"), expiration_date=date(2027, 1, 1))

        snapped = snapshot_initial_values(contract)

        assert snapped.initial_annual_value == Decimal("120000.00")
        assert snapped.initial_expiration_date == date(2025, 3, 14)

    def test_zero_snapshot_is_kept(self):
        contract = make_contract(initial_annual_value=Decimal("0"))

        assert snapshot_initial_values(contract).initial_annual_value == Decimal("0")
