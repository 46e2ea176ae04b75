"""
Contract Processor - Main Orchestrator

Coordinates validation, calculation and output building for every operation
the HTTP entry points expose. Holds no state between calls and performs no
I/O: the caller persists the payloads it returns.
"""

from datetime import date, datetime
from typing import Any, Dict

from .calculators import (
    AmendmentLedger,
    CurrencyFormatter,
    DeadlineCalculator,
    EntryPayloadBuilder,
    annual_from_monthly,
    snapshot_initial_values,
)
from .config import Settings
from .dates import parse_iso_date
from .exceptions import InvalidInput
from .models import (
    Amendment,
    Contract,
    DeadlineInfo,
    FinancialEntry,
    MergePolicy,
    MonthlyExecutionProcess,
    parse_money,
)
from .output import OutputBuilder, jsonable, to_money
from .validators import InputValidator


def _parse_policy(value) -> MergePolicy:
    try:
        return MergePolicy(value or MergePolicy.FILL_IF_EMPTY.value)
    except ValueError:
        raise InvalidInput(f"Invalid merge_policy: {value!r}. Must be 'overwrite' or 'fill_if_empty'")


class ContractProcessor:
    """
    Main orchestrator for contract-management calculations.

    Each operation follows the same pipeline:
    1. Parse input
    2. Validate
    3. Calculate
    4. Build output
    """

    def __init__(self, settings: Settings | None = None):
        settings = settings or Settings()
        self.validator = InputValidator()
        self.deadline_calculator = DeadlineCalculator(
            legal_term_months=settings.legal_term_months,
            renewal_window_days=settings.renewal_window_days,
            default_term_months=settings.default_term_months,
        )
        self.ledger = AmendmentLedger()
        self.entry_builder = EntryPayloadBuilder()
        self.currency = CurrencyFormatter()
        self.output_builder = OutputBuilder()

    # -------------------------------------------------------------------------
    # Contracts
    # -------------------------------------------------------------------------

    def prepare_contract(
        self,
        form: dict,
        today: date,
        policy: MergePolicy = MergePolicy.FILL_IF_EMPTY,
    ) -> tuple[Contract, DeadlineInfo | None]:
        """
        Turn a contract form into a contract ready to be saved.

        - Suggested expiration/legal limit are merged per ``policy``
        - A missing annual value is derived from the monthly one (x12)
        - New contracts (no id) get their snapshot fields captured
        """
        signature = parse_iso_date(form.get("data_assinatura"), "data_assinatura")
        if signature is not None:
            suggestion = self.deadline_calculator.suggest(signature)
            form = self.deadline_calculator.merge_suggestion(form, suggestion, policy)

        if form.get("valor_anual") in (None, "") and form.get("valor_mensal") not in (None, ""):
            monthly = parse_money(form["valor_mensal"], "valor_mensal")
            form = {**form, "valor_anual": annual_from_monthly(monthly)}

        contract = Contract.from_dict(form)
        self.validator.validate_contract(contract)

        if not contract.id:
            contract = snapshot_initial_values(contract)

        deadlines = None
        if contract.expiration_date is not None:
            deadlines = self.deadline_calculator.compute(contract.signature_date, contract.expiration_date, today)

        return contract, deadlines

    def prepare_contract_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        today = self._today(data)
        policy = _parse_policy(data.get("merge_policy"))
        contract, deadlines = self.prepare_contract(data.get("contract") or {}, today, policy)

        return {
            "payload": jsonable(contract.to_payload()),
            "deadlines": self.output_builder.build_deadlines(deadlines) if deadlines else None,
        }

    # -------------------------------------------------------------------------
    # Deadlines
    # -------------------------------------------------------------------------

    def deadlines_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        info = self.deadline_calculator.compute(
            parse_iso_date(data.get("data_assinatura"), "data_assinatura"),
            parse_iso_date(data.get("data_vencimento"), "data_vencimento"),
            self._today(data),
        )
        return self.output_builder.build_deadlines(info)

    # -------------------------------------------------------------------------
    # Amendments
    # -------------------------------------------------------------------------

    def apply_amendment_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply one amendment ({"contract": ..., "amendment": ...}) or replay a
        history ({"contract": ..., "amendments": [...]}).
        """
        if "contract" not in data:
            raise InvalidInput("contract is required")
        contract = Contract.from_dict(data["contract"])

        if "amendments" in data:
            amendments = [Amendment.from_dict(a) for a in data["amendments"]]
            for amendment in amendments:
                self.validator.validate_amendment(amendment)
            result = self.ledger.apply_all(contract, amendments)
            if result is None:
                raise InvalidInput("amendments cannot be empty")
        else:
            amendment = Amendment.from_dict(data.get("amendment") or {})
            self.validator.validate_amendment(amendment)
            result = self.ledger.apply(contract, amendment)

        return self.output_builder.build_amendment(result)

    # -------------------------------------------------------------------------
    # Financial entries and monthly processes
    # -------------------------------------------------------------------------

    def prepare_entry(self, entry: FinancialEntry, now: datetime) -> dict:
        self.validator.validate_entry(entry)
        return self.entry_builder.build(entry, now)

    def prepare_entry_from_dict(self, data: Dict[str, Any], now: datetime | None = None) -> Dict[str, Any]:
        entry = FinancialEntry.from_dict(data.get("entry") or {})
        payload = self.prepare_entry(entry, now or datetime.now())
        return self.output_builder.build_entry(entry, payload)

    def prepare_process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        process = MonthlyExecutionProcess.from_dict(data.get("process") or {})
        self.validator.validate_process(process)
        return {"payload": jsonable(process.to_payload())}

    # -------------------------------------------------------------------------
    # Currency
    # -------------------------------------------------------------------------

    def parse_currency_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        value = self.currency.parse(data.get("display"))
        return {"value": to_money(value), "display": self.currency.format(value)}

    def format_currency_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if data.get("value") in (None, ""):
            raise InvalidInput("value is required")
        value = parse_money(data["value"], "value")
        return {
            "value": to_money(value),
            "display": self.currency.format(value),
            "display_brl": self.currency.format_brl(value),
        }

    @staticmethod
    def _today(data: Dict[str, Any]) -> date:
        """Explicit 'today' from the request, or the server date."""
        return parse_iso_date(data.get("today"), "today") or date.today()
