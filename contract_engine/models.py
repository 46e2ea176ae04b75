"""
Domain Models for the Contract Engine

These dataclasses provide type-safe representations of all business entities.
All monetary values use Decimal for precision.

``from_dict`` reads the column names used by the hosted backend (the
Portuguese vocabulary of the original screens); ``to_payload`` writes them
back. Attributes inside Python use English names.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum

from .dates import parse_iso_date
from .exceptions import InvalidInput


def parse_money(value, field_name: str, default: Decimal | None = Decimal("0")) -> Decimal | None:
    """Convert a raw JSON value to Decimal; empty values become ``default``."""
    if value is None or value == "":
        return default
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise InvalidInput(f"{field_name} must be a number, got: {value!r}")
    if not result.is_finite():
        raise InvalidInput(f"{field_name} must be a number, got: {value!r}")
    return result


def _enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_cls)
        raise InvalidInput(f"Invalid {field_name}: {value!r}. Must be one of {allowed}")


def _int(value, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field_name} must be an integer, got: {value!r}")


# =============================================================================
# ENUMERATIONS
# =============================================================================


class DocumentKind(str, Enum):
    COMMITMENT = "Empenho"
    INVOICE = "Nota Fiscal"
    SETTLEMENT = "Liquidação"
    REVERSAL = "Estorno"


class ProcessStatus(str, Enum):
    """Monthly execution status. Flat: no transition order is enforced."""

    OPEN = "Em Aberto"
    IN_PROGRESS = "Em Andamento"
    FINALIZED = "Finalizado"
    CANCELLED = "Cancelado"


class Role(str, Enum):
    DIRECTOR = "diretor"
    MANAGER = "gerente"
    INSPECTOR = "fiscal"

    @property
    def can_edit_contracts(self) -> bool:
        return self in (Role.DIRECTOR, Role.MANAGER)

    @property
    def can_manage_users(self) -> bool:
        return self is Role.DIRECTOR


class MergePolicy(str, Enum):
    """How computed dates are merged into a form."""

    OVERWRITE = "overwrite"
    FILL_IF_EMPTY = "fill_if_empty"


# =============================================================================
# ENTITIES
# =============================================================================


@dataclass
class Contract:
    """A contract with its current (effective) and original (snapshot) values."""

    process_number: str
    contractor_name: str
    object_description: str
    monthly_value: Decimal
    annual_value: Decimal
    signature_date: date | None
    expiration_date: date | None
    legal_limit_date: date | None = None
    id: str | None = None
    contract_number: str = ""
    trade_name: str = ""
    modality: str = ""
    contract_type: str = "Serviços"
    # Snapshot taken once at creation, never touched by amendments
    initial_monthly_value: Decimal | None = None
    initial_annual_value: Decimal | None = None
    initial_expiration_date: date | None = None
    is_active: bool = True
    alert_enabled: bool = True
    responsible_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Contract":
        return cls(
            id=data.get("id"),
            process_number=data.get("numero_processo") or "",
            contract_number=data.get("numero_contrato") or "",
            contractor_name=data.get("empresa_contratada") or "",
            trade_name=data.get("nome_fantasia") or "",
            object_description=data.get("objeto") or "",
            modality=data.get("modalidade") or "",
            contract_type=data.get("tipo") or "Serviços",
            monthly_value=parse_money(data.get("valor_mensal"), "valor_mensal"),
            annual_value=parse_money(data.get("valor_anual"), "valor_anual"),
            signature_date=parse_iso_date(data.get("data_assinatura"), "data_assinatura"),
            expiration_date=parse_iso_date(data.get("data_vencimento"), "data_vencimento"),
            legal_limit_date=parse_iso_date(data.get("data_limite_legal"), "data_limite_legal"),
            initial_monthly_value=parse_money(data.get("valor_mensal_inicial"), "valor_mensal_inicial", None),
            initial_annual_value=parse_money(data.get("valor_anual_inicial"), "valor_anual_inicial", None),
            initial_expiration_date=parse_iso_date(
                data.get("data_vencimento_inicial"), "data_vencimento_inicial"
            ),
            is_active=data.get("ativo") is not False,
            alert_enabled=data.get("alerta_ativo") is not False,
            responsible_id=data.get("fiscal_responsavel") or None,
        )

    def to_payload(self) -> dict:
        payload = {
            "numero_processo": self.process_number,
            "numero_contrato": self.contract_number,
            "empresa_contratada": self.contractor_name,
            "nome_fantasia": self.trade_name,
            "objeto": self.object_description,
            "modalidade": self.modality,
            "tipo": self.contract_type,
            "valor_mensal": self.monthly_value,
            "valor_anual": self.annual_value,
            "data_assinatura": self.signature_date,
            "data_vencimento": self.expiration_date,
            "data_limite_legal": self.legal_limit_date,
            "valor_mensal_inicial": self.initial_monthly_value,
            "valor_anual_inicial": self.initial_annual_value,
            "data_vencimento_inicial": self.initial_expiration_date,
            "ativo": self.is_active,
            "alerta_ativo": self.alert_enabled,
            "fiscal_responsavel": self.responsible_id,
        }
        if self.id:
            payload["id"] = self.id
        return payload


@dataclass
class Amendment:
    """A formal contract modification (aditivo).

    ``value_delta`` is signed: negative values are reductions. ``sequence`` is
    1-based and assigned by the caller at insertion time.
    """

    contract_id: str | None
    sequence: int | None
    signature_date: date | None
    value_delta: Decimal | None
    new_expiration_date: date | None = None
    description: str = ""
    id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Amendment":
        return cls(
            id=data.get("id"),
            contract_id=data.get("contrato_id"),
            sequence=_int(data.get("numero_sequencial"), "numero_sequencial"),
            signature_date=parse_iso_date(data.get("data_assinatura"), "data_assinatura"),
            value_delta=parse_money(data.get("valor"), "valor", None),
            new_expiration_date=parse_iso_date(data.get("nova_data_vencimento"), "nova_data_vencimento"),
            description=data.get("descricao") or "",
        )

    def to_payload(self) -> dict:
        return {
            "contrato_id": self.contract_id,
            "numero_sequencial": self.sequence,
            "data_assinatura": self.signature_date,
            "valor": self.value_delta,
            "nova_data_vencimento": self.new_expiration_date,
            "descricao": self.description,
        }


@dataclass
class MonthlyExecutionProcess:
    """One competence period (month/year) of a contract's execution."""

    contract_id: str | None
    month: int | None
    year: int | None
    sei_number: str = ""
    status: ProcessStatus = ProcessStatus.OPEN
    description: str = ""
    id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "MonthlyExecutionProcess":
        status = data.get("status") or ProcessStatus.OPEN.value
        return cls(
            id=data.get("id"),
            contract_id=data.get("contrato_id"),
            month=_int(data.get("mes_referencia"), "mes_referencia"),
            year=_int(data.get("ano_referencia"), "ano_referencia"),
            sei_number=data.get("numero_processo_sei") or "",
            status=_enum(ProcessStatus, status, "status"),
            description=data.get("descricao_servicos") or "",
        )

    def to_payload(self) -> dict:
        return {
            "contrato_id": self.contract_id,
            "mes_referencia": self.month,
            "ano_referencia": self.year,
            "numero_processo_sei": self.sei_number,
            "status": self.status.value,
            "descricao_servicos": self.description,
        }


@dataclass
class FinancialEntry:
    """A financial execution record. Only the fields of ``kind`` are meaningful."""

    contract_id: str | None
    kind: DocumentKind
    entry_date: date | None
    id: str | None = None
    process_id: str | None = None

    # Commitment (Empenho)
    commitment_number: str = ""
    commitment_date: date | None = None
    commitment_value: Decimal = Decimal("0")
    is_commitment_request: bool = False
    commitment_request_sei: str = ""
    commitment_request_date: date | None = None

    # Invoice (Nota Fiscal)
    invoice_number: str = ""
    invoice_date: date | None = None
    invoice_value: Decimal = Decimal("0")

    # Settlement (Liquidação)
    settlement_number: str = ""
    settlement_date: date | None = None
    settlement_value: Decimal = Decimal("0")
    withholding_value: Decimal = Decimal("0")
    tax_value: Decimal = Decimal("0")  # ISS
    deduction_value: Decimal = Decimal("0")  # glosa

    # Reversal (Estorno)
    reversal_value: Decimal = Decimal("0")
    reversal_date: date | None = None
    reversal_reason: str = ""

    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "FinancialEntry":
        kind = data.get("tipo_documento") or DocumentKind.COMMITMENT.value
        return cls(
            id=data.get("id"),
            contract_id=data.get("contrato_id"),
            process_id=data.get("processo_execucao_id"),
            kind=_enum(DocumentKind, kind, "tipo_documento"),
            entry_date=parse_iso_date(data.get("data_lancamento"), "data_lancamento"),
            commitment_number=data.get("numero_empenho") or "",
            commitment_date=parse_iso_date(data.get("data_empenho"), "data_empenho"),
            commitment_value=parse_money(data.get("valor_empenho"), "valor_empenho"),
            is_commitment_request=bool(data.get("is_pedido_empenho", False)),
            commitment_request_sei=data.get("pedido_empenho_sei") or "",
            commitment_request_date=parse_iso_date(data.get("data_pedido_empenho"), "data_pedido_empenho"),
            invoice_number=data.get("numero_nf") or "",
            invoice_date=parse_iso_date(data.get("data_nf"), "data_nf"),
            invoice_value=parse_money(data.get("valor_nf"), "valor_nf"),
            settlement_number=data.get("numero_liquidacao") or "",
            settlement_date=parse_iso_date(data.get("data_liquidacao"), "data_liquidacao"),
            settlement_value=parse_money(data.get("valor_liquidacao"), "valor_liquidacao"),
            withholding_value=parse_money(data.get("valor_retencoes"), "valor_retencoes"),
            tax_value=parse_money(data.get("valor_iss"), "valor_iss"),
            deduction_value=parse_money(data.get("valor_glosa"), "valor_glosa"),
            reversal_value=parse_money(data.get("estorno_valor"), "estorno_valor"),
            reversal_date=parse_iso_date(data.get("estorno_data"), "estorno_data"),
            reversal_reason=data.get("estorno_motivo") or "",
            notes=data.get("observacoes") or "",
        )


@dataclass
class UserProvisioningRequest:
    """Input of the privileged user-creation function."""

    email: str
    password: str
    display_name: str
    username: str
    role: Role | None
    management_unit_id: str | None = None  # gerencia
    sector_id: str | None = None  # setor

    @classmethod
    def from_dict(cls, data: dict) -> "UserProvisioningRequest":
        role = data.get("role")
        return cls(
            email=(data.get("email") or "").strip(),
            password=data.get("password") or "",
            display_name=(data.get("nome") or "").strip(),
            username=(data.get("username") or "").strip(),
            role=_enum(Role, role, "role") if role else None,
            management_unit_id=data.get("gerencia_id") or None,
            sector_id=data.get("setor_id") or None,
        )

    @property
    def metadata(self) -> dict:
        return {
            "nome": self.display_name,
            "username": self.username,
            "role": self.role.value if self.role else None,
            "gerencia_id": self.management_unit_id,
            "setor_id": self.sector_id,
        }


# =============================================================================
# RESULT MODELS
# =============================================================================


@dataclass
class ConsistencyWarning:
    """A condition worth showing to the operator. Never raised."""

    code: str
    message: str


@dataclass
class DateSuggestion:
    """Default-term dates proposed while a contract has no expiration yet."""

    suggested_expiration: date
    legal_limit: date


@dataclass
class DeadlineReport:
    """Deadline status of a contract that already has an expiration date."""

    expiration_date: date
    today: date
    days_remaining: int
    renewal_request_deadline: date
    is_expired: bool
    is_critical_window: bool
    is_past_renewal_deadline: bool

    @property
    def alert_level(self) -> str:
        if self.is_expired:
            return "expired"
        if self.is_critical_window:
            return "critical"
        return "ok"


@dataclass
class DeadlineInfo:
    """Exactly one of ``suggestion`` and ``report`` is set."""

    suggestion: DateSuggestion | None = None
    report: DeadlineReport | None = None


@dataclass
class UpdatedContract:
    """Result of applying an amendment. ``contract`` holds the new values."""

    contract: Contract
    amendment: Amendment
    previous_annual_value: Decimal
    previous_expiration_date: date | None
    warnings: list[ConsistencyWarning] = field(default_factory=list)

    @property
    def new_annual_value(self) -> Decimal:
        return self.contract.annual_value

    @property
    def new_expiration_date(self) -> date | None:
        return self.contract.expiration_date

    @property
    def expiration_changed(self) -> bool:
        return self.contract.expiration_date != self.previous_expiration_date

    def to_payload(self) -> dict:
        """Update payload for the contracts collection."""
        return {
            "valor_anual": self.contract.annual_value,
            "data_vencimento": self.contract.expiration_date,
        }
