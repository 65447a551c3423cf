# ehrcore/models/financial.py
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Numeric, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from ehrcore.models.base import Base, ResourceMixin, UTCDateTime, status_enum, tenant_fk


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ENTERED_IN_ERROR = "entered-in-error"
    ON_HOLD = "on-hold"
    UNKNOWN = "unknown"


class InsurancePlanStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    RETIRED = "retired"
    UNKNOWN = "unknown"


class FinancialResourceStatus(str, Enum):
    """PaymentNotice, PaymentReconciliation, EnrollmentRequest/Response."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    DRAFT = "draft"
    ENTERED_IN_ERROR = "entered-in-error"


class ChargeItemStatus(str, Enum):
    PLANNED = "planned"
    BILLABLE = "billable"
    NOT_BILLABLE = "not-billable"
    ABORTED = "aborted"
    BILLED = "billed"
    ENTERED_IN_ERROR = "entered-in-error"
    UNKNOWN = "unknown"


class ContractStatus(str, Enum):
    AMENDED = "amended"
    APPENDED = "appended"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"
    ENTERED_IN_ERROR = "entered-in-error"
    EXECUTABLE = "executable"
    EXECUTED = "executed"
    NEGOTIABLE = "negotiable"
    OFFERED = "offered"
    POLICY = "policy"
    REJECTED = "rejected"
    RENEWED = "renewed"
    REVOKED = "revoked"
    RESOLVED = "resolved"
    TERMINATED = "terminated"


class Account(ResourceMixin, Base):
    __tablename__ = "accounts"
    resource_type = "Account"

    status: Mapped[AccountStatus] = mapped_column(
        status_enum(AccountStatus, "account_status_enum"),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )
    type_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    type_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subject_patient_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=True
    )
    owner_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    service_period_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    service_period_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class InsurancePlan(ResourceMixin, Base):
    __tablename__ = "insurance_plans"
    resource_type = "InsurancePlan"

    status: Mapped[InsurancePlanStatus] = mapped_column(
        status_enum(InsurancePlanStatus, "insurance_plan_status_enum"),
        nullable=False,
        default=InsurancePlanStatus.ACTIVE,
    )
    type_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    type_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    alias: Mapped[str | None] = mapped_column(String(255), nullable=True)
    period_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    period_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    owned_by_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    administered_by_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    coverage_area: Mapped[str | None] = mapped_column(String(255), nullable=True)
    network_name: Mapped[str | None] = mapped_column(String(255), nullable=True)


class PaymentNotice(ResourceMixin, Base):
    __tablename__ = "payment_notices"
    resource_type = "PaymentNotice"

    status: Mapped[FinancialResourceStatus] = mapped_column(
        status_enum(FinancialResourceStatus, "payment_notice_status_enum"),
        nullable=False,
        default=FinancialResourceStatus.ACTIVE,
    )
    request_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    response_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    payment_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payee_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    recipient_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    amount_value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    amount_currency: Mapped[str | None] = mapped_column(
        String(3), nullable=True, default="USD", server_default=text("'USD'")
    )
    payment_status_code: Mapped[str | None] = mapped_column(String(30), nullable=True)


class PaymentReconciliation(ResourceMixin, Base):
    __tablename__ = "payment_reconciliations"
    resource_type = "PaymentReconciliation"

    status: Mapped[FinancialResourceStatus] = mapped_column(
        status_enum(FinancialResourceStatus, "payment_reconciliation_status_enum"),
        nullable=False,
        default=FinancialResourceStatus.ACTIVE,
    )
    period_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    period_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    payment_issuer_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    requestor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    request_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    outcome: Mapped[str | None] = mapped_column(String(30), nullable=True)
    disposition: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_currency: Mapped[str | None] = mapped_column(
        String(3), nullable=True, default="USD", server_default=text("'USD'")
    )
    payment_identifier: Mapped[str | None] = mapped_column(String(100), nullable=True)
    form_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    process_note: Mapped[str | None] = mapped_column(Text, nullable=True)


class ChargeItem(ResourceMixin, Base):
    __tablename__ = "charge_items"
    resource_type = "ChargeItem"

    status: Mapped[ChargeItemStatus] = mapped_column(
        status_enum(ChargeItemStatus, "charge_item_status_enum"),
        nullable=False,
        default=ChargeItemStatus.BILLABLE,
    )
    code_code: Mapped[str] = mapped_column(String(50), nullable=False)
    code_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_system: Mapped[str | None] = mapped_column(String(255), nullable=True)

    subject_patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False
    )
    context_encounter_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True
    )
    performer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    performing_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    account_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("accounts.id")), nullable=True)

    occurrence_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    entered_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    quantity_value: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    factor_override: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    price_override_value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    price_override_currency: Mapped[str | None] = mapped_column(
        String(3), nullable=True, default="USD", server_default=text("'USD'")
    )
    override_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class Contract(ResourceMixin, Base):
    __tablename__ = "contracts"
    resource_type = "Contract"

    status: Mapped[ContractStatus] = mapped_column(
        status_enum(ContractStatus, "contract_status_enum"),
        nullable=False,
        default=ContractStatus.EXECUTED,
    )
    type_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    type_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_type_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    issued: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    applies_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    applies_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    subject_patient_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=True
    )
    authority_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    scope_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    scope_display: Mapped[str | None] = mapped_column(String(255), nullable=True)


class EnrollmentRequest(ResourceMixin, Base):
    __tablename__ = "enrollment_requests"
    resource_type = "EnrollmentRequest"

    status: Mapped[FinancialResourceStatus] = mapped_column(
        status_enum(FinancialResourceStatus, "enrollment_request_status_enum"),
        nullable=False,
        default=FinancialResourceStatus.ACTIVE,
    )
    created: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    insurer_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    candidate_patient_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=True
    )
    coverage_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("coverages.id")), nullable=True)


class EnrollmentResponse(ResourceMixin, Base):
    __tablename__ = "enrollment_responses"
    resource_type = "EnrollmentResponse"

    status: Mapped[FinancialResourceStatus] = mapped_column(
        status_enum(FinancialResourceStatus, "enrollment_response_status_enum"),
        nullable=False,
        default=FinancialResourceStatus.ACTIVE,
    )
    request_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("enrollment_requests.id")), nullable=True
    )
    outcome: Mapped[str | None] = mapped_column(String(30), nullable=True)
    disposition: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
