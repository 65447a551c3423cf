# ehrcore/models/clinical.py
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ehrcore.models.base import Base, ChildMixin, ResourceMixin, UTCDateTime, status_enum, tenant_fk


class ConditionClinicalStatus(str, Enum):
    ACTIVE = "active"
    RECURRENCE = "recurrence"
    RELAPSE = "relapse"
    INACTIVE = "inactive"
    REMISSION = "remission"
    RESOLVED = "resolved"


class ConditionVerificationStatus(str, Enum):
    UNCONFIRMED = "unconfirmed"
    PROVISIONAL = "provisional"
    DIFFERENTIAL = "differential"
    CONFIRMED = "confirmed"
    REFUTED = "refuted"
    ENTERED_IN_ERROR = "entered-in-error"


class ObservationStatus(str, Enum):
    REGISTERED = "registered"
    PRELIMINARY = "preliminary"
    FINAL = "final"
    AMENDED = "amended"
    CORRECTED = "corrected"
    CANCELLED = "cancelled"
    ENTERED_IN_ERROR = "entered-in-error"
    UNKNOWN = "unknown"


class AllergyClinicalStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    RESOLVED = "resolved"


class AllergyCriticality(str, Enum):
    LOW = "low"
    HIGH = "high"
    UNABLE_TO_ASSESS = "unable-to-assess"


class MedicationStatementStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ENTERED_IN_ERROR = "entered-in-error"
    INTENDED = "intended"
    STOPPED = "stopped"
    ON_HOLD = "on-hold"
    UNKNOWN = "unknown"
    NOT_TAKEN = "not-taken"


class Condition(ResourceMixin, Base):
    __tablename__ = "conditions"
    resource_type = "Condition"

    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False)
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True)
    recorder_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )

    clinical_status: Mapped[ConditionClinicalStatus] = mapped_column(
        status_enum(ConditionClinicalStatus, "condition_clinical_status_enum"),
        nullable=False,
    )
    verification_status: Mapped[ConditionVerificationStatus | None] = mapped_column(
        status_enum(ConditionVerificationStatus, "condition_verification_status_enum"),
        nullable=True,
    )
    category_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    severity_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    severity_display: Mapped[str | None] = mapped_column(String(50), nullable=True)

    code_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_value: Mapped[str] = mapped_column(String(30), nullable=False)
    code_display: Mapped[str] = mapped_column(String(500), nullable=False)

    body_site_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    body_site_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    onset_datetime: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    abatement_datetime: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    recorded_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class Observation(ResourceMixin, Base):
    __tablename__ = "observations"
    resource_type = "Observation"

    status: Mapped[ObservationStatus] = mapped_column(
        status_enum(ObservationStatus, "observation_status_enum"),
        nullable=False,
    )
    category_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category_display: Mapped[str | None] = mapped_column(String(100), nullable=True)

    code_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_value: Mapped[str] = mapped_column(String(30), nullable=False)
    code_display: Mapped[str] = mapped_column(String(500), nullable=False)

    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False)
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True)
    performer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )

    effective_datetime: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    issued: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    value_quantity: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    value_unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    value_string: Mapped[str | None] = mapped_column(Text, nullable=True)
    value_boolean: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    value_codeable_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    value_codeable_display: Mapped[str | None] = mapped_column(String(255), nullable=True)

    reference_range_low: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    reference_range_high: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    reference_range_text: Mapped[str | None] = mapped_column(String(255), nullable=True)
    interpretation_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    interpretation_display: Mapped[str | None] = mapped_column(String(100), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class ObservationComponent(ChildMixin, Base):
    """Blood pressure systolic/diastolic and similar multi-part values."""

    __tablename__ = "observation_components"
    parent_key = "observation_id"

    observation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("observations.id"), ondelete="CASCADE"), nullable=False
    )
    code_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_value: Mapped[str] = mapped_column(String(30), nullable=False)
    code_display: Mapped[str] = mapped_column(String(255), nullable=False)
    value_quantity: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    value_unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    value_string: Mapped[str | None] = mapped_column(Text, nullable=True)
    interpretation_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    reference_range_low: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    reference_range_high: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)


class AllergyIntolerance(ResourceMixin, Base):
    __tablename__ = "allergy_intolerances"
    resource_type = "AllergyIntolerance"

    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False)
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True)
    recorder_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )

    clinical_status: Mapped[AllergyClinicalStatus | None] = mapped_column(
        status_enum(AllergyClinicalStatus, "allergy_clinical_status_enum"),
        nullable=True,
    )
    verification_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    category: Mapped[str | None] = mapped_column(String(20), nullable=True)
    criticality: Mapped[AllergyCriticality | None] = mapped_column(
        status_enum(AllergyCriticality, "allergy_criticality_enum"),
        nullable=True,
    )

    code_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_value: Mapped[str | None] = mapped_column(String(30), nullable=True)
    code_display: Mapped[str | None] = mapped_column(String(500), nullable=True)

    onset_datetime: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    recorded_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    last_occurrence: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class AllergyReaction(ChildMixin, Base):
    __tablename__ = "allergy_reactions"
    parent_key = "allergy_id"

    allergy_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("allergy_intolerances.id"), ondelete="CASCADE"), nullable=False
    )
    substance_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    substance_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    manifestation_code: Mapped[str] = mapped_column(String(30), nullable=False)
    manifestation_display: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    exposure_route_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    onset: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class MedicationStatement(ResourceMixin, Base):
    __tablename__ = "medication_statements"
    resource_type = "MedicationStatement"

    status: Mapped[MedicationStatementStatus] = mapped_column(
        status_enum(MedicationStatementStatus, "medication_statement_status_enum"),
        nullable=False,
        default=MedicationStatementStatus.ACTIVE,
    )
    status_reason_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    category_code: Mapped[str | None] = mapped_column(String(30), nullable=True)

    medication_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    medication_display: Mapped[str | None] = mapped_column(String(500), nullable=True)
    medication_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("medications.id")), nullable=True
    )

    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False)
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True)
    information_source_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )

    effective_datetime: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    effective_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    effective_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    date_asserted: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    reason_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    reason_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dosage_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    dose_quantity: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    dose_unit: Mapped[str | None] = mapped_column(String(30), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
