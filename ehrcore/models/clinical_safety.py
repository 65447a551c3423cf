# ehrcore/models/clinical_safety.py
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ehrcore.models.base import Base, ResourceMixin, UTCDateTime, status_enum, tenant_fk


class FlagStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ENTERED_IN_ERROR = "entered-in-error"


class EventStatus(str, Enum):
    """Shared by DetectedIssue and RiskAssessment."""

    REGISTERED = "registered"
    PRELIMINARY = "preliminary"
    FINAL = "final"
    AMENDED = "amended"
    CORRECTED = "corrected"
    CANCELLED = "cancelled"
    ENTERED_IN_ERROR = "entered-in-error"
    UNKNOWN = "unknown"


class AdverseEventActuality(str, Enum):
    ACTUAL = "actual"
    POTENTIAL = "potential"


class ClinicalImpressionStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ENTERED_IN_ERROR = "entered-in-error"


class Flag(ResourceMixin, Base):
    """Prospective warning attached to a patient (fall risk, isolation...)."""

    __tablename__ = "flags"
    resource_type = "Flag"

    status: Mapped[FlagStatus] = mapped_column(
        status_enum(FlagStatus, "flag_status_enum"),
        nullable=False,
        default=FlagStatus.ACTIVE,
    )
    category_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_code: Mapped[str] = mapped_column(String(50), nullable=False)
    code_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_system: Mapped[str | None] = mapped_column(String(255), nullable=True)

    subject_patient_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=True
    )
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True)
    author_practitioner_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )

    period_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    period_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


class DetectedIssue(ResourceMixin, Base):
    __tablename__ = "detected_issues"
    resource_type = "DetectedIssue"

    status: Mapped[EventStatus] = mapped_column(
        status_enum(EventStatus, "detected_issue_status_enum"),
        nullable=False,
        default=EventStatus.FINAL,
    )
    code_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    code_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    severity: Mapped[str | None] = mapped_column(String(20), nullable=True)

    patient_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=True)
    author_practitioner_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    identified_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    mitigation_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    mitigation_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    mitigation_author_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )


class AdverseEvent(ResourceMixin, Base):
    __tablename__ = "adverse_events"
    resource_type = "AdverseEvent"

    actuality: Mapped[AdverseEventActuality] = mapped_column(
        status_enum(AdverseEventActuality, "adverse_event_actuality_enum"),
        nullable=False,
        default=AdverseEventActuality.ACTUAL,
    )
    category_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    event_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    event_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    event_system: Mapped[str | None] = mapped_column(String(255), nullable=True)

    subject_patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False
    )
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True)
    recorder_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    location_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("locations.id")), nullable=True)

    date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    detected: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    recorded_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    seriousness_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    severity_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    outcome_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ClinicalImpression(ResourceMixin, Base):
    __tablename__ = "clinical_impressions"
    resource_type = "ClinicalImpression"

    status: Mapped[ClinicalImpressionStatus] = mapped_column(
        status_enum(ClinicalImpressionStatus, "clinical_impression_status_enum"),
        nullable=False,
        default=ClinicalImpressionStatus.COMPLETED,
    )
    status_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    code_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    subject_patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False
    )
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True)
    assessor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    previous_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("clinical_impressions.id")), nullable=True
    )

    effective_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    prognosis_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    prognosis_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class RiskAssessment(ResourceMixin, Base):
    __tablename__ = "risk_assessments"
    resource_type = "RiskAssessment"

    status: Mapped[EventStatus] = mapped_column(
        status_enum(EventStatus, "risk_assessment_status_enum"),
        nullable=False,
        default=EventStatus.FINAL,
    )
    method_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    method_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    code_display: Mapped[str | None] = mapped_column(String(255), nullable=True)

    subject_patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False
    )
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("encounters.id")), nullable=True)
    condition_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("conditions.id")), nullable=True)
    performer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    occurrence_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    prediction_outcome: Mapped[str | None] = mapped_column(String(255), nullable=True)
    prediction_probability: Mapped[Decimal | None] = mapped_column(Numeric(5, 4), nullable=True)
    prediction_qualitative: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mitigation: Mapped[str | None] = mapped_column(Text, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
