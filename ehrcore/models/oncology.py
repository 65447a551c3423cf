# ehrcore/models/oncology.py
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from ehrcore.models.base import Base, ChildMixin, ResourceMixin, UTCDateTime, status_enum, tenant_fk


class CancerStatus(str, Enum):
    ACTIVE_TREATMENT = "active-treatment"
    REMISSION = "remission"
    SURVEILLANCE = "surveillance"
    PROGRESSION = "progression"
    RECURRENCE = "recurrence"
    PALLIATIVE = "palliative"
    DECEASED = "deceased"


class TreatmentStatus(str, Enum):
    """Protocols, cycles and radiation courses."""

    PLANNED = "planned"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    DISCONTINUED = "discontinued"
    ENTERED_IN_ERROR = "entered-in-error"


class CancerDiagnosis(ResourceMixin, Base):
    __tablename__ = "cancer_diagnoses"
    resource_type = "CancerDiagnosis"

    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False)
    condition_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("conditions.id")), nullable=True)
    diagnosis_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    cancer_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cancer_site: Mapped[str | None] = mapped_column(String(100), nullable=True)
    histology_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    histology_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    morphology_code: Mapped[str | None] = mapped_column(String(30), nullable=True)

    staging_system: Mapped[str | None] = mapped_column(String(50), nullable=True)
    stage_group: Mapped[str | None] = mapped_column(String(20), nullable=True)
    t_stage: Mapped[str | None] = mapped_column(String(20), nullable=True)
    n_stage: Mapped[str | None] = mapped_column(String(20), nullable=True)
    m_stage: Mapped[str | None] = mapped_column(String(20), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    laterality: Mapped[str | None] = mapped_column(String(20), nullable=True)

    current_status: Mapped[CancerStatus] = mapped_column(
        status_enum(CancerStatus, "cancer_status_enum"),
        nullable=False,
        default=CancerStatus.ACTIVE_TREATMENT,
    )
    diagnosing_provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    managing_provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    icd10_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    icd10_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class TreatmentProtocol(ResourceMixin, Base):
    __tablename__ = "treatment_protocols"
    resource_type = "TreatmentProtocol"

    cancer_diagnosis_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("cancer_diagnoses.id")), nullable=False
    )
    protocol_name: Mapped[str] = mapped_column(String(255), nullable=False)
    protocol_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    protocol_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    intent: Mapped[str | None] = mapped_column(String(30), nullable=True)
    number_of_cycles: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cycle_length_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[TreatmentStatus] = mapped_column(
        status_enum(TreatmentStatus, "treatment_protocol_status_enum"),
        nullable=False,
        default=TreatmentStatus.PLANNED,
    )
    prescribing_provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    clinical_trial_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class TreatmentProtocolDrug(ChildMixin, Base):
    __tablename__ = "treatment_protocol_drugs"
    parent_key = "protocol_id"
    sequence_key = "sequence_order"

    protocol_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("treatment_protocols.id"), ondelete="CASCADE"), nullable=False
    )
    drug_name: Mapped[str] = mapped_column(String(255), nullable=False)
    drug_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    drug_code_system: Mapped[str | None] = mapped_column(String(100), nullable=True)
    route: Mapped[str | None] = mapped_column(String(30), nullable=True)
    dose_value: Mapped[Decimal | None] = mapped_column(Numeric(10, 3), nullable=True)
    dose_unit: Mapped[str | None] = mapped_column(String(30), nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(50), nullable=True)
    administration_day: Mapped[str | None] = mapped_column(String(50), nullable=True)
    infusion_duration_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sequence_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class ChemoCycle(ResourceMixin, Base):
    __tablename__ = "chemo_cycles"
    resource_type = "ChemoCycle"

    protocol_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("treatment_protocols.id")), nullable=False
    )
    cycle_number: Mapped[int] = mapped_column(Integer, nullable=False)
    planned_start_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    actual_start_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    actual_end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[TreatmentStatus] = mapped_column(
        status_enum(TreatmentStatus, "chemo_cycle_status_enum"),
        nullable=False,
        default=TreatmentStatus.PLANNED,
    )
    dose_reduction_pct: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    dose_reduction_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    delay_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bsa_m2: Mapped[Decimal | None] = mapped_column(Numeric(5, 3), nullable=True)
    weight_kg: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class ChemoAdministration(ChildMixin, Base):
    __tablename__ = "chemo_administrations"
    parent_key = "cycle_id"
    sequence_key = "sequence_number"

    cycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("chemo_cycles.id"), ondelete="CASCADE"), nullable=False
    )
    protocol_drug_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("treatment_protocol_drugs.id")), nullable=True
    )
    drug_name: Mapped[str] = mapped_column(String(255), nullable=False)
    administration_datetime: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    dose_given: Mapped[Decimal | None] = mapped_column(Numeric(10, 3), nullable=True)
    dose_unit: Mapped[str | None] = mapped_column(String(30), nullable=True)
    route: Mapped[str | None] = mapped_column(String(30), nullable=True)
    site: Mapped[str | None] = mapped_column(String(50), nullable=True)
    sequence_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reaction_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reaction_severity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    administering_nurse_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class RadiationTherapy(ResourceMixin, Base):
    __tablename__ = "radiation_therapies"
    resource_type = "RadiationTherapy"

    cancer_diagnosis_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("cancer_diagnoses.id")), nullable=False
    )
    therapy_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    modality: Mapped[str | None] = mapped_column(String(50), nullable=True)
    technique: Mapped[str | None] = mapped_column(String(50), nullable=True)
    target_site: Mapped[str | None] = mapped_column(String(100), nullable=True)
    laterality: Mapped[str | None] = mapped_column(String(20), nullable=True)
    total_dose_cgy: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    dose_per_fraction_cgy: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    planned_fractions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_fractions: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0, server_default=text("0")
    )
    start_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[TreatmentStatus] = mapped_column(
        status_enum(TreatmentStatus, "radiation_therapy_status_enum"),
        nullable=False,
        default=TreatmentStatus.PLANNED,
    )
    prescribing_provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    treating_facility_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class RadiationSession(ChildMixin, Base):
    __tablename__ = "radiation_sessions"
    parent_key = "radiation_therapy_id"
    sequence_key = "session_number"

    radiation_therapy_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("radiation_therapies.id"), ondelete="CASCADE"), nullable=False
    )
    session_number: Mapped[int] = mapped_column(Integer, nullable=False)
    session_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    dose_delivered_cgy: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    field_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    setup_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    skin_reaction_grade: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fatigue_grade: Mapped[int | None] = mapped_column(Integer, nullable=True)
    machine_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    therapist_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class TumorMarker(ResourceMixin, Base):
    __tablename__ = "tumor_markers"
    resource_type = "TumorMarker"

    cancer_diagnosis_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("cancer_diagnoses.id")), nullable=True
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False)
    marker_name: Mapped[str] = mapped_column(String(100), nullable=False)
    marker_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    marker_code_system: Mapped[str | None] = mapped_column(String(100), nullable=True)
    value_quantity: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    value_unit: Mapped[str | None] = mapped_column(String(30), nullable=True)
    value_string: Mapped[str | None] = mapped_column(String(255), nullable=True)
    value_interpretation: Mapped[str | None] = mapped_column(String(30), nullable=True)
    reference_range_low: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    reference_range_high: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    specimen_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    collection_datetime: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    result_datetime: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    performing_lab: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ordering_provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)


class TumorBoardReview(ResourceMixin, Base):
    __tablename__ = "tumor_board_reviews"
    resource_type = "TumorBoardReview"

    cancer_diagnosis_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("cancer_diagnoses.id")), nullable=False
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False)
    review_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    review_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    presenting_provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    attendees: Mapped[str | None] = mapped_column(Text, nullable=True)
    clinical_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    discussion: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
    treatment_decision: Mapped[str | None] = mapped_column(String(255), nullable=True)
    clinical_trial_discussed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    clinical_trial_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    next_review_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
