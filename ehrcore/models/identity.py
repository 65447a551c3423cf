# ehrcore/models/identity.py
"""
Reference targets of the clinical resources: who, where, what and under
which coverage. Tenant-scoped like everything under the placeholder schema.
"""

import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from ehrcore.models.base import Base, ResourceMixin, UTCDateTime, status_enum, tenant_fk


class LocationStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class EncounterStatus(str, Enum):
    PLANNED = "planned"
    ARRIVED = "arrived"
    TRIAGED = "triaged"
    IN_PROGRESS = "in-progress"
    ONLEAVE = "onleave"
    FINISHED = "finished"
    CANCELLED = "cancelled"
    ENTERED_IN_ERROR = "entered-in-error"
    UNKNOWN = "unknown"


class MedicationStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ENTERED_IN_ERROR = "entered-in-error"


class CoverageStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    DRAFT = "draft"
    ENTERED_IN_ERROR = "entered-in-error"


class Organization(ResourceMixin, Base):
    __tablename__ = "organizations"
    resource_type = "Organization"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_line: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    parent_organization_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )


class Practitioner(ResourceMixin, Base):
    __tablename__ = "practitioners"
    resource_type = "Practitioner"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    prefix: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    npi_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))


class Patient(ResourceMixin, Base):
    """
    Tenant-scoped patient entity.

    NOTE:
    - mrn is unique inside the namespace only; two tenants may reuse it.
    """

    __tablename__ = "patients"
    resource_type = "Patient"

    mrn: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)

    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_line: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    managing_organization_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    primary_care_practitioner_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )


class Location(ResourceMixin, Base):
    __tablename__ = "locations"
    resource_type = "Location"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[LocationStatus] = mapped_column(
        status_enum(LocationStatus, "location_status_enum"),
        nullable=False,
        default=LocationStatus.ACTIVE,
    )
    type_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )


class Encounter(ResourceMixin, Base):
    __tablename__ = "encounters"
    resource_type = "Encounter"

    status: Mapped[EncounterStatus] = mapped_column(
        status_enum(EncounterStatus, "encounter_status_enum"),
        nullable=False,
    )
    class_code: Mapped[str] = mapped_column(String(20), nullable=False)
    type_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    type_display: Mapped[str | None] = mapped_column(String(255), nullable=True)

    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False)
    practitioner_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("practitioners.id")), nullable=True
    )
    location_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey(tenant_fk("locations.id")), nullable=True)
    service_provider_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )

    period_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    period_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    reason_text: Mapped[str | None] = mapped_column(Text, nullable=True)


class Medication(ResourceMixin, Base):
    __tablename__ = "medications"
    resource_type = "Medication"

    code_value: Mapped[str] = mapped_column(String(30), nullable=False)
    code_display: Mapped[str] = mapped_column(String(500), nullable=False)
    code_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[MedicationStatus] = mapped_column(
        status_enum(MedicationStatus, "medication_status_enum"),
        nullable=False,
        default=MedicationStatus.ACTIVE,
    )
    form_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    form_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    manufacturer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )


class Coverage(ResourceMixin, Base):
    __tablename__ = "coverages"
    resource_type = "Coverage"

    status: Mapped[CoverageStatus] = mapped_column(
        status_enum(CoverageStatus, "coverage_status_enum"),
        nullable=False,
        default=CoverageStatus.ACTIVE,
    )
    type_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    subscriber_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    beneficiary_patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("patients.id")), nullable=False
    )
    payor_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    plan_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    period_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    period_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
