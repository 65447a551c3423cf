# ehrcore/models/tenant_global.py
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from ehrcore.models.base import Base, UTCDateTime, status_enum
from ehrcore.utils.datetime_utils import utc_now


class TenantStatus(str, PyEnum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class Tenant(Base):
    """
    Registry entry mapping an opaque tenant id to its storage namespace.

    Stored in the default schema (public on Postgres, main on SQLite)
    so every tenant can be resolved before a namespace is bound.
    """

    __tablename__ = "tenants"

    # Primary Key
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Business Identifiers
    tenant_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    schema_name: Mapped[str] = mapped_column(
        String(63),
        nullable=False,
        unique=True,
        doc="Namespace for this tenant (e.g. tenant_ab12cd34)",
    )

    # Status
    status: Mapped[TenantStatus] = mapped_column(
        status_enum(TenantStatus, "tenant_status_enum"),
        nullable=False,
        server_default=text("'ACTIVE'"),
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now,
    )
