# ehrcore/models/base.py
import uuid
from datetime import datetime
from enum import Enum
from typing import ClassVar

from sqlalchemy import DateTime, Integer, String, Uuid, text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.types import TypeDecorator

from ehrcore.utils.datetime_utils import as_utc, utc_now

# Placeholder schema of every tenant table, rewritten per connection
TENANT_SCHEMA = "tenant"


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Global (registry) models and tenant-specific models
    both inherit from this class.
    """

    pass


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always comes back in UTC.

    Postgres stores timestamptz; SQLite stores naive text, so values are
    normalised to UTC on the way in and tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = as_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


def status_enum(enum_cls: type[Enum], name: str) -> SAEnum:
    """
    Lifecycle/enumeration column stored as text with a CHECK constraint.

    Values are the enum's .value strings (FHIR codes such as
    "entered-in-error"); a string outside the set reaches the database
    and is rejected there.
    """
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


def tenant_fk(target: str) -> str:
    """ForeignKey target string for a tenant table column, e.g. tenant_fk("patients.id")."""
    return f"{TENANT_SCHEMA}.{target}"


class TenantTable:
    """Puts the table under the placeholder tenant schema."""

    @declared_attr.directive
    def __table_args__(cls):
        return {"schema": TENANT_SCHEMA}


class ResourceMixin(TenantTable):
    """
    Columns shared by every top-level resource.

    NOTE:
    - id is the internal identity, fhir_id the external one. Both are
      assigned by the repository on create and never change.
    - No tenant_id column; isolation is via the namespace.
    """

    resource_type: ClassVar[str] = "Resource"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    fhir_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

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
    )


class ChildMixin(TenantTable):
    """
    Columns shared by owned child records (components, reactions, sessions...).

    parent_key names the FK column pointing at the owner; sequence_key, when
    set, names the column children are ordered by before insertion order.
    """

    parent_key: ClassVar[str]
    sequence_key: ClassVar[str | None] = None

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )
