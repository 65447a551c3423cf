# ehrcore/models/conformance.py
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from ehrcore.models.base import Base, ChildMixin, ResourceMixin, UTCDateTime, status_enum, tenant_fk


class PublicationStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    RETIRED = "retired"
    UNKNOWN = "unknown"


class NamingSystemKind(str, Enum):
    CODESYSTEM = "codesystem"
    IDENTIFIER = "identifier"
    ROOT = "root"


class OperationKind(str, Enum):
    OPERATION = "operation"
    QUERY = "query"


class OperationParameterUse(str, Enum):
    IN = "in"
    OUT = "out"


class NamingSystem(ResourceMixin, Base):
    __tablename__ = "naming_systems"
    resource_type = "NamingSystem"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[PublicationStatus] = mapped_column(
        status_enum(PublicationStatus, "naming_system_status_enum"),
        nullable=False,
        default=PublicationStatus.ACTIVE,
    )
    kind: Mapped[NamingSystemKind] = mapped_column(
        status_enum(NamingSystemKind, "naming_system_kind_enum"),
        nullable=False,
        default=NamingSystemKind.IDENTIFIER,
    )
    date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    publisher: Mapped[str | None] = mapped_column(String(255), nullable=True)
    responsible: Mapped[str | None] = mapped_column(String(255), nullable=True)
    type_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    type_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    usage_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    jurisdiction: Mapped[str | None] = mapped_column(String(50), nullable=True)


class NamingSystemUniqueId(ChildMixin, Base):
    __tablename__ = "naming_system_unique_ids"
    parent_key = "naming_system_id"

    naming_system_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("naming_systems.id"), ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    value: Mapped[str] = mapped_column(String(500), nullable=False)
    preferred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    period_start: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    period_end: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


class OperationDefinition(ResourceMixin, Base):
    __tablename__ = "operation_definitions"
    resource_type = "OperationDefinition"

    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[PublicationStatus] = mapped_column(
        status_enum(PublicationStatus, "operation_definition_status_enum"),
        nullable=False,
        default=PublicationStatus.ACTIVE,
    )
    kind: Mapped[OperationKind] = mapped_column(
        status_enum(OperationKind, "operation_definition_kind_enum"),
        nullable=False,
        default=OperationKind.OPERATION,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    code: Mapped[str] = mapped_column(String(100), nullable=False)
    system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    type: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    instance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    input_profile: Mapped[str | None] = mapped_column(String(500), nullable=True)
    output_profile: Mapped[str | None] = mapped_column(String(500), nullable=True)
    publisher: Mapped[str | None] = mapped_column(String(255), nullable=True)


class OperationDefinitionParameter(ChildMixin, Base):
    __tablename__ = "operation_definition_parameters"
    parent_key = "operation_definition_id"

    operation_definition_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(tenant_fk("operation_definitions.id"), ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    use: Mapped[OperationParameterUse] = mapped_column(
        status_enum(OperationParameterUse, "operation_parameter_use_enum"),
        nullable=False,
    )
    min_val: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    max_val: Mapped[str] = mapped_column(String(10), nullable=False, default="*", server_default=text("'*'"))
    documentation: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    search_type: Mapped[str | None] = mapped_column(String(20), nullable=True)


class MessageDefinition(ResourceMixin, Base):
    __tablename__ = "message_definitions"
    resource_type = "MessageDefinition"

    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[PublicationStatus] = mapped_column(
        status_enum(PublicationStatus, "message_definition_status_enum"),
        nullable=False,
        default=PublicationStatus.ACTIVE,
    )
    date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    publisher: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_coding_code: Mapped[str] = mapped_column(String(100), nullable=False)
    event_coding_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    event_coding_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[str | None] = mapped_column(String(30), nullable=True)
    response_required: Mapped[str | None] = mapped_column(String(30), nullable=True)


class MessageHeader(ResourceMixin, Base):
    __tablename__ = "message_headers"
    resource_type = "MessageHeader"

    event_coding_code: Mapped[str] = mapped_column(String(100), nullable=False)
    event_coding_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    event_coding_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    destination_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    destination_endpoint: Mapped[str | None] = mapped_column(String(500), nullable=True)
    sender_org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey(tenant_fk("organizations.id")), nullable=True
    )
    source_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source_endpoint: Mapped[str] = mapped_column(String(500), nullable=False)
    source_software: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source_version: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reason_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reason_display: Mapped[str | None] = mapped_column(String(255), nullable=True)
    response_identifier: Mapped[str | None] = mapped_column(String(100), nullable=True)
    response_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    focus_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    definition_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
