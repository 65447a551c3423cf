# ehrcore/services/tenant_service.py
import logging
import os
from typing import Optional

from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ehrcore.core.database import sqlite_tenant_path
from ehrcore.core.errors import ConstraintViolation, TenantNotFound
from ehrcore.core.tenant_context import TenantContext
from ehrcore.core.tenant_db import bind_connection, tenant_connection, unbind_connection
from ehrcore.models.tenant_domain import TENANT_TABLES
from ehrcore.models.tenant_global import Tenant, TenantStatus
from ehrcore.schemas.tenant import TenantCreate
from ehrcore.utils.id_generators import generate_schema_name

logger = logging.getLogger(__name__)


def create_registry(engine: Engine) -> None:
    """
    Create the tenants registry table in the default schema if missing.
    """
    Tenant.__table__.create(bind=engine, checkfirst=True)


def _create_tenant_schema_and_tables(conn: Connection, schema_name: str) -> None:
    """
    Create the tenant namespace and all tenant-domain tables inside it.

    conn must already be bound to schema_name (see tenant_connection), so
    every table declared under the placeholder schema lands in the namespace.
    """
    try:
        if conn.dialect.name == "postgresql":
            conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{schema_name}"'))

        # Create tables for this tenant
        for table in TENANT_TABLES:
            table.create(bind=conn, checkfirst=True)
    except SQLAlchemyError as exc:
        raise RuntimeError(f"Failed to create tenant schema '{schema_name}': {exc}") from exc


def _get_tenant_row(db: Session, tenant_id: str) -> Optional[Tenant]:
    return db.execute(select(Tenant).where(Tenant.tenant_id == tenant_id)).scalar_one_or_none()


def get_tenant(engine: Engine, tenant_id: str) -> Tenant:
    """
    Registry lookup regardless of status. Raises TenantNotFound.
    """
    with Session(engine, expire_on_commit=False) as db:
        tenant = _get_tenant_row(db, tenant_id)
    if tenant is None:
        raise TenantNotFound(tenant_id)
    return tenant


def list_tenants(engine: Engine) -> list[Tenant]:
    with Session(engine, expire_on_commit=False) as db:
        return list(db.execute(select(Tenant).order_by(Tenant.created_at, Tenant.tenant_id)).scalars())


def provision_tenant(
    engine: Engine,
    tenant_id: str,
    name: Optional[str] = None,
    schema_prefix: str = "tenant_",
) -> Tenant:
    """
    Register tenant_id and prepare its storage namespace.

    - tenant_id must be unique in the registry.
    - A fresh namespace name is generated from the schema prefix.
    - The namespace, every tenant table and the ACTIVE registry row are
      created in one transaction: a failure leaves nothing registered.
    """
    payload = TenantCreate(tenant_id=tenant_id, name=name)
    create_registry(engine)

    with Session(engine) as db:
        existing = _get_tenant_row(db, payload.tenant_id)
    if existing:
        raise ConstraintViolation(f"Tenant '{payload.tenant_id}' already exists")

    schema_name = generate_schema_name(schema_prefix)
    context = TenantContext(tenant_id=payload.tenant_id, schema_name=schema_name)

    try:
        with tenant_connection(engine, context) as conn:
            _create_tenant_schema_and_tables(conn, schema_name)
            # The registry table has no placeholder schema, the translate map leaves it alone
            conn.execute(
                insert(Tenant).values(
                    tenant_id=payload.tenant_id,
                    name=payload.name,
                    schema_name=schema_name,
                    status=TenantStatus.ACTIVE,
                )
            )
    except IntegrityError as exc:
        # Lost a race with a concurrent provision of the same tenant_id
        raise ConstraintViolation(f"Tenant '{payload.tenant_id}' already exists") from exc

    logger.info("Provisioned tenant %s schema=%s", payload.tenant_id, schema_name)
    return get_tenant(engine, payload.tenant_id)


def ensure_tenant_tables_exist(engine: Engine, tenant_id: str) -> None:
    """
    Create any tenant table missing from an existing namespace.

    Used after new resource types are added; existing tables are untouched.
    """
    tenant = get_tenant(engine, tenant_id)
    context = TenantContext(tenant_id=tenant.tenant_id, schema_name=tenant.schema_name)
    with tenant_connection(engine, context) as conn:
        _create_tenant_schema_and_tables(conn, tenant.schema_name)


def _set_status(engine: Engine, tenant_id: str, status: TenantStatus) -> None:
    with engine.begin() as conn:
        result = conn.execute(
            update(Tenant).where(Tenant.tenant_id == tenant_id).values(status=status)
        )
        if result.rowcount == 0:
            raise TenantNotFound(tenant_id)
    logger.info("Tenant %s is now %s", tenant_id, status.value)


def suspend_tenant(engine: Engine, tenant_id: str) -> None:
    """
    Stop resolving tenant_id; its data is kept.
    """
    _set_status(engine, tenant_id, TenantStatus.SUSPENDED)


def activate_tenant(engine: Engine, tenant_id: str) -> None:
    _set_status(engine, tenant_id, TenantStatus.ACTIVE)


def drop_tenant(engine: Engine, tenant_id: str) -> None:
    """
    Remove tenant_id from the registry and destroy its namespace and data.
    """
    tenant = get_tenant(engine, tenant_id)
    schema_name = tenant.schema_name

    with engine.connect() as conn:
        if conn.dialect.name == "sqlite":
            _drop_sqlite_namespace(conn, schema_name)
        with conn.begin():
            if conn.dialect.name == "postgresql":
                conn.execute(text(f'DROP SCHEMA IF EXISTS "{schema_name}" CASCADE'))
            conn.execute(delete(Tenant).where(Tenant.tenant_id == tenant_id))

    logger.info("Dropped tenant %s schema=%s", tenant_id, schema_name)


def _drop_sqlite_namespace(conn: Connection, schema_name: str) -> None:
    """
    Empty and delete the tenant database file.

    Scopes detach their tenant database on release, so no idle pooled
    connection still has the file attached when it is removed.
    """
    bound = bind_connection(conn, schema_name)
    try:
        with bound.begin():
            # Children before parents
            for table in reversed(TENANT_TABLES):
                table.drop(bind=bound, checkfirst=True)
    finally:
        unbind_connection(bound, schema_name)

    path = sqlite_tenant_path(conn.engine, schema_name)
    if os.path.exists(path):
        os.remove(path)
