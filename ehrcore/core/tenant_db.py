# ehrcore/core/tenant_db.py
"""
Tenant-scoped connection/session helpers.

- Every tenant table is declared under the placeholder schema TENANT_SCHEMA.
- A borrowed connection is bound to one tenant by a schema_translate_map on
  that Connection only; nothing is SET on the pooled DBAPI connection. On
  SQLite the tenant database is attached for the scope and detached before
  the connection goes back to the pool.
- A statement run without a binding targets the placeholder schema, which
  never exists, and fails.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from ehrcore.core.database import STATEMENT_TIMEOUT_MS, detach_sqlite, ensure_sqlite_attached
from ehrcore.core.errors import ConnectionAcquisitionFailed
from ehrcore.core.tenant_context import TenantContext, resolve_tenant
from ehrcore.models.base import TENANT_SCHEMA

logger = logging.getLogger(__name__)

T = TypeVar("T")


def bind_connection(conn: Connection, schema_name: str) -> Connection:
    """
    Point tenant tables at schema_name for this Connection object only.
    """
    if not schema_name or not schema_name.strip():
        raise ValueError("Tenant schema name missing.")
    if conn.dialect.name == "sqlite":
        ensure_sqlite_attached(conn, schema_name)
    return conn.execution_options(schema_translate_map={TENANT_SCHEMA: schema_name})


def unbind_connection(conn: Connection, schema_name: str) -> None:
    """
    Return a bound connection to its tenant-neutral state before release.

    On SQLite the tenant database is detached again. A connection that
    refuses the DETACH is invalidated so the pool never hands it out.
    """
    if conn.dialect.name != "sqlite":
        return
    try:
        detach_sqlite(conn, schema_name)
    except sqlite3.Error:
        logger.exception("Could not detach tenant database schema=%s", schema_name)
        conn.invalidate()


def _acquire_connection(engine: Engine) -> Connection:
    try:
        return engine.connect()
    except PoolTimeoutError as exc:
        logger.exception("Connection pool exhausted")
        raise ConnectionAcquisitionFailed("Timed out waiting for a pooled connection") from exc
    except KeyboardInterrupt as exc:
        logger.exception("Connection acquisition interrupted")
        raise ConnectionAcquisitionFailed("Connection acquisition was interrupted") from exc


def _apply_statement_timeout(conn: Connection) -> None:
    timeout_ms = conn.get_execution_options().get(STATEMENT_TIMEOUT_MS)
    if timeout_ms and conn.dialect.name == "postgresql":
        # Transaction-local, discarded at COMMIT/ROLLBACK
        conn.execute(
            text("SELECT set_config('statement_timeout', :ms, true)"),
            {"ms": str(timeout_ms)},
        )


def _new_session(conn: Connection) -> Session:
    return Session(
        bind=conn,
        join_transaction_mode="create_savepoint",
        autoflush=False,
        expire_on_commit=False,
    )


@contextmanager
def tenant_session(engine: Engine, tenant_id: str) -> Iterator[Session]:
    """
    Scoped session for one logical operation inside tenant_id's namespace.

    Commits when the block exits normally, rolls back when it raises.
    The exception is re-raised unchanged and the connection is always
    returned to the pool.
    """
    conn = _acquire_connection(engine)
    try:
        context = resolve_tenant(conn, tenant_id)
        # End the registry read before (re)attaching, SQLite cannot ATTACH mid-transaction
        conn.commit()

        bound = bind_connection(conn, context.schema_name)
        try:
            with bound.begin():
                _apply_statement_timeout(bound)
                db = _new_session(bound)
                try:
                    yield db
                    db.commit()
                finally:
                    db.close()
        finally:
            unbind_connection(bound, context.schema_name)
    finally:
        conn.close()


def with_tenant(engine: Engine, tenant_id: str, operation: Callable[[Session], T]) -> T:
    """
    Run operation(db) inside tenant_id's namespace and return its result.
    """
    with tenant_session(engine, tenant_id) as db:
        return operation(db)


@contextmanager
def tenant_connection(engine: Engine, context: TenantContext) -> Iterator[Connection]:
    """
    Bound connection for an already-resolved tenant (provisioning, admin jobs).
    The registry is not consulted, so non-ACTIVE tenants can be prepared.
    """
    conn = _acquire_connection(engine)
    try:
        bound = bind_connection(conn, context.schema_name)
        try:
            with bound.begin():
                yield bound
        finally:
            unbind_connection(bound, context.schema_name)
    finally:
        conn.close()
