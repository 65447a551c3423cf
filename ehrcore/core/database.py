# ehrcore/core/database.py
from __future__ import annotations

import logging
import os
import shutil
import tempfile
import weakref

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine, make_url

from ehrcore.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Engine-level execution options read back by the tenant scope
SQLITE_TENANT_DIR = "ehrcore_sqlite_tenant_dir"
STATEMENT_TIMEOUT_MS = "ehrcore_statement_timeout_ms"


def create_db_engine(settings: Settings | None = None) -> Engine:
    """
    Build the shared engine (connection pool) used by every tenant scope.

    Postgres gets a sized QueuePool with pre-ping. SQLite is supported for
    local runs and the test-suite: each tenant namespace is a database file
    attached for the length of one scope, foreign keys are switched on per
    connection and SQLAlchemy owns BEGIN so that SAVEPOINTs behave. An
    in-memory URL gets a private scratch directory removed with the engine.
    """
    settings = settings or get_settings()
    url = make_url(settings.database_url)

    if url.get_backend_name() == "sqlite":
        return _create_sqlite_engine(settings)

    return create_engine(
        url,
        future=True,
        echo=settings.db_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        execution_options={STATEMENT_TIMEOUT_MS: settings.statement_timeout_ms},
    )


def _create_sqlite_engine(settings: Settings) -> Engine:
    url = make_url(settings.database_url)
    scratch_dir = None

    if url.database in (None, "", ":memory:"):
        # Private scratch directory: the registry and every tenant database are files in it
        scratch_dir = tempfile.mkdtemp(prefix="ehrcore_")
        url = url.set(database=os.path.join(scratch_dir, "main.db"))
        tenant_dir = settings.sqlite_tenant_dir or scratch_dir
    else:
        tenant_dir = settings.sqlite_tenant_dir or os.path.dirname(os.path.abspath(url.database))

    engine = create_engine(
        url,
        future=True,
        echo=settings.db_echo,
        connect_args={"check_same_thread": False},
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        execution_options={SQLITE_TENANT_DIR: tenant_dir},
    )
    if scratch_dir is not None:
        weakref.finalize(engine, shutil.rmtree, scratch_dir, True)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Hand transaction control to SQLAlchemy (pysqlite SAVEPOINT recipe)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def sqlite_tenant_path(engine: Engine, schema_name: str) -> str:
    tenant_dir = engine.get_execution_options()[SQLITE_TENANT_DIR]
    return os.path.join(tenant_dir, f"{schema_name}.db")


def _attached_databases(cursor) -> set[str]:
    return {row[1] for row in cursor.execute("PRAGMA database_list").fetchall()}


def ensure_sqlite_attached(conn: Connection, schema_name: str) -> None:
    """
    Attach the tenant database to this SQLite connection for one scope.

    Must run outside a transaction: SQLite refuses ATTACH inside one, so the
    raw DBAPI connection is used and SQLAlchemy's autobegin is not triggered.
    """
    cursor = conn.connection.dbapi_connection.cursor()
    try:
        if schema_name not in _attached_databases(cursor):
            path = sqlite_tenant_path(conn.engine, schema_name)
            cursor.execute(f'ATTACH DATABASE ? AS "{schema_name}"', (path,))
            logger.debug("Attached SQLite tenant database schema=%s", schema_name)
    finally:
        cursor.close()


def detach_sqlite(conn: Connection, schema_name: str) -> None:
    cursor = conn.connection.dbapi_connection.cursor()
    try:
        if schema_name in _attached_databases(cursor):
            cursor.execute(f'DETACH DATABASE "{schema_name}"')
    finally:
        cursor.close()

