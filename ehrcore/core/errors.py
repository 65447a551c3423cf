# ehrcore/core/errors.py
"""
Error taxonomy shared by the tenant scope and every repository.

Repositories never swallow storage failures: a failure is classified into
one of these exceptions and re-raised with the driver error chained.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

# SQLSTATE class 23 codes (Postgres)
FOREIGN_KEY_VIOLATION = "23503"

_SQLITE_FK_MESSAGE = "FOREIGN KEY constraint failed"


class RepositoryError(Exception):
    """Base class for every error raised by the repository layer."""


class NotFound(RepositoryError):
    def __init__(self, resource_type: str, key: object | None = None):
        self.resource_type = resource_type
        self.key = key
        super().__init__(f"{resource_type} not found")


class ReferentialIntegrityViolation(RepositoryError):
    """A reference points at a resource that does not exist in the namespace."""


class ConstraintViolation(RepositoryError):
    """Any other storage-level constraint breach (NOT NULL, CHECK, UNIQUE)."""


class TenantNotFound(RepositoryError):
    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Tenant '{tenant_id}' not found")


class ConnectionAcquisitionFailed(RepositoryError):
    """The pool could not hand out a connection (exhausted or interrupted)."""


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_foreign_key_violation(exc: DBAPIError) -> bool:
    if _sqlstate(exc) == FOREIGN_KEY_VIOLATION:
        return True
    return _SQLITE_FK_MESSAGE in str(exc.orig)


def classify_integrity_error(exc: DBAPIError, resource_type: str) -> RepositoryError:
    """
    Map a driver integrity or data error onto the taxonomy.

    The returned exception carries a generic message; the driver detail
    (which can echo bound values) is only kept as the chained cause.
    """
    if is_foreign_key_violation(exc):
        logger.debug("Referential integrity violation on %s", resource_type)
        return ReferentialIntegrityViolation(
            f"{resource_type} references a resource that does not exist"
        )
    logger.debug("Constraint violation on %s: %s", resource_type, type(exc.orig).__name__)
    return ConstraintViolation(f"{resource_type} violates a storage constraint")
