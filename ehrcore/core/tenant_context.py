# ehrcore/core/tenant_context.py
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.engine import Connection

from ehrcore.core.errors import TenantNotFound
from ehrcore.models.tenant_global import Tenant, TenantStatus

logger = logging.getLogger(__name__)


class TenantContext:
    """
    Wraps the resolved tenant for one tenant-scoped operation.

    - tenant_id:   opaque identifier supplied by the caller
    - schema_name: storage namespace every tenant table is rewritten to
    """

    def __init__(self, tenant_id: str, schema_name: str):
        self.tenant_id = tenant_id
        self.schema_name = schema_name

    def __repr__(self) -> str:
        return f"TenantContext(tenant_id={self.tenant_id!r}, schema_name={self.schema_name!r})"


def resolve_tenant(conn: Connection, tenant_id: str) -> TenantContext:
    """
    Resolve tenant_id from the registry.

    Empty ids, unknown ids and tenants that are not ACTIVE all raise
    TenantNotFound; callers cannot tell a suspended tenant from a missing one.
    """
    if not tenant_id or not str(tenant_id).strip():
        raise TenantNotFound(tenant_id or "")

    row = conn.execute(
        select(Tenant.schema_name, Tenant.status).where(Tenant.tenant_id == tenant_id)
    ).first()
    if row is None:
        logger.warning("Tenant resolution failed: unknown tenant")
        raise TenantNotFound(tenant_id)

    schema_name, tenant_status = row
    # Enforce tenant status: only ACTIVE tenants get a scope
    if tenant_status != TenantStatus.ACTIVE:
        logger.warning("Tenant resolution failed: tenant is %s", tenant_status)
        raise TenantNotFound(tenant_id)

    return TenantContext(tenant_id=tenant_id, schema_name=schema_name)
