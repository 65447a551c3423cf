#!/usr/bin/env python3
# scripts/provision_tenant.py
"""
Tenant provisioning (registry + storage namespace).

Design notes:
- The registry table is created on first use, so this is safe on a fresh database.
- Provisioning an existing tenant id fails; nothing is overwritten.
- --drop destroys the namespace and every record in it.

Examples:
  # Create a tenant
  python -m scripts.provision_tenant --tenant-id acme --name "Acme Clinic"

  # Suspend / re-activate a tenant (data kept)
  python -m scripts.provision_tenant --tenant-id acme --suspend
  python -m scripts.provision_tenant --tenant-id acme --activate

  # Create tables added since the tenant was provisioned
  python -m scripts.provision_tenant --tenant-id acme --sync-tables

  # Drop a tenant and its data
  python -m scripts.provision_tenant --tenant-id acme --drop

  # List tenants
  python -m scripts.provision_tenant --list
"""

from __future__ import annotations

import argparse
import logging
import sys

from ehrcore.core.config import get_settings
from ehrcore.core.database import create_db_engine
from ehrcore.core.errors import RepositoryError
from ehrcore.services.tenant_service import (
    activate_tenant,
    create_registry,
    drop_tenant,
    ensure_tenant_tables_exist,
    list_tenants,
    provision_tenant,
    suspend_tenant,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="EHR core tenant provisioning")
    p.add_argument("--tenant-id", type=str, help="Opaque tenant identifier")
    p.add_argument("--name", type=str, default=None, help="Display name for a new tenant")

    action = p.add_mutually_exclusive_group()
    action.add_argument("--drop", action="store_true", help="Drop the tenant namespace and registry entry")
    action.add_argument("--suspend", action="store_true", help="Stop resolving the tenant (data kept)")
    action.add_argument("--activate", action="store_true", help="Resolve a suspended tenant again")
    action.add_argument("--sync-tables", action="store_true", help="Create tenant tables missing from the namespace")
    action.add_argument("--list", action="store_true", help="List registered tenants")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if not args.list and not args.tenant_id:
        print("Nothing to do. Use --tenant-id (with an optional action) or --list.")
        return 1

    # Load settings (validates .env and provides typed access to config)
    settings = get_settings()
    engine = create_db_engine(settings)

    try:
        create_registry(engine)
        if args.list:
            for tenant in list_tenants(engine):
                print(f"{tenant.tenant_id}\t{tenant.schema_name}\t{tenant.status.value}")
        elif args.drop:
            drop_tenant(engine, args.tenant_id)
            print(f"Tenant dropped: {args.tenant_id}")
        elif args.suspend:
            suspend_tenant(engine, args.tenant_id)
            print(f"Tenant suspended: {args.tenant_id}")
        elif args.activate:
            activate_tenant(engine, args.tenant_id)
            print(f"Tenant activated: {args.tenant_id}")
        elif args.sync_tables:
            ensure_tenant_tables_exist(engine, args.tenant_id)
            print(f"Tenant tables ensured: {args.tenant_id}")
        else:
            tenant = provision_tenant(
                engine,
                args.tenant_id,
                name=args.name,
                schema_prefix=settings.tenant_schema_prefix,
            )
            print(f"Tenant provisioned: {tenant.tenant_id} (schema {tenant.schema_name})")
    except (RepositoryError, ValueError) as exc:
        logger.exception("Tenant provisioning failed")
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    finally:
        engine.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())
