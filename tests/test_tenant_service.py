"""Tests for tenant provisioning, status changes and the operator script."""

import os

import pytest
from sqlalchemy import create_engine, inspect, text

from ehrcore.core.config import Settings, get_settings
from ehrcore.core.database import create_db_engine, sqlite_tenant_path
from ehrcore.core.errors import ConstraintViolation, TenantNotFound
from ehrcore.core.tenant_db import with_tenant
from ehrcore.models.conformance import NamingSystem
from ehrcore.models.tenant_domain import TENANT_TABLES
from ehrcore.models.tenant_global import TenantStatus
from ehrcore.repositories.conformance import NamingSystemRepository
from ehrcore.schemas.tenant import TenantResponse
from ehrcore.services.tenant_service import (
    activate_tenant,
    create_registry,
    drop_tenant,
    ensure_tenant_tables_exist,
    get_tenant,
    list_tenants,
    provision_tenant,
    suspend_tenant,
)
from scripts import provision_tenant as cli


def _tables_in(engine, schema_name: str) -> set[str]:
    with engine.connect() as conn:
        if conn.dialect.name == "sqlite":
            rows = conn.exec_driver_sql(f'SELECT name FROM "{schema_name}".sqlite_master WHERE type = \'table\'')
            return {row[0] for row in rows}
        return set(inspect(conn).get_table_names(schema=schema_name))


class TestProvisioning:
    """Tests for provision_tenant."""

    def test_provision_registers_active_tenant(self, engine, make_tenant):
        make_tenant("acme", name="Acme Clinic")
        tenant = get_tenant(engine, "acme")

        assert tenant.status == TenantStatus.ACTIVE
        assert tenant.name == "Acme Clinic"
        assert tenant.schema_name.startswith("tenant_")

        response = TenantResponse.model_validate(tenant)
        assert response.tenant_id == "acme"

    def test_provision_creates_every_table(self, engine, make_tenant):
        make_tenant("acme")
        tenant = get_tenant(engine, "acme")

        expected = {table.name for table in TENANT_TABLES}
        assert expected <= _tables_in(engine, tenant.schema_name)

    def test_each_tenant_gets_its_own_namespace(self, engine, make_tenant):
        make_tenant("ta")
        make_tenant("tb")
        assert get_tenant(engine, "ta").schema_name != get_tenant(engine, "tb").schema_name

    def test_duplicate_tenant_rejected(self, engine, make_tenant):
        make_tenant("acme")
        with pytest.raises(ConstraintViolation):
            provision_tenant(engine, "acme")
        assert [t.tenant_id for t in list_tenants(engine)].count("acme") == 1

    @pytest.mark.parametrize("bad_id", ["", "  ", "two words"])
    def test_invalid_tenant_id_rejected(self, engine, bad_id):
        with pytest.raises(ValueError):
            provision_tenant(engine, bad_id)

    def test_custom_schema_prefix(self, engine):
        tenant = provision_tenant(engine, "prefixed", schema_prefix="clinic_")
        try:
            assert tenant.schema_name.startswith("clinic_")
        finally:
            drop_tenant(engine, "prefixed")

    def test_ensure_tables_is_idempotent(self, engine, tenant_id):
        created = with_tenant(engine, tenant_id, lambda db: NamingSystemRepository(db).create(NamingSystem(name="Kept")))

        ensure_tenant_tables_exist(engine, tenant_id)

        fetched = with_tenant(engine, tenant_id, lambda db: NamingSystemRepository(db).get_by_id(created.id))
        assert fetched.name == "Kept"


class TestStatusChanges:
    """Tests for suspending, activating, listing and dropping tenants."""

    def test_suspend_and_activate(self, engine, tenant_id):
        suspend_tenant(engine, tenant_id)
        assert get_tenant(engine, tenant_id).status == TenantStatus.SUSPENDED
        with pytest.raises(TenantNotFound):
            with_tenant(engine, tenant_id, lambda db: None)

        activate_tenant(engine, tenant_id)
        assert with_tenant(engine, tenant_id, lambda db: "ok") == "ok"

    def test_status_change_unknown_tenant(self, engine):
        with pytest.raises(TenantNotFound):
            suspend_tenant(engine, "ghost")

    def test_list_tenants(self, engine, make_tenant):
        make_tenant("ta")
        make_tenant("tb")
        assert {"ta", "tb"} <= {t.tenant_id for t in list_tenants(engine)}

    def test_drop_removes_registry_entry_and_data(self, engine, make_tenant):
        make_tenant("doomed")
        with_tenant(engine, "doomed", lambda db: NamingSystemRepository(db).create(NamingSystem(name="Gone")))

        drop_tenant(engine, "doomed")

        with pytest.raises(TenantNotFound):
            get_tenant(engine, "doomed")
        with pytest.raises(TenantNotFound):
            with_tenant(engine, "doomed", lambda db: None)

    def test_drop_then_reprovision_starts_empty(self, engine, make_tenant):
        make_tenant("again")
        with_tenant(engine, "again", lambda db: NamingSystemRepository(db).create(NamingSystem(name="Old")))
        drop_tenant(engine, "again")

        make_tenant("again")
        _, total = with_tenant(engine, "again", lambda db: NamingSystemRepository(db).list())
        assert total == 0

    def test_drop_unknown_tenant(self, engine):
        with pytest.raises(TenantNotFound):
            drop_tenant(engine, "ghost")

    def test_drop_after_scopes_on_several_pooled_connections(self, tmp_path):
        engine = create_db_engine(Settings(database_url=f"sqlite:///{tmp_path / 'main.db'}", db_pool_size=3))
        try:
            create_registry(engine)
            schema_name = provision_tenant(engine, "spread").schema_name
            provision_tenant(engine, "keeper")
            # Hold three connections at once so the pool keeps three open
            held = [engine.connect() for _ in range(3)]
            for conn in held:
                conn.close()
            for i in range(6):
                with_tenant(engine, "spread", lambda db: NamingSystemRepository(db).create(NamingSystem(name=f"S{i}")))

            drop_tenant(engine, "spread")

            assert not os.path.exists(sqlite_tenant_path(engine, schema_name))
            provision_tenant(engine, "spread")
            _, total = with_tenant(engine, "spread", lambda db: NamingSystemRepository(db).list())
            assert total == 0
            with_tenant(engine, "keeper", lambda db: NamingSystemRepository(db).create(NamingSystem(name="Kept")))
        finally:
            engine.dispose()


class TestProvisionScript:
    """Tests for the operator script."""

    @pytest.fixture
    def database_url(self, tmp_path, monkeypatch):
        url = f"sqlite:///{tmp_path / 'main.db'}"
        monkeypatch.setenv("DATABASE_URL", url)
        get_settings.cache_clear()
        yield url
        get_settings.cache_clear()

    def test_nothing_to_do(self, database_url, capsys):
        assert cli.main([]) == 1
        assert "Nothing to do" in capsys.readouterr().out

    def test_provision_list_suspend_drop(self, database_url, tmp_path, capsys):
        assert cli.main(["--tenant-id", "acme", "--name", "Acme Clinic"]) == 0
        assert "Tenant provisioned: acme" in capsys.readouterr().out

        assert cli.main(["--list"]) == 0
        listing = capsys.readouterr().out
        assert "acme" in listing
        assert "ACTIVE" in listing

        assert cli.main(["--tenant-id", "acme", "--suspend"]) == 0
        assert cli.main(["--list"]) == 0
        assert "SUSPENDED" in capsys.readouterr().out

        assert cli.main(["--tenant-id", "acme", "--drop"]) == 0
        assert not list(tmp_path.glob("tenant_*.db"))

    def test_errors_return_non_zero(self, database_url, capsys):
        assert cli.main(["--tenant-id", "ghost", "--drop"]) == 2
        assert "Tenant 'ghost' not found" in capsys.readouterr().err

    def test_duplicate_returns_non_zero(self, database_url, capsys):
        assert cli.main(["--tenant-id", "acme"]) == 0
        assert cli.main(["--tenant-id", "acme"]) == 2

    def test_sqlite_registry_is_plain_table(self, database_url):
        """The registry lives in the main database, outside any namespace."""
        cli.main(["--tenant-id", "acme"])
        engine = create_engine(database_url)
        try:
            with engine.connect() as conn:
                count = conn.execute(text("SELECT count(*) FROM tenants")).scalar_one()
            assert count == 1
        finally:
            engine.dispose()
