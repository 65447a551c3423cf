"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- A database engine (in-memory SQLite, or Postgres via EHRCORE_TEST_DATABASE_URL)
- Provisioned tenants, dropped again on teardown
- Small builders for the resources most tests reference
"""

import os
import uuid

import pytest

from ehrcore.core.config import Settings
from ehrcore.core.database import create_db_engine
from ehrcore.core.tenant_db import tenant_session
from ehrcore.models.identity import Organization, Patient, Practitioner
from ehrcore.repositories.identity import OrganizationRepository, PatientRepository, PractitionerRepository
from ehrcore.services.tenant_service import create_registry, drop_tenant, list_tenants, provision_tenant

# =============================================================================
# Database Fixtures
# =============================================================================


def _test_database_url() -> str:
    return os.environ.get("EHRCORE_TEST_DATABASE_URL", "sqlite://")


@pytest.fixture
def settings() -> Settings:
    """Explicit settings so no .env or DATABASE_URL is required."""
    return Settings(database_url=_test_database_url())


@pytest.fixture
def engine(settings):
    """Engine with the tenant registry created.

    In-memory SQLite gives every test a fresh database; on Postgres the
    tenants created by a test are dropped by the tenant fixtures.
    """
    engine = create_db_engine(settings)
    create_registry(engine)
    yield engine
    engine.dispose()


# =============================================================================
# Tenant Fixtures
# =============================================================================


@pytest.fixture
def make_tenant(engine):
    """Factory provisioning tenants by id; all of them are dropped afterwards."""
    created: list[str] = []

    def _make(tenant_id: str, name: str | None = None) -> str:
        tenant = provision_tenant(engine, tenant_id, name=name)
        created.append(tenant.tenant_id)
        return tenant.tenant_id

    yield _make

    registered = {tenant.tenant_id for tenant in list_tenants(engine)}
    for tenant_id in dict.fromkeys(created):
        if tenant_id in registered:
            drop_tenant(engine, tenant_id)


@pytest.fixture
def tenant_id(make_tenant) -> str:
    """The default tenant "t1"."""
    return make_tenant("t1")


@pytest.fixture
def db(engine, tenant_id):
    """Session scoped to tenant "t1", committed when the test finishes."""
    with tenant_session(engine, tenant_id) as session:
        yield session


# =============================================================================
# Resource builders
# =============================================================================


def build_patient(**overrides) -> Patient:
    values = {
        "mrn": f"MRN-{uuid.uuid4().hex[:10]}",
        "first_name": "Jane",
        "last_name": "Doe",
    }
    values.update(overrides)
    return Patient(**values)


def create_patient(db, **overrides) -> Patient:
    return PatientRepository(db).create(build_patient(**overrides))


def create_practitioner(db, **overrides) -> Practitioner:
    values = {"first_name": "Gregory", "last_name": "House"}
    values.update(overrides)
    return PractitionerRepository(db).create(Practitioner(**values))


def create_organization(db, **overrides) -> Organization:
    values = {"name": "General Hospital"}
    values.update(overrides)
    return OrganizationRepository(db).create(Organization(**values))
