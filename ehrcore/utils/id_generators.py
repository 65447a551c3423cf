# ehrcore/utils/id_generators.py
import re
import uuid

SCHEMA_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]{0,62}$")


def generate_fhir_id() -> str:
    """
    Generate the external (FHIR) id of a new resource.

    Drawn from uuid4 on every call, independently of the internal primary
    key, so neither id can be used to predict the other. Uniqueness inside
    a namespace is also enforced by the fhir_id UNIQUE constraint.

    Example: 3f2b9a4e-6c1d-4b7e-9f0a-1c2d3e4f5a6b
    """
    return str(uuid.uuid4())


def generate_schema_name(prefix: str = "tenant_") -> str:
    """
    Generate a storage namespace name for a tenant: {prefix}{8 hex chars}.

    The result is always a safe identifier:
    - lower-case
    - alphanumeric + underscore

    Example: tenant_ab12cd34
    """
    short_id = uuid.uuid4().hex[:8]
    return validate_schema_name(f"{prefix}{short_id}")


def validate_schema_name(schema_name: str) -> str:
    if not schema_name or not SCHEMA_NAME_PATTERN.match(schema_name):
        raise ValueError(f"Invalid schema name: {schema_name!r}")
    return schema_name
