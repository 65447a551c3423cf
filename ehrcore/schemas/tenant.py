from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ehrcore.models.tenant_global import TenantStatus


class TenantCreate(BaseModel):
    tenant_id: str = Field(min_length=1, max_length=100)
    name: str | None = Field(default=None, max_length=255)

    @field_validator("tenant_id")
    @classmethod
    def validate_tenant_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("tenant_id must not be blank")
        if any(ch.isspace() for ch in v):
            raise ValueError("tenant_id must not contain whitespace")
        return v


class TenantResponse(BaseModel):
    id: UUID
    tenant_id: str
    name: str | None
    schema_name: str
    status: TenantStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
