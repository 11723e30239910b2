from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class OrganizationCreate(SQLModel):
    """
    Payload for registering an issuing organization.
    """
    name: str = Field(
        max_length=200,
        schema_extra={"examples": ["Acme University"]}
    )
    type: str = Field(
        default="college",
        description="One of 'college', 'company', 'tpo', 'other'. Anything else becomes 'other'."
    )
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_person: Optional[str] = Field(default=None, max_length=200)


class OrganizationRead(SQLModel):
    id: int
    name: str
    type: str
    contact_email: Optional[str] = None
    contact_person: Optional[str] = None
    is_active: bool
    created_at: datetime
    total_certificates: int = 0
