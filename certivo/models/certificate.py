from typing import List, Optional
from datetime import datetime
from sqlmodel import SQLModel, Field

from certivo.db.schema import CertificateStatus


class CertificateIssue(SQLModel):
    """
    Payload for issuing a single certificate from the admin dashboard.

    Every field is optional at the schema level. IssuanceService validates
    them and raises a 400 ValidationError before any database work.
    """
    name: Optional[str] = Field(
        default=None,
        schema_extra={"examples": ["Jane Doe"]},
        description="Recipient name as printed on the certificate."
    )
    domain: Optional[str] = Field(
        default=None,
        schema_extra={"examples": ["Web Development"]},
        description="Program / internship domain."
    )
    issued_at: Optional[str] = Field(
        default=None,
        schema_extra={"examples": ["2025-03-15"]},
        description="ISO date of issuance. Unparsable values fall back to now."
    )
    organization_id: Optional[int] = Field(
        default=None,
        description="Known organization whose name is stamped on the certificate."
    )
    email: Optional[str] = Field(
        default=None,
        description="Holder email. Used to find or create the holder account."
    )
    user_id: Optional[int] = Field(
        default=None,
        description="Explicit holder id. Takes precedence over email."
    )
    duration_text: Optional[str] = Field(
        default=None,
        max_length=100,
        schema_extra={"examples": ["June-Aug 2025"]}
    )


class CertificateRead(SQLModel):
    """
    Public projection of a certificate.
    """
    code: str
    holder_name: str
    program: str
    organization_name: Optional[str] = None
    duration_text: Optional[str] = None
    issued_at: Optional[datetime] = None
    status: CertificateStatus
    verified_at: Optional[datetime] = None


class CertificateDetail(CertificateRead):
    """
    Projection shown to the certificate holder.
    """
    id: int


class CertificateIssueResponse(SQLModel):
    message: str
    certificate: CertificateRead


class ImportSummary(SQLModel):
    total_rows: int = 0
    created_users: int = 0
    existing_users: int = 0
    created_certificates: int = 0
    error_count: int = 0


class ImportResult(SQLModel):
    message: str = "Import completed."
    summary: ImportSummary
    errors: List[str] = Field(default_factory=list)
