from typing import Optional, List
from datetime import datetime
from sqlmodel import SQLModel, Field, Relationship
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class CertificateStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class OrganizationType(str, Enum):
    COLLEGE = "college"
    COMPANY = "company"
    TPO = "tpo"          # Training & Placement Office
    OTHER = "other"


class ActivityType(str, Enum):
    ISSUED = "issued"
    IMPORTED = "imported"
    LOOKUP = "lookup"


class TimestampMixin(SQLModel):
    """
    Standard audit timestamps shared by every mutable table.
    """
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="UTC timestamp when this record was first persisted. Example: '2025-03-15 14:30:00'"
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column_kwargs={"onupdate": datetime.utcnow},
        description="UTC timestamp when this record was last modified. Updates automatically."
    )


class User(TimestampMixin, SQLModel, table=True):
    """
    A login principal and, for role 'user', the owner of certificates.
    Holders can be created implicitly by certificate issuance or import,
    in which case no credentials are linked yet.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(
        default=None,
        description="Display name. Example: 'Jane Doe'"
    )
    email: str = Field(
        unique=True,
        index=True,
        description="Lower-cased login email; the primary identity key. Example: 'jane.doe@example.com'"
    )
    role: UserRole = Field(
        default=UserRole.USER,
        description="Either 'admin' (issuer) or 'user' (holder)."
    )
    hashed_password: Optional[str] = Field(
        default=None,
        description="Password hash, if the user signed up with a password."
    )
    google_id: Optional[str] = Field(
        default=None,
        description="External identity id, if the user signed up with Google."
    )
    is_active: bool = Field(
        default=True,
        description="Soft delete flag. If False, user cannot log in."
    )

    certificates: List["Certificate"] = Relationship(
        back_populates="holder",
        sa_relationship_kwargs={"foreign_keys": "[Certificate.user_id]"}
    )


class Organization(TimestampMixin, SQLModel, table=True):
    """
    An issuing institution (college, company, placement office).
    Certificates keep a copy of the name at issuance time rather than a
    foreign key, so renaming an organization never rewrites issued records.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(
        index=True,
        description="Display name. Example: 'Acme University'"
    )
    type: OrganizationType = Field(
        default=OrganizationType.COLLEGE,
        description="Kind of institution. Example: 'college'"
    )
    contact_email: Optional[str] = Field(default=None)
    contact_person: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)


class Certificate(TimestampMixin, SQLModel, table=True):
    """
    One issued internship certificate, addressable publicly by its code.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(
        unique=True,
        index=True,
        description="Public verification code. Example: 'CERT-INT-2025-004821'"
    )
    user_id: int = Field(
        foreign_key="user.id",
        index=True,
        description="The holder who owns this certificate."
    )
    issued_by_admin_id: Optional[int] = Field(
        default=None,
        foreign_key="user.id",
        description="The admin who issued or imported the certificate."
    )
    holder_name: str = Field(
        description="Name printed on the certificate. Example: 'Jane Doe'"
    )
    program: str = Field(
        description="Program or domain of the internship. Example: 'Web Development'"
    )
    organization_name: Optional[str] = Field(
        default=None,
        index=True,
        description="Snapshot of the organization name at issuance. Example: 'Acme University'"
    )
    duration_text: Optional[str] = Field(
        default=None,
        description="Free-text duration. Example: 'June-Aug 2025'"
    )
    status: CertificateStatus = Field(default=CertificateStatus.PENDING)
    issued_at: datetime = Field(default_factory=datetime.utcnow)
    verified_at: Optional[datetime] = Field(
        default=None,
        description="Last time the certificate was looked up on the public portal."
    )

    holder: User = Relationship(
        back_populates="certificates",
        sa_relationship_kwargs={"foreign_keys": "[Certificate.user_id]"}
    )
    activities: List["CertificateActivity"] = Relationship(
        back_populates="certificate")


class CertificateActivity(SQLModel, table=True):
    """
    Append-only audit trail entry. One row per issuance, import or public lookup.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    certificate_id: int = Field(
        foreign_key="certificate.id",
        index=True
    )
    admin_id: Optional[int] = Field(
        default=None,
        foreign_key="user.id",
        description="Acting admin. Null for public actions."
    )
    activity_type: ActivityType = Field(
        description="What happened. Example: 'imported'"
    )
    description: Optional[str] = Field(
        default=None,
        description="Example: 'Certificate CERT-INT-2025-004821 issued to Jane Doe.'"
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)

    certificate: Certificate = Relationship(back_populates="activities")


class AdminSettings(TimestampMixin, SQLModel, table=True):
    """
    Process-wide singleton row holding verification defaults and
    public portal toggles.
    """
    id: Optional[int] = Field(default=None, primary_key=True)

    # Verification defaults
    auto_verify_imports: bool = Field(default=True)
    require_review_for_manual: bool = Field(default=False)
    lock_status_after_download: bool = Field(default=False)

    # Public portal
    public_lookup_enabled: bool = Field(default=True)
    show_org_name_on_public: bool = Field(default=True)
    allow_public_pdf_download: bool = Field(default=True)
