from typing import Optional
from sqlmodel import SQLModel, Field

from certivo.models.certificate import CertificateRead
from certivo.models.settings import PublicPortalSettings


class VerificationResult(SQLModel):
    """
    Outcome of a public lookup. A miss is a normal answer, not an error:
    'found' is False and 'message' tells the visitor what to do next.
    """
    found: bool
    certificate: Optional[CertificateRead] = Field(default=None)
    message: Optional[str] = Field(default=None)
    public_portal: Optional[PublicPortalSettings] = Field(default=None)


class QRCodeRead(SQLModel):
    code: str
    verification_url: str
    qr_code_url: str
