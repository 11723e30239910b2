from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from certivo.core.audit import record_activity
from certivo.core.config import settings
from certivo.core.exceptions import (
    CertificateNotFound, PublicLookupDisabled, StorageError, ValidationError
)
from certivo.db.schema import ActivityType, Certificate
from certivo.models.settings import PublicPortalSettings
from certivo.models.verification import QRCodeRead, VerificationResult
from certivo.services.certificate import to_certificate_read
from certivo.services.codes import normalize_code
from certivo.utils.qr import generate_and_save_qr


NOT_FOUND_MESSAGE = (
    "No certificate found for this ID. Please check the Certificate ID and try again."
)


class VerificationService:
    """
    Public, unauthenticated read path.

    A found lookup stamps `verified_at` and appends a 'lookup' activity;
    it never changes the certificate status. A miss touches nothing.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_by_code(self, code: str) -> Optional[Certificate]:
        statement = select(Certificate).where(Certificate.code == normalize_code(code))
        return self.session.exec(statement).first()

    def verify_by_code(self, code: Optional[str], portal: PublicPortalSettings) -> VerificationResult:
        normalized = normalize_code(code)
        if not normalized:
            raise ValidationError("Certificate ID is required.")

        if not portal.public_lookup_enabled:
            raise PublicLookupDisabled()

        cert = self.get_by_code(normalized)
        if not cert:
            logger.info(f"Verification miss for code {normalized}")
            return VerificationResult(found=False, message=NOT_FOUND_MESSAGE)

        now = datetime.utcnow()
        cert.verified_at = now
        cert.updated_at = now

        try:
            self.session.add(cert)
            record_activity(
                self.session,
                certificate_id=cert.id,
                activity_type=ActivityType.LOOKUP,
                description=f"Public verification lookup for certificate {cert.code}.",
            )
            self.session.commit()
            self.session.refresh(cert)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Verification stamp failed for {cert.code}: {e}")
            raise StorageError("Something went wrong while verifying this certificate.")

        projection = to_certificate_read(cert)
        # Redaction applies to the response only; the stored snapshot is untouched
        if not portal.show_org_name_on_public:
            projection.organization_name = None

        logger.info(f"Verification hit for code {cert.code}")
        return VerificationResult(
            found=True,
            certificate=projection,
            public_portal=portal,
        )

    def verification_url(self, code: str) -> str:
        return f"{settings.public_url}/certificate/{code}"

    def get_qr_code(self, code: str) -> QRCodeRead:
        cert = self.get_by_code(code)
        if not cert:
            raise CertificateNotFound()

        url = self.verification_url(cert.code)
        return QRCodeRead(
            code=cert.code,
            verification_url=url,
            qr_code_url=generate_and_save_qr(url, cert.code.lower()),
        )
