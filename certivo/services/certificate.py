from loguru import logger
from sqlmodel import Session

from certivo.core.exceptions import CertificateNotFound
from certivo.db.schema import Certificate
from certivo.models.certificate import CertificateDetail, CertificateRead


def to_certificate_read(cert: Certificate) -> CertificateRead:
    return CertificateRead(
        code=cert.code,
        holder_name=cert.holder_name,
        program=cert.program,
        organization_name=cert.organization_name,
        duration_text=cert.duration_text,
        issued_at=cert.issued_at,
        status=cert.status,
        verified_at=cert.verified_at,
    )


class CertificateService:
    def __init__(self, session: Session):
        self.session = session

    def get_holder_certificate(self, user_id: int, certificate_id: int) -> CertificateDetail:
        """
        Full projection of a certificate for its holder.
        Certificates owned by someone else are reported as not found.
        """
        cert = self.session.get(Certificate, certificate_id)
        if not cert or cert.user_id != user_id:
            logger.info(
                f"User {user_id} requested certificate {certificate_id}: not found or not owned")
            raise CertificateNotFound()

        return CertificateDetail(
            **to_certificate_read(cert).model_dump(),
            id=cert.id,
        )
