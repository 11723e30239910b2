from fastapi import APIRouter, Depends, status

from certivo.core.dependencies import get_certificate_service, get_current_user
from certivo.db.schema import User
from certivo.models.certificate import CertificateDetail
from certivo.services.certificate import CertificateService


router = APIRouter()


@router.get(
    "/certificates/{certificate_id}",
    response_model=CertificateDetail,
    status_code=status.HTTP_200_OK,
    summary="Get one of my certificates",
    description="Returns a certificate owned by the authenticated user."
)
def get_my_certificate(
    certificate_id: int,
    current_user: User = Depends(get_current_user),
    service: CertificateService = Depends(get_certificate_service)
):
    return service.get_holder_certificate(current_user.id, certificate_id)
