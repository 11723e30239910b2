from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from certivo.core.dependencies import get_settings_service, get_verification_service
from certivo.models.verification import QRCodeRead, VerificationResult
from certivo.services.settings import SettingsService
from certivo.services.verification import VerificationService


router = APIRouter()


@router.get(
    "/",
    response_model=VerificationResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Verify a certificate",
    description=(
        "Public lookup by certificate code. An unknown code is a normal answer "
        "(found=false with a message), not an error."
    )
)
def verify_certificate(
    code: Optional[str] = Query(None, description="Certificate ID, e.g. CERT-INT-2025-004821"),
    service: VerificationService = Depends(get_verification_service),
    settings_service: SettingsService = Depends(get_settings_service)
):
    return service.verify_by_code(code, settings_service.get_public_portal_settings())


@router.get(
    "/{code}/qr",
    response_model=QRCodeRead,
    status_code=status.HTTP_200_OK,
    summary="Verification QR code",
    description="Returns the URL of a QR code image that links to the certificate's public page."
)
def get_verification_qr(
    code: str,
    service: VerificationService = Depends(get_verification_service)
):
    return service.get_qr_code(code)
