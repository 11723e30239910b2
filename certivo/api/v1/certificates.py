from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from loguru import logger

from certivo.core.dependencies import (
    get_issuance_service, get_settings_service, require_admin
)
from certivo.core.exceptions import CertivoError
from certivo.db.schema import User
from certivo.models.certificate import (
    CertificateIssue, CertificateIssueResponse, ImportResult
)
from certivo.services.issuance import IssuanceService
from certivo.services.settings import SettingsService
from certivo.utils.spreadsheet import read_import_rows


router = APIRouter()


@router.post(
    "/",
    response_model=CertificateIssueResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue a certificate",
    description=(
        "Issues one certificate. The holder is found by 'user_id' or 'email', "
        "or created (with a placeholder email when neither is given)."
    )
)
def issue_certificate(
    payload: CertificateIssue,
    admin: User = Depends(require_admin),
    service: IssuanceService = Depends(get_issuance_service),
    settings_service: SettingsService = Depends(get_settings_service)
):
    """
    1. Validates input.
    2. Resolves organization snapshot and holder.
    3. Inserts certificate + 'issued' activity (code regenerated on collision).
    """
    try:
        certificate = service.issue_certificate(
            admin, payload, settings_service.get_verification_settings())
    except CertivoError:
        raise
    except Exception:
        logger.exception("Unexpected error while issuing certificate")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to issue certificate."
        )

    return CertificateIssueResponse(
        message="Certificate issued successfully.",
        certificate=certificate
    )


@router.post(
    "/import",
    response_model=ImportResult,
    status_code=status.HTTP_200_OK,
    summary="Bulk import certificates",
    description=(
        "Upload an .xlsx or .csv file (form field 'file') with columns "
        "Name, Email, Program and optional OrganizationName, DurationText. "
        "Rows are processed independently; failures are reported per row."
    )
)
def import_certificates(
    file: UploadFile = File(...),
    admin: User = Depends(require_admin),
    service: IssuanceService = Depends(get_issuance_service),
    settings_service: SettingsService = Depends(get_settings_service)
):
    rows = read_import_rows(file.filename, file.file.read())

    try:
        return service.import_certificates(
            admin, rows, settings_service.get_verification_settings())
    except CertivoError:
        raise
    except Exception:
        logger.exception("Unexpected error during certificate import")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error."
        )
