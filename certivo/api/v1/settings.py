from fastapi import APIRouter, Depends, status

from certivo.core.dependencies import get_settings_service, require_admin
from certivo.db.schema import User
from certivo.models.settings import (
    PublicPortalSettings, PublicPortalSettingsResponse, PublicPortalSettingsUpdate,
    VerificationSettings, VerificationSettingsResponse, VerificationSettingsUpdate
)
from certivo.services.settings import SettingsService


router = APIRouter()


@router.get(
    "/verification",
    response_model=VerificationSettings,
    status_code=status.HTTP_200_OK,
    summary="Get verification defaults"
)
def get_verification_settings(
    admin: User = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    return service.get_verification_settings()


@router.patch(
    "/verification",
    response_model=VerificationSettingsResponse,
    status_code=status.HTTP_200_OK,
    summary="Update verification defaults",
    description="Only supplied fields are changed."
)
def update_verification_settings(
    payload: VerificationSettingsUpdate,
    admin: User = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    current, changed = service.update_verification_settings(payload)
    return VerificationSettingsResponse(
        message="Verification settings updated." if changed else "No changes provided.",
        settings=current
    )


@router.get(
    "/public-portal",
    response_model=PublicPortalSettings,
    status_code=status.HTTP_200_OK,
    summary="Get public portal settings"
)
def get_public_portal_settings(
    admin: User = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    return service.get_public_portal_settings()


@router.patch(
    "/public-portal",
    response_model=PublicPortalSettingsResponse,
    status_code=status.HTTP_200_OK,
    summary="Update public portal settings",
    description="Only supplied fields are changed."
)
def update_public_portal_settings(
    payload: PublicPortalSettingsUpdate,
    admin: User = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    current, changed = service.update_public_portal_settings(payload)
    return PublicPortalSettingsResponse(
        message="Public portal settings updated." if changed else "No changes provided.",
        settings=current
    )
