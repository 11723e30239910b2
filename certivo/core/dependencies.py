from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from certivo.db.core import get_session
from certivo.db.schema import User
from certivo.services.auth import AuthService
from certivo.services.certificate import CertificateService
from certivo.services.issuance import IssuanceService
from certivo.services.organization import OrganizationService
from certivo.services.settings import SettingsService
from certivo.services.verification import VerificationService

# A missing header yields None; AuthService.authenticate raises Unauthenticated
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    """Creates an AuthService instance using the active DB session."""
    return AuthService(session)


def get_issuance_service(session: Session = Depends(get_session)) -> IssuanceService:
    return IssuanceService(session=session)


def get_verification_service(session: Session = Depends(get_session)) -> VerificationService:
    return VerificationService(session=session)


def get_certificate_service(session: Session = Depends(get_session)) -> CertificateService:
    return CertificateService(session=session)


def get_settings_service(session: Session = Depends(get_session)) -> SettingsService:
    return SettingsService(session=session)


def get_organization_service(session: Session = Depends(get_session)) -> OrganizationService:
    return OrganizationService(session=session)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Validates the JWT token and retrieves the user.
    This is the gatekeeper for protected routes.
    """
    return service.authenticate(token)


def require_admin(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
) -> User:
    """Gatekeeper for /admin routes."""
    return service.require_admin(current_user)
