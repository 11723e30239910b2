from fastapi import APIRouter, Depends, status

from certivo.core.dependencies import get_organization_service, require_admin
from certivo.db.schema import User
from certivo.models.organization import OrganizationCreate, OrganizationRead
from certivo.services.organization import OrganizationService


router = APIRouter()


@router.post(
    "/",
    response_model=OrganizationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Organization",
    description="Registers an issuing organization. Name + type must be unique."
)
def create_organization(
    payload: OrganizationCreate,
    admin: User = Depends(require_admin),
    service: OrganizationService = Depends(get_organization_service)
):
    return service.create_organization(payload)


@router.get(
    "/{organization_id}",
    response_model=OrganizationRead,
    status_code=status.HTTP_200_OK,
    summary="Get Organization",
    description="Returns one organization with the number of certificates issued under its name."
)
def get_organization(
    organization_id: int,
    admin: User = Depends(require_admin),
    service: OrganizationService = Depends(get_organization_service)
):
    return service.read_organization(organization_id)
