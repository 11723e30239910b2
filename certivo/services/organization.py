from typing import Optional

from loguru import logger
from sqlalchemy import func
from sqlmodel import Session, select

from certivo.core.exceptions import (
    OrganizationAlreadyExists, OrganizationNotFound, ValidationError
)
from certivo.db.schema import Certificate, Organization, OrganizationType
from certivo.models.organization import OrganizationCreate, OrganizationRead


class OrganizationService:
    def __init__(self, session: Session):
        self.session = session

    def get_organization(self, organization_id: int) -> Organization:
        org = self.session.get(Organization, organization_id)
        if not org:
            raise OrganizationNotFound(
                f"Organization {organization_id} not found.")
        return org

    def find_by_name(self, name: str) -> Optional[Organization]:
        """Case-insensitive exact match on the display name."""
        statement = select(Organization).where(
            func.lower(Organization.name) == name.strip().lower()
        )
        return self.session.exec(statement).first()

    def count_certificates(self, org: Organization) -> int:
        # Certificates reference organizations by name snapshot
        statement = select(func.count(Certificate.id)).where(
            Certificate.organization_name == org.name
        )
        return self.session.exec(statement).one()

    def read_organization(self, organization_id: int) -> OrganizationRead:
        org = self.get_organization(organization_id)
        return OrganizationRead(
            id=org.id,
            name=org.name,
            type=org.type.value,
            contact_email=org.contact_email,
            contact_person=org.contact_person,
            is_active=org.is_active,
            created_at=org.created_at,
            total_certificates=self.count_certificates(org),
        )

    def create_organization(self, data: OrganizationCreate) -> OrganizationRead:
        name = data.name.strip()
        if not name:
            raise ValidationError("Organization name is required.")

        type_value = (data.type or "").strip().lower()
        try:
            org_type = OrganizationType(type_value)
        except ValueError:
            org_type = OrganizationType.OTHER

        existing = self.session.exec(
            select(Organization)
            .where(Organization.name == name)
            .where(Organization.type == org_type)
        ).first()
        if existing:
            raise OrganizationAlreadyExists()

        org = Organization(
            name=name,
            type=org_type,
            contact_email=(data.contact_email or "").strip() or None,
            contact_person=(data.contact_person or "").strip() or None,
            is_active=True,
        )
        self.session.add(org)
        self.session.commit()
        self.session.refresh(org)

        logger.info(f"Organization created: {org.id} '{org.name}' ({org.type.value})")
        return self.read_organization(org.id)
