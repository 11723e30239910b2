import argparse

from loguru import logger
from sqlmodel import Session, select

from certivo.db.core import engine, init_db
from certivo.db.schema import Organization, OrganizationType, User, UserRole
from certivo.services.auth import AuthService
from certivo.services.settings import SettingsService


DEFAULT_ORGANIZATIONS = [
    {"name": "Acme University", "type": OrganizationType.COLLEGE},
    {"name": "Zidio Development", "type": OrganizationType.COMPANY},
]


def seed_admin(session: Session, email: str, name: str) -> User:
    """Creates the admin account if it doesn't exist."""
    logger.info("--- Seeding Admin ---")
    email = email.strip().lower()
    admin = session.exec(select(User).where(User.email == email)).first()

    if not admin:
        admin = User(email=email, name=name, role=UserRole.ADMIN, is_active=True)
        session.add(admin)
        session.commit()
        session.refresh(admin)
        logger.info(f"Created admin: {email}")
    elif admin.role != UserRole.ADMIN:
        admin.role = UserRole.ADMIN
        session.add(admin)
        session.commit()
        session.refresh(admin)
        logger.info(f"Promoted existing user to admin: {email}")

    return admin


def seed_organizations(session: Session):
    logger.info("--- Seeding Organizations ---")
    for data in DEFAULT_ORGANIZATIONS:
        existing = session.exec(
            select(Organization)
            .where(Organization.name == data["name"])
            .where(Organization.type == data["type"])
        ).first()
        if not existing:
            session.add(Organization(**data))
            logger.info(f"Created organization: {data['name']}")
    session.commit()


def main():
    parser = argparse.ArgumentParser(description="Seed the Certivo database.")
    parser.add_argument("--admin-email", default="admin@certivo.local")
    parser.add_argument("--admin-name", default="Certivo Admin")
    parser.add_argument("--skip-organizations", action="store_true")
    args = parser.parse_args()

    init_db()

    with Session(engine) as session:
        SettingsService(session).get_or_create()
        admin = seed_admin(session, args.admin_email, args.admin_name)
        if not args.skip_organizations:
            seed_organizations(session)

        token = AuthService(session).generate_tokens(admin)

    logger.info("--- Seeding Complete ---")
    print(f"Admin bearer token for {admin.email}:\n{token.access_token}")


if __name__ == "__main__":
    main()
