import re
from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from certivo.core.config import settings
from certivo.core.exceptions import (
    CodeUniquenessConflict, StorageError, SubjectNotFound, ValidationError
)
from certivo.db.schema import User, UserRole


EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_REGEX.match(email))


def placeholder_email(code: str) -> str:
    """
    Deterministic stand-in address for holders issued without an email.
    Example: 'CERT-INT-2025-004821' -> 'cert-cert-int-2025-004821@placeholder.certivo.local'
    """
    return f"cert-{code.lower()}@placeholder.{settings.placeholder_email_domain}"


class IdentityResolver:
    """
    Guarantees every certificate has a persisted owning User.

    Resolution order for single issuance:
    1. explicit user id  -> must exist
    2. email             -> find (case-insensitive) or create as role 'user'
    3. neither           -> create a placeholder user from the certificate code

    A new user is in the database before its certificate: committed up
    front, or flushed inside the certificate's own transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str, role: Optional[UserRole] = None) -> Optional[User]:
        statement = select(User).where(User.email == normalize_email(email))
        if role is not None:
            statement = statement.where(User.role == role)
        return self.session.exec(statement).first()

    def _create_user(self, name: Optional[str], email: str, commit: bool = True) -> User:
        user = User(
            name=name or None,
            email=email,
            role=UserRole.USER,
            is_active=True
        )
        try:
            self.session.add(user)
            if commit:
                self.session.commit()
                self.session.refresh(user)
            else:
                # Assigns the id; the caller's commit or rollback decides its fate
                self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Could not create holder {email}: {e}")
            raise StorageError(f"Could not create user account for {email}.")

        logger.info(f"Created holder account {user.id} <{email}>")
        return user

    def resolve_subject(
        self,
        name: Optional[str],
        code: str,
        email: Optional[str] = None,
        user_id: Optional[int] = None,
        commit: bool = True,
    ) -> User:
        """
        Finds or creates the holder for a single issuance.

        With `commit=False` a new user is only flushed, so it is written or
        discarded together with the caller's certificate.

        Raises:
            SubjectNotFound: `user_id` was given but does not exist.
            ValidationError: `email` was given but is malformed.
            CodeUniquenessConflict: the placeholder for `code` is taken,
                which means the code itself is already in use.
            StorageError: the new user could not be persisted.
        """
        if user_id is not None:
            user = self.get_user_by_id(user_id)
            if not user:
                raise SubjectNotFound(f"User {user_id} not found.")
            return user

        normalized = normalize_email(email)
        if normalized:
            if not is_valid_email(normalized):
                raise ValidationError(f"Invalid email format ({normalized}).")

            existing = self.get_user_by_email(normalized)
            if existing:
                return existing
            return self._create_user(name, normalized, commit)

        placeholder = placeholder_email(code)
        if self.get_user_by_email(placeholder):
            raise CodeUniquenessConflict(code)
        return self._create_user(name, placeholder, commit)

    def find_or_create_holder(self, name: str, email: str) -> Tuple[User, bool]:
        """
        Import flavour: lookup restricted to role 'user' by email.
        Expects an already validated, normalized email.

        Returns:
            (user, created) where `created` is True for a new account.
        """
        existing = self.get_user_by_email(email, role=UserRole.USER)
        if existing:
            return existing, False
        return self._create_user(name, email), True
