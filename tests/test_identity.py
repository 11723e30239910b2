"""Unit tests for holder resolution (find-or-create, placeholders)."""

import pytest
from sqlmodel import Session, select

from certivo.core.exceptions import (
    CodeUniquenessConflict, StorageError, SubjectNotFound, ValidationError
)
from certivo.db.schema import User, UserRole
from certivo.services.identity import (
    IdentityResolver, is_valid_email, normalize_email, placeholder_email
)


CODE = "CERT-INT-2025-004821"


def _user_count(session: Session) -> int:
    return len(session.exec(select(User)).all())


class TestEmailHelpers:

    @pytest.mark.parametrize("email", ["jane@example.com", "a.b+c@sub.example.org"])
    def test_valid(self, email: str) -> None:
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["jane", "jane@", "jane@example", "ja ne@example.com", "@example.com"])
    def test_invalid(self, email: str) -> None:
        assert not is_valid_email(email)

    def test_normalize(self) -> None:
        assert normalize_email("  Jane@Example.COM ") == "jane@example.com"

    def test_placeholder_is_derived_from_code(self) -> None:
        assert placeholder_email(CODE) == "cert-cert-int-2025-004821@placeholder.certivo.local"


class TestResolveSubject:

    def test_same_email_twice_returns_same_user(self, session: Session) -> None:
        resolver = IdentityResolver(session)

        first = resolver.resolve_subject("Jane Doe", CODE, email="Jane@Example.com ")
        second = resolver.resolve_subject("Jane D.", CODE, email="jane@example.com")

        assert first.id == second.id
        assert _user_count(session) == 1

    def test_creates_user_role_holder(self, session: Session) -> None:
        user = IdentityResolver(session).resolve_subject(
            "Jane Doe", CODE, email="jane@example.com")

        assert user.id is not None
        assert user.role == UserRole.USER
        assert user.is_active
        assert user.name == "Jane Doe"
        assert user.email == "jane@example.com"

    def test_explicit_id_wins_over_email(self, session: Session, make_user) -> None:
        existing = make_user(email="known@example.com")

        user = IdentityResolver(session).resolve_subject(
            "Someone", CODE, email="other@example.com", user_id=existing.id)

        assert user.id == existing.id
        assert _user_count(session) == 1

    def test_unknown_explicit_id(self, session: Session) -> None:
        with pytest.raises(SubjectNotFound):
            IdentityResolver(session).resolve_subject("Jane", CODE, user_id=999)
        assert _user_count(session) == 0

    def test_placeholder_when_no_email(self, session: Session) -> None:
        user = IdentityResolver(session).resolve_subject("No Email Guy", CODE)

        assert user.id is not None
        assert user.email == placeholder_email(CODE)
        assert user.role == UserRole.USER

    def test_taken_placeholder_is_a_code_conflict(self, session: Session) -> None:
        resolver = IdentityResolver(session)
        resolver.resolve_subject("No Email Guy", CODE)

        with pytest.raises(CodeUniquenessConflict):
            resolver.resolve_subject("Someone Else", CODE)
        assert _user_count(session) == 1

    def test_uncommitted_holder_is_discarded_on_rollback(self, session: Session) -> None:
        user = IdentityResolver(session).resolve_subject(
            "Jane Doe", CODE, email="jane@example.com", commit=False)
        assert user.id is not None

        session.rollback()

        assert _user_count(session) == 0

    def test_malformed_email_rejected(self, session: Session) -> None:
        with pytest.raises(ValidationError):
            IdentityResolver(session).resolve_subject("Jane", CODE, email="not-an-email")
        assert _user_count(session) == 0


class TestFindOrCreateHolder:

    def test_created_then_existing(self, session: Session) -> None:
        resolver = IdentityResolver(session)

        first, created_first = resolver.find_or_create_holder("Jane", "jane@example.com")
        second, created_second = resolver.find_or_create_holder("Jane", "jane@example.com")

        assert created_first is True
        assert created_second is False
        assert first.id == second.id

    def test_admin_email_is_not_reused(self, session: Session, admin: User) -> None:
        # Lookup is restricted to role 'user'; the insert then hits the email index
        with pytest.raises(StorageError):
            IdentityResolver(session).find_or_create_holder("Admin", admin.email)

        assert _user_count(session) == 1
