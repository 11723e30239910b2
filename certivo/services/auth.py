from typing import Optional
from datetime import datetime, timedelta

import jwt
from loguru import logger
from sqlmodel import Session, select

from certivo.core.config import settings
from certivo.core.exceptions import Forbidden, Unauthenticated
from certivo.db.schema import User, UserRole
from certivo.models.auth import Token, TokenData


class AuthService:
    """
    Bearer token capability. Tokens are minted for existing users (see seed.py)
    and verified on every protected request. Login flows live elsewhere.
    """
    ALGORITHM = "HS256"

    def __init__(self, session: Session):
        self.session = session

    def _create_jwt(self, user: User, expires_delta: timedelta, type: str) -> str:
        """Helper to sign JWTs with specific types."""
        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
            "exp": datetime.utcnow() + expires_delta,
            "type": type
        }
        return jwt.encode(to_encode, settings.secret_key, algorithm=self.ALGORITHM)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email.strip().lower())
        return self.session.exec(statement).first()

    def generate_access_token(self, user: User) -> str:
        return self._create_jwt(
            user,
            expires_delta=timedelta(
                minutes=settings.access_token_expire_minutes),
            type="access"
        )

    def generate_tokens(self, user: User) -> Token:
        return Token(
            access_token=self.generate_access_token(user),
            token_type="bearer"
        )

    def verify_access_token(self, token: str) -> Optional[TokenData]:
        try:
            payload = jwt.decode(token, settings.secret_key,
                                 algorithms=[self.ALGORITHM])
            user_id = payload.get("sub")
            token_type = payload.get("type")

            if not user_id or token_type != "access":
                return None

            return TokenData(user_id=int(user_id), role=payload.get("role") or "")
        except (jwt.PyJWTError, ValueError):
            return None

    def authenticate(self, token: Optional[str]) -> User:
        """
        Resolves the active user behind a bearer token.

        Raises:
            Unauthenticated: missing, malformed or expired token, or unknown user.
            Forbidden: the account is deactivated.
        """
        if not token:
            raise Unauthenticated()

        token_data = self.verify_access_token(token)
        if not token_data:
            raise Unauthenticated("Could not validate credentials")

        user = self.get_user_by_id(token_data.user_id)
        if user is None:
            raise Unauthenticated("Could not validate credentials")

        if not user.is_active:
            raise Forbidden("Account is deactivated. Please contact support.")

        return user

    def require_admin(self, user: User) -> User:
        # Role comes from the database row, not the token claim
        if user.role != UserRole.ADMIN:
            logger.warning(f"Access denied: user {user.id} is not an admin.")
            raise Forbidden("Only admins can perform this action.")
        return user
