import secrets
from datetime import datetime
from typing import Callable, Optional, TypeVar

from loguru import logger
from sqlalchemy.exc import IntegrityError

from certivo.core.config import settings
from certivo.core.exceptions import CodeGenerationExhausted, CodeUniquenessConflict


T = TypeVar("T")


def generate_certificate_code(now: Optional[datetime] = None) -> str:
    """
    Builds a candidate public code: prefix + current year + 6 random digits.
    Example: 'CERT-INT-2025-004821'

    Uniqueness is not guaranteed here; the unique index on Certificate.code
    is the source of truth and callers retry through `retry_on_conflict`.
    """
    year = (now or datetime.utcnow()).year
    suffix = secrets.randbelow(1_000_000)
    return f"{settings.certificate_code_prefix}-{year:04d}-{suffix:06d}"


def normalize_code(raw: Optional[str]) -> str:
    """Trim and upper-case user input to match the stored convention."""
    return (raw or "").strip().upper()


def is_code_conflict(exc: IntegrityError) -> bool:
    """
    True when the integrity failure comes from the certificate code index.
    SQLite: 'UNIQUE constraint failed: certificate.code'
    Postgres: 'duplicate key value violates unique constraint "ix_certificate_code"'
    """
    message = str(exc.orig if exc.orig is not None else exc).lower()
    is_unique = "unique" in message or "duplicate" in message
    return is_unique and "code" in message


def retry_on_conflict(
    attempt: Callable[[str], T],
    generate: Callable[[], str] = generate_certificate_code,
    max_attempts: Optional[int] = None,
) -> T:
    """
    Calls `attempt(code)` with fresh codes until it stops raising
    CodeUniquenessConflict.

    Any other exception propagates on the first occurrence. After
    `max_attempts` conflicts, raises CodeGenerationExhausted.
    """
    attempts = max_attempts or settings.code_max_attempts
    code = generate()

    for attempt_no in range(1, attempts + 1):
        try:
            return attempt(code)
        except CodeUniquenessConflict:
            logger.warning(
                f"Certificate code collision on {code} (attempt {attempt_no}/{attempts})")
            if attempt_no < attempts:
                code = generate()

    raise CodeGenerationExhausted(
        f"Could not allocate a unique certificate code after {attempts} attempts.")
