from typing import Optional
from fastapi import HTTPException, status


class CertivoError(HTTPException):
    """
    Base class for domain errors.

    Subclasses FastAPI's HTTPException so services can raise them the same way
    they raise framework errors; the status code travels with the type.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An unexpected error occurred."

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(CertivoError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."


class Unauthenticated(CertivoError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated."

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(CertivoError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."


class PublicLookupDisabled(CertivoError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Public certificate lookup is currently disabled."


class OrganizationNotFound(CertivoError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Organization not found."


class SubjectNotFound(CertivoError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found."


class CertificateNotFound(CertivoError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Certificate not found."


class OrganizationAlreadyExists(CertivoError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "An organization with the same name and type already exists."


class CodeGenerationExhausted(CertivoError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Could not allocate a unique certificate code. Please retry."


class StorageError(CertivoError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "The certificate store rejected the operation."


class CodeUniquenessConflict(Exception):
    """
    Raised by a persist attempt when the generated code is already taken.
    Consumed by the retry combinator; never surfaced to a caller.
    """

    def __init__(self, code: str):
        super().__init__(f"Certificate code {code} already exists.")
        self.code = code
