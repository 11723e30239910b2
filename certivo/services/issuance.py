from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from certivo.core.audit import record_activity
from certivo.core.config import settings
from certivo.core.exceptions import (
    CodeGenerationExhausted, CodeUniquenessConflict, StorageError, ValidationError
)
from certivo.db.schema import ActivityType, Certificate, CertificateStatus, User
from certivo.models.certificate import (
    CertificateIssue, CertificateRead, ImportResult, ImportSummary
)
from certivo.models.settings import VerificationSettings
from certivo.services.certificate import to_certificate_read
from certivo.services.codes import is_code_conflict, retry_on_conflict
from certivo.services.identity import (
    IdentityResolver, is_valid_email, normalize_email
)
from certivo.services.organization import OrganizationService
from certivo.utils.spreadsheet import ImportRow


def parse_issued_at(value: Optional[str]) -> Optional[datetime]:
    """
    Parses an ISO date/datetime into naive UTC.
    Returns None for anything unparsable so the column default (now) applies.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _normalized_row(row: Dict[str, str]) -> Dict[str, str]:
    # 'Organization Name', 'organizationname' and 'OrganizationName' are the same column
    return {
        key.strip().lower().replace(" ", "").replace("_", ""): _clean(value)
        for key, value in row.items()
    }


class IssuanceService:
    """
    Creates certificates, one at a time from the admin form or in bulk
    from a spreadsheet.

    Each certificate and its activity row are committed together. Bulk
    imports commit row by row: a failing row is reported and skipped, rows
    before it stay committed.
    """

    def __init__(self, session: Session):
        self.session = session
        self.resolver = IdentityResolver(session)
        self.organizations = OrganizationService(session)

    # ==========================================================================
    # STATUS POLICY
    # ==========================================================================

    def _issue_status(self, verification: VerificationSettings) -> CertificateStatus:
        if settings.apply_verification_settings and verification.require_review_for_manual:
            return CertificateStatus.PENDING
        return CertificateStatus.VERIFIED

    def _import_status(self, verification: VerificationSettings) -> CertificateStatus:
        if settings.apply_verification_settings and not verification.auto_verify_imports:
            return CertificateStatus.PENDING
        return CertificateStatus.VERIFIED

    # ==========================================================================
    # PERSISTENCE
    # ==========================================================================

    def _insert_certificate(
        self,
        code: str,
        *,
        holder: Callable[[str], User],
        admin_id: Optional[int],
        holder_name: str,
        program: str,
        organization_name: Optional[str],
        duration_text: Optional[str],
        status: CertificateStatus,
        issued_at: Optional[datetime],
        activity_type: ActivityType,
        describe: Callable[[str], str],
    ) -> Certificate:
        """
        One persist attempt for `code`: holder (if new), certificate and
        activity in one commit. `holder(code)` returns the owning user, staged
        on the session when it is new.

        Raises:
            CodeUniquenessConflict: the code is already taken (retryable).
            StorageError: any other database failure.
        """
        values = dict(
            code=code,
            issued_by_admin_id=admin_id,
            holder_name=holder_name,
            program=program,
            organization_name=organization_name,
            duration_text=duration_text,
            status=status,
        )
        if issued_at is not None:
            values["issued_at"] = issued_at

        try:
            cert = Certificate(user_id=holder(code).id, **values)
            self.session.add(cert)
            self.session.flush()

            record_activity(
                self.session,
                certificate_id=cert.id,
                activity_type=activity_type,
                description=describe(code),
                admin_id=admin_id,
            )
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if is_code_conflict(e):
                raise CodeUniquenessConflict(code)
            logger.error(f"Certificate insert failed for {code}: {e}")
            raise StorageError(f"Could not save certificate: {e.orig}")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Certificate insert failed for {code}: {e}")
            raise StorageError(f"Could not save certificate: {e}")

        self.session.refresh(cert)
        return cert

    # ==========================================================================
    # SINGLE ISSUE
    # ==========================================================================

    def issue_certificate(
        self,
        admin: User,
        data: CertificateIssue,
        verification: Optional[VerificationSettings] = None,
    ) -> CertificateRead:
        """
        Issues one certificate.

        Steps:
        1. Validate the payload (no database work happens before this passes).
        2. Resolve the organization name snapshot, if an organization is given.
        3. Insert the holder (when new), the certificate and its 'issued'
           activity in one commit. On a code collision all three are rolled
           back and retried with a fresh code and a fresh placeholder.

        Raises:
            ValidationError, OrganizationNotFound, SubjectNotFound,
            CodeGenerationExhausted, StorageError
        """
        verification = verification or VerificationSettings()

        name = _clean(data.name)
        program = _clean(data.domain)
        issued_at_raw = _clean(data.issued_at)
        email = normalize_email(data.email)
        duration_text = _clean(data.duration_text) or None

        if not name or not program or not issued_at_raw:
            raise ValidationError("Name, domain, and issued date are required.")
        if email and not is_valid_email(email):
            raise ValidationError(f"Invalid email format ({email}).")

        issued_at = parse_issued_at(issued_at_raw)

        organization_name = None
        if data.organization_id is not None:
            organization_name = self.organizations.get_organization(
                data.organization_id).name

        admin_id = admin.id

        def stage_holder(code: str) -> User:
            return self.resolver.resolve_subject(
                name=name,
                code=code,
                email=email or None,
                user_id=data.user_id,
                commit=False,
            )

        cert = retry_on_conflict(
            lambda code: self._insert_certificate(
                code,
                holder=stage_holder,
                admin_id=admin_id,
                holder_name=name,
                program=program,
                organization_name=organization_name,
                duration_text=duration_text,
                status=self._issue_status(verification),
                issued_at=issued_at,
                activity_type=ActivityType.ISSUED,
                describe=lambda c: f"Certificate {c} issued to {name}.",
            )
        )

        logger.info(
            f"Certificate {cert.code} issued to user {cert.user_id} by admin {admin_id}")
        return to_certificate_read(cert)

    # ==========================================================================
    # BATCH IMPORT
    # ==========================================================================

    def _canonical_organization_name(self, raw: str, cache: Dict[str, Optional[str]]) -> Optional[str]:
        if not raw:
            return None
        key = raw.lower()
        if key not in cache:
            org = self.organizations.find_by_name(raw)
            cache[key] = org.name if org else raw
        return cache[key]

    def import_certificates(
        self,
        admin: User,
        rows: List[ImportRow],
        verification: Optional[VerificationSettings] = None,
    ) -> ImportResult:
        """
        Imports one certificate per row. Required columns: Name, Email, Program.
        Optional: OrganizationName, DurationText.

        Every skipped or failed row yields exactly one error string prefixed
        with its sheet row number. No row failure aborts the batch.
        """
        if not rows:
            raise ValidationError("No rows found in the uploaded sheet.")

        verification = verification or VerificationSettings()
        status = self._import_status(verification)
        admin_id = admin.id

        summary = ImportSummary()
        errors: List[str] = []
        org_cache: Dict[str, Optional[str]] = {}

        for row_number, raw_row in rows:
            summary.total_rows += 1
            row = _normalized_row(raw_row)

            name = row.get("name", "")
            email = normalize_email(row.get("email"))
            program = row.get("program", "")
            duration_text = row.get("durationtext") or None

            if not name or not email or not program:
                errors.append(
                    f"Row {row_number}: Name, Email and Program are required.")
                continue

            if not is_valid_email(email):
                errors.append(
                    f"Row {row_number}: Invalid email format ({email}).")
                continue

            try:
                organization_name = self._canonical_organization_name(
                    row.get("organizationname", ""), org_cache)
                holder, created = self.resolver.find_or_create_holder(name, email)
            except StorageError as e:
                errors.append(f"Row {row_number}: {e.detail}")
                continue

            if created:
                summary.created_users += 1
            else:
                summary.existing_users += 1

            try:
                retry_on_conflict(
                    lambda code: self._insert_certificate(
                        code,
                        holder=lambda _code: holder,
                        admin_id=admin_id,
                        holder_name=name,
                        program=program,
                        organization_name=organization_name,
                        duration_text=duration_text,
                        status=status,
                        issued_at=None,
                        activity_type=ActivityType.IMPORTED,
                        describe=lambda c: f"Certificate {c} imported for {name} ({email}).",
                    )
                )
            except (StorageError, CodeGenerationExhausted) as e:
                errors.append(
                    f"Row {row_number}: Failed to create certificate for {email} - {e.detail}")
                continue

            summary.created_certificates += 1

        summary.error_count = len(errors)

        for error in errors:
            logger.warning(f"Import row skipped: {error}")
        logger.info(
            f"Import by admin {admin_id} finished: {summary.model_dump()}")

        return ImportResult(summary=summary, errors=errors)
