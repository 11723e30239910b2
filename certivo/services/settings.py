from datetime import datetime
from typing import Tuple

from loguru import logger
from sqlmodel import Session, select

from certivo.db.schema import AdminSettings
from certivo.models.settings import (
    VerificationSettings, PublicPortalSettings,
    VerificationSettingsUpdate, PublicPortalSettingsUpdate
)


class SettingsService:
    """
    Reads and updates the AdminSettings singleton row.

    Consumers read the settings once per request and pass the resulting
    value objects down, rather than re-querying mid-operation.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_or_create(self) -> AdminSettings:
        row = self.session.exec(select(AdminSettings).limit(1)).first()
        if row:
            return row

        row = AdminSettings()
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        logger.info("Initialized admin settings with defaults")
        return row

    def get_verification_settings(self) -> VerificationSettings:
        row = self.get_or_create()
        return VerificationSettings(
            auto_verify_imports=row.auto_verify_imports,
            require_review_for_manual=row.require_review_for_manual,
            lock_status_after_download=row.lock_status_after_download,
        )

    def get_public_portal_settings(self) -> PublicPortalSettings:
        row = self.get_or_create()
        return PublicPortalSettings(
            public_lookup_enabled=row.public_lookup_enabled,
            show_org_name_on_public=row.show_org_name_on_public,
            allow_public_pdf_download=row.allow_public_pdf_download,
        )

    def _apply(self, changes: dict) -> bool:
        if not changes:
            return False

        row = self.get_or_create()
        for key, value in changes.items():
            setattr(row, key, value)
        row.updated_at = datetime.utcnow()

        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        logger.info(f"Admin settings updated: {changes}")
        return True

    def update_verification_settings(self, data: VerificationSettingsUpdate) -> Tuple[VerificationSettings, bool]:
        """
        Applies only the supplied fields.
        Returns the resulting settings and whether anything changed.
        """
        changed = self._apply(data.model_dump(exclude_none=True))
        return self.get_verification_settings(), changed

    def update_public_portal_settings(self, data: PublicPortalSettingsUpdate) -> Tuple[PublicPortalSettings, bool]:
        changed = self._apply(data.model_dump(exclude_none=True))
        return self.get_public_portal_settings(), changed
