from typing import Optional
from sqlmodel import SQLModel


class VerificationSettings(SQLModel):
    auto_verify_imports: bool = True
    require_review_for_manual: bool = False
    lock_status_after_download: bool = False


class PublicPortalSettings(SQLModel):
    public_lookup_enabled: bool = True
    show_org_name_on_public: bool = True
    allow_public_pdf_download: bool = True


class VerificationSettingsUpdate(SQLModel):
    auto_verify_imports: Optional[bool] = None
    require_review_for_manual: Optional[bool] = None
    lock_status_after_download: Optional[bool] = None


class PublicPortalSettingsUpdate(SQLModel):
    public_lookup_enabled: Optional[bool] = None
    show_org_name_on_public: Optional[bool] = None
    allow_public_pdf_download: Optional[bool] = None


class VerificationSettingsResponse(SQLModel):
    message: str
    settings: VerificationSettings


class PublicPortalSettingsResponse(SQLModel):
    message: str
    settings: PublicPortalSettings
