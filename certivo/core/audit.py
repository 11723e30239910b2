from datetime import datetime
from typing import Optional
from sqlmodel import Session

from certivo.db.schema import ActivityType, CertificateActivity


def record_activity(
    session: Session,
    certificate_id: int,
    activity_type: ActivityType,
    description: str,
    admin_id: Optional[int] = None,
) -> CertificateActivity:
    """
    Stages an audit entry on the caller's session.

    The caller commits, so the activity is written in the same unit of
    work as the certificate change it describes.
    """
    entry = CertificateActivity(
        certificate_id=certificate_id,
        admin_id=admin_id,
        activity_type=activity_type,
        description=description,
        created_at=datetime.utcnow()
    )
    session.add(entry)
    return entry
