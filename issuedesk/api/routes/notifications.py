from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from issuedesk.api import deps
from issuedesk.api.responses import NOT_FOUND
from issuedesk.models import User
from issuedesk.schemas.notification import NotificationOut
from issuedesk.services import notifications as notification_service
from issuedesk.services.audit import AuditEvent, audit_log

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOut])
def list_notifications(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return notification_service.list_for_user(db, current_user.id)


@router.patch("/{notification_id}/read", response_model=NotificationOut, responses=NOT_FOUND)
def mark_notification_read(
    notification_id: int,
    request: Request,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    notification = notification_service.mark_as_read(db, notification_id, current_user.id)
    audit_log(
        AuditEvent.notification_read,
        current_user.id,
        request.client.host if request.client else None,
        notification_id=notification.id,
    )
    return notification
