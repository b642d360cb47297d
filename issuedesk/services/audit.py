"""Audit trail for account and issue-tracker mutations."""
import enum
import logging
from typing import Any

from issuedesk.services.security import mask_sensitive

logger = logging.getLogger("audit")

_MASKED_KEYS = {"token", "access_token", "password"}


class AuditEvent(str, enum.Enum):
    register = "register"
    login_success = "login_success"
    login_failed = "login_failed"
    logout = "logout"
    issue_create = "issue_create"
    issue_update = "issue_update"
    issue_delete = "issue_delete"
    comment_add = "comment_add"
    attachment_upload = "attachment_upload"
    notification_read = "notification_read"


def audit_log(
    event: AuditEvent,
    actor_id: int | None,
    ip: str | None,
    issue_id: int | None = None,
    **details: Any,
) -> None:
    """Write one ``audit`` record; ``issue_id`` ties the event to an issue."""
    event = AuditEvent(event)
    payload: dict[str, Any] = {
        "event": event.value,
        "actor_id": actor_id,
        "ip": ip,
        "details": {
            key: mask_sensitive(value)
            if key in _MASKED_KEYS and isinstance(value, str)
            else value
            for key, value in details.items()
        },
    }
    if issue_id is not None:
        payload["issue_id"] = issue_id
    level = logging.WARNING if event is AuditEvent.login_failed else logging.INFO
    logger.log(level, event.value, extra={"event": payload})
