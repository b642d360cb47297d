from datetime import datetime

from issuedesk.models.notification import NotificationType
from issuedesk.schemas.common import ApiModel


class NotificationOut(ApiModel):
    id: int
    type: NotificationType
    message: str
    user_id: int
    issue_id: int
    read: bool
    created_at: datetime
