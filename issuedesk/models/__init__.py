from issuedesk.models.user import User
from issuedesk.models.issue import (
    Issue,
    IssueCategory,
    IssuePriority,
    IssueStatus,
    OPEN_STATUSES,
    RESOLVED_STATUSES,
)
from issuedesk.models.comment import Comment
from issuedesk.models.attachment import Attachment
from issuedesk.models.notification import Notification, NotificationType
from issuedesk.models.counter import Counter

__all__ = [
    "User",
    "Issue",
    "IssueStatus",
    "IssuePriority",
    "IssueCategory",
    "OPEN_STATUSES",
    "RESOLVED_STATUSES",
    "Comment",
    "Attachment",
    "Notification",
    "NotificationType",
    "Counter",
]
