"""Notification rules fired by issue mutations.

The rule functions are pure: they look at the issue state around a mutation
and return drafts. ``deliver`` persists the drafts after the triggering write
has been committed, so a failure here leaves the mutation in place.
"""
import logging
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from issuedesk.db.counters import next_id
from issuedesk.models import Issue, IssueStatus, Notification, NotificationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssueState:
    id: int
    title: str
    status: IssueStatus
    reporter_id: int
    assignee_id: int | None

    @classmethod
    def of(cls, issue: Issue) -> "IssueState":
        return cls(
            id=issue.id,
            title=issue.title,
            status=issue.status,
            reporter_id=issue.reporter_id,
            assignee_id=issue.assignee_id,
        )


@dataclass(frozen=True)
class NotificationDraft:
    type: NotificationType
    user_id: int
    issue_id: int
    message: str


def _assignment(issue: IssueState, assignee_id: int) -> NotificationDraft:
    return NotificationDraft(
        type=NotificationType.assignment,
        user_id=assignee_id,
        issue_id=issue.id,
        message=f'You were assigned to "{issue.title}"',
    )


def on_issue_created(issue: IssueState) -> list[NotificationDraft]:
    if issue.assignee_id is None:
        return []
    return [_assignment(issue, issue.assignee_id)]


def on_issue_updated(before: IssueState, after: IssueState) -> list[NotificationDraft]:
    """Status changes go to the reporter and the previous assignee; a new
    assignee gets an assignment notice."""
    drafts: list[NotificationDraft] = []
    if after.status != before.status:
        new_status = IssueStatus(after.status).value
        message = f'Issue "{before.title}" status changed to {new_status}'
        recipients = [before.reporter_id]
        if before.assignee_id is not None and before.assignee_id != before.reporter_id:
            recipients.append(before.assignee_id)
        drafts.extend(
            NotificationDraft(
                type=NotificationType.status,
                user_id=user_id,
                issue_id=before.id,
                message=message,
            )
            for user_id in recipients
        )
    if after.assignee_id is not None and after.assignee_id != before.assignee_id:
        drafts.append(_assignment(before, after.assignee_id))
    return drafts


def on_comment_added(issue: IssueState, commenter_id: int) -> list[NotificationDraft]:
    recipients = []
    if issue.reporter_id != commenter_id:
        recipients.append(issue.reporter_id)
    if (
        issue.assignee_id is not None
        and issue.assignee_id != commenter_id
        and issue.assignee_id != issue.reporter_id
    ):
        recipients.append(issue.assignee_id)
    return [
        NotificationDraft(
            type=NotificationType.comment,
            user_id=user_id,
            issue_id=issue.id,
            message=f'New comment on "{issue.title}"',
        )
        for user_id in recipients
    ]


def deliver(db: Session, drafts: list[NotificationDraft]) -> list[Notification]:
    if not drafts:
        return []
    notifications = []
    try:
        for draft in drafts:
            notification = Notification(
                id=next_id(db, "notifications"),
                type=draft.type,
                message=draft.message,
                user_id=draft.user_id,
                issue_id=draft.issue_id,
                read=False,
            )
            db.add(notification)
            notifications.append(notification)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Failed to write notifications",
            extra={
                "event": {
                    "issue_id": drafts[0].issue_id,
                    "types": sorted({d.type.value for d in drafts}),
                }
            },
        )
        return []
    return notifications


def list_for_user(db: Session, user_id: int) -> list[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


def mark_as_read(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    if not notification or notification.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
        )
    if not notification.read:
        notification.read = True
        db.commit()
        db.refresh(notification)
    return notification
