"""Seed the database with demo users and issues."""

from issuedesk.core.config import settings
from issuedesk.db.session import Database
from issuedesk.models import IssueCategory, IssuePriority, IssueStatus
from issuedesk.schemas.issue import IssueCreate
from issuedesk.schemas.user import UserCreate
from issuedesk.services import auth as auth_service, issues as issue_service

DEMO_USERS = [
    ("johndoe", "John Doe"),
    ("alexsmith", "Alex Smith"),
    ("jordanlee", "Jordan Lee"),
    ("caseykim", "Casey Kim"),
]

# (title, description, status, priority, category, reporter, assignee) by user index
DEMO_ISSUES = [
    (
        "Unable to login on mobile devices",
        "Users are reporting issues when trying to log in using mobile devices.",
        IssueStatus.in_progress,
        IssuePriority.high,
        IssueCategory.bug,
        0,
        1,
    ),
    (
        "Dashboard performance issues",
        "The dashboard page is loading slowly when there are many items.",
        IssueStatus.open,
        IssuePriority.medium,
        IssueCategory.performance,
        0,
        2,
    ),
    (
        "Add export to CSV feature",
        "Users need to be able to export their data to CSV format.",
        IssueStatus.resolved,
        IssuePriority.low,
        IssueCategory.feature,
        1,
        0,
    ),
    (
        "Security vulnerability in login form",
        "There is a potential XSS vulnerability in the login form.",
        IssueStatus.resolved,
        IssuePriority.high,
        IssueCategory.security,
        2,
        3,
    ),
    (
        "Improve documentation for API endpoints",
        "The API documentation is outdated and needs to be updated.",
        IssueStatus.closed,
        IssuePriority.medium,
        IssueCategory.documentation,
        3,
        1,
    ),
]


def run():
    database = Database(settings.database_url)
    database.create_all()
    db = database.session()
    try:
        users = [
            auth_service.register_user(
                db,
                UserCreate(
                    username=username,
                    password="password123",
                    email=f"{username}@example.com",
                    full_name=full_name,
                ),
            )
            for username, full_name in DEMO_USERS
        ]
        for title, description, status, priority, category, reporter, assignee in DEMO_ISSUES:
            issue_service.create_issue(
                db,
                IssueCreate(
                    title=title,
                    description=description,
                    status=status,
                    priority=priority,
                    category=category,
                    reporter_id=users[reporter].id,
                    assignee_id=users[assignee].id,
                ),
            )
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    run()
