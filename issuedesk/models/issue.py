import enum
from sqlalchemy import Column, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import relationship

from issuedesk.db.session import Base, utcnow


class IssueStatus(str, enum.Enum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"


class IssuePriority(str, enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


class IssueCategory(str, enum.Enum):
    bug = "bug"
    feature = "feature"
    documentation = "documentation"
    security = "security"
    performance = "performance"
    environment_error = "environmentError"
    missing_access = "missingAccess"
    invalid_test_data = "invalidTestData"
    not_a_defect = "notADefect"
    observation = "observation"
    duplicate = "duplicate"
    out_of_team_scope = "outOfTeamScope"


OPEN_STATUSES = frozenset({IssueStatus.open, IssueStatus.in_progress})
RESOLVED_STATUSES = frozenset({IssueStatus.resolved, IssueStatus.closed})


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Issue(Base):
    __tablename__ = "issues"

    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(
        Enum(IssueStatus, values_callable=_enum_values, length=32),
        nullable=False,
        default=IssueStatus.open,
    )
    priority = Column(
        Enum(IssuePriority, values_callable=_enum_values, length=16), nullable=False
    )
    category = Column(
        Enum(IssueCategory, values_callable=_enum_values, length=32), nullable=False
    )
    team = Column(String(50), nullable=True)
    environment = Column(String(50), nullable=True)
    assignee_id = Column(Integer, nullable=True, index=True)
    reporter_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    comments = relationship(
        "Comment", cascade="all, delete-orphan", back_populates="issue"
    )
    attachments = relationship(
        "Attachment", cascade="all, delete-orphan", back_populates="issue"
    )
    notifications = relationship(
        "Notification", cascade="all, delete-orphan", back_populates="issue"
    )
