import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from issuedesk.db.session import Base, utcnow


class NotificationType(str, enum.Enum):
    comment = "comment"
    status = "status"
    assignment = "assignment"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=False)
    type = Column(Enum(NotificationType, length=16), nullable=False)
    message = Column(String(500), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    issue_id = Column(
        Integer, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True
    )
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    issue = relationship("Issue", back_populates="notifications")
