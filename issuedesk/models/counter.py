from sqlalchemy import Column, Integer, String

from issuedesk.db.session import Base


class Counter(Base):
    """Per-collection id sequence; ``seq`` is the last id handed out."""

    __tablename__ = "counters"

    name = Column(String(50), primary_key=True)
    seq = Column(Integer, nullable=False, default=0)
