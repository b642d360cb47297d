from collections.abc import Iterator
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class Database:
    """Owns the engine and session factory for one process.

    Built by the application factory and disposed on shutdown; nothing in the
    package keeps a module-level connection.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: Engine = _create_engine(url, echo)
        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine, future=True
        )

    def session(self) -> Session:
        return self._session_factory()

    def sessions(self) -> Iterator[Session]:
        db = self.session()
        try:
            yield db
        finally:
            db.close()

    def create_all(self) -> None:
        # imported for the side effect of registering every table on Base
        import issuedesk.models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def _create_engine(url: str, echo: bool) -> Engine:
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
        if ":memory:" in url or url in {"sqlite://", "sqlite+pysqlite://"}:
            return create_engine(
                url,
                echo=echo,
                future=True,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        return create_engine(url, echo=echo, future=True, connect_args=connect_args)
    return create_engine(url, echo=echo, pool_pre_ping=True, future=True)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns hand back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
