import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))


def _ensure_jwt_keys() -> None:
    key_dir = ROOT / ".tmp" / "test_keys"
    key_dir.mkdir(parents=True, exist_ok=True)
    private_key_path = key_dir / "jwt_private.pem"
    public_key_path = key_dir / "jwt_public.pem"
    if not private_key_path.exists() or not public_key_path.exists():
        from cryptography.hazmat.primitives import serialization
        from cryptography.hazmat.primitives.asymmetric import rsa

        key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        private_key_path.write_bytes(
            key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
        public_key_path.write_bytes(
            key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )
    os.environ.setdefault("JWT_PRIVATE_KEY_PATH", str(private_key_path))
    os.environ.setdefault("JWT_PUBLIC_KEY_PATH", str(public_key_path))
    os.environ.setdefault("ENV", "test")
    os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")


_ensure_jwt_keys()

from issuedesk.db.counters import next_id
from issuedesk.db.session import Database, utcnow
from issuedesk.main import create_app
from issuedesk.models import Issue, IssueCategory, IssuePriority, IssueStatus, User
from issuedesk.services.files import FileStore
from issuedesk.services.security import hash_password
from issuedesk.services.token_store import InMemoryStore


@pytest.fixture
def database():
    db = Database("sqlite+pysqlite:///:memory:")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def token_store():
    return InMemoryStore()


@pytest.fixture
def file_store(tmp_path):
    return FileStore(tmp_path / "uploads")


@pytest.fixture
def client(database, token_store, file_store):
    app = create_app(database=database, token_store=token_store, file_store=file_store)
    return TestClient(app)


@pytest.fixture
def make_user(db_session):
    def _make(username: str, full_name: str | None = None) -> User:
        user = User(
            id=next_id(db_session, "users"),
            username=username,
            password_hash=hash_password("password123"),
            email=f"{username}@example.com",
            full_name=full_name or username.title(),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_issue(db_session):
    def _make(
        reporter_id: int,
        assignee_id: int | None = None,
        status: IssueStatus = IssueStatus.open,
        priority: IssuePriority = IssuePriority.medium,
        category: IssueCategory = IssueCategory.bug,
        title: str = "Broken build",
        description: str = "The nightly build fails",
        created_at=None,
        updated_at=None,
    ) -> Issue:
        now = utcnow()
        issue = Issue(
            id=next_id(db_session, "issues"),
            title=title,
            description=description,
            status=status,
            priority=priority,
            category=category,
            reporter_id=reporter_id,
            assignee_id=assignee_id,
            created_at=created_at or now,
            updated_at=updated_at or created_at or now,
        )
        db_session.add(issue)
        db_session.commit()
        db_session.refresh(issue)
        return issue

    return _make
