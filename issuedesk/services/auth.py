from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from issuedesk.core.config import settings
from issuedesk.db.counters import next_id
from issuedesk.models import User
from issuedesk.schemas.user import UserCreate
from issuedesk.services import security
from issuedesk.services.token_store import Store


def register_user(db: Session, payload: UserCreate) -> User:
    if db.query(User).filter(User.username == payload.username).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Username already exists"
        )
    user = User(
        id=next_id(db, "users"),
        username=payload.username,
        password_hash=security.hash_password(payload.password),
        email=str(payload.email),
        full_name=payload.full_name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Username already exists"
        ) from exc
    db.refresh(user)
    return user


def authenticate_user(db: Session, store: Store, username: str, password: str) -> User:
    failures = store.inc_failure(username, window=settings.login_failure_window_seconds)
    if failures > settings.login_max_failures:
        raise HTTPException(
            status_code=status.HTTP_423_LOCKED, detail="Account temporarily locked"
        )
    user = db.query(User).filter(User.username == username).first()
    if not user or not security.verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    store.clear_failure(username)
    return user


def revoke_access_token(store: Store, token: str) -> None:
    try:
        payload = security.decode_token(token)
    except ValueError:
        return
    exp = payload.get("exp")
    if not isinstance(exp, int):
        return
    ttl_seconds = exp - int(datetime.now(timezone.utc).timestamp())
    if ttl_seconds > 0:
        store.revoke(token, ttl_seconds)
