from fastapi import APIRouter, Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from issuedesk.api import deps
from issuedesk.api.responses import CONFLICT, RATE_LIMITED, UNAUTHORIZED
from issuedesk.core.config import settings
from issuedesk.core.limiter import limiter
from issuedesk.models import User
from issuedesk.schemas.auth import LoginRequest, LoginResponse
from issuedesk.schemas.user import UserCreate, UserOut
from issuedesk.services import auth as auth_service, security
from issuedesk.services.audit import AuditEvent, audit_log
from issuedesk.services.token_store import Store

router = APIRouter(prefix="/auth", tags=["auth"])


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post(
    "/register",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT | RATE_LIMITED,
)
@limiter.limit(settings.rate_limit_sensitive)
def register(payload: UserCreate, request: Request, db: Session = Depends(deps.get_db)):
    user = auth_service.register_user(db, payload)
    audit_log(AuditEvent.register, user.id, _client_ip(request), username=user.username)
    return user


@router.post("/login", response_model=LoginResponse, responses=UNAUTHORIZED | RATE_LIMITED)
@limiter.limit(settings.rate_limit_login)
def login(
    request: Request,
    payload: LoginRequest,
    db: Session = Depends(deps.get_db),
    store: Store = Depends(deps.get_token_store),
):
    try:
        user = auth_service.authenticate_user(db, store, payload.username, payload.password)
    except HTTPException:
        audit_log(AuditEvent.login_failed, None, _client_ip(request), username=payload.username)
        raise
    token = security.create_access_token(user.id)
    audit_log(AuditEvent.login_success, user.id, _client_ip(request))
    return LoginResponse.model_validate(
        {
            **UserOut.model_validate(user).model_dump(),
            "access_token": token,
            "expires_in": settings.access_token_expire_minutes * 60,
        }
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, responses=UNAUTHORIZED)
def logout(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Security(deps.bearer_scheme),
    current_user: User = Depends(deps.get_current_user),
    store: Store = Depends(deps.get_token_store),
):
    auth_service.revoke_access_token(store, credentials.credentials)
    audit_log(AuditEvent.logout, current_user.id, _client_ip(request))
    return None


@router.get("/user", response_model=UserOut, responses=UNAUTHORIZED)
def current_user(user: User = Depends(deps.get_current_user)):
    return user
