from starlette.requests import Request

from issuedesk.core.config import settings


def client_key(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None)
    if user_id is not None:
        return f"user:{user_id}"
    return request.client.host if request.client else "anonymous"


class _NoopLimiter:
    def limit(self, *_args, **_kwargs):
        def decorator(func):
            return func

        return decorator


if settings.env.lower() == "test":
    limiter = _NoopLimiter()
else:
    from slowapi import Limiter

    limiter = Limiter(
        key_func=client_key,
        default_limits=[settings.rate_limit_global],
        headers_enabled=False,
    )
