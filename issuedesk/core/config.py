from functools import lru_cache
from pathlib import Path
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "issuedesk"
    env: str = "development"

    database_url: str = "postgresql+psycopg2://issuedesk:issuedesk@db:5432/issuedesk"
    redis_url: str = "redis://redis:6379/0"

    access_token_expire_minutes: int = 60
    jwt_alg: str = "RS256"
    jwt_private_key_path: Path = Path("/run/secrets/jwt_private.pem")
    jwt_public_key_path: Path = Path("/run/secrets/jwt_public.pem")

    rate_limit_login: str = "5/minute"
    rate_limit_global: str = "100/minute"
    rate_limit_sensitive: str = "10/minute"
    login_max_failures: int = 10
    login_failure_window_seconds: int = 900

    cors_origins: str = "http://localhost:5173"
    cors_allow_methods: str = "GET,POST,PATCH,DELETE,OPTIONS"
    cors_allow_headers: str = "Authorization,Content-Type"
    cors_max_age: int = 600
    log_level: str = "INFO"

    max_json_body_bytes: int = 1_000_000
    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_upload_types: str = "image/jpeg,image/png,image/gif,application/pdf"

    recent_issues_limit: int = 5

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        if self.max_upload_bytes <= 0:
            raise ValueError("MAX_UPLOAD_BYTES must be positive")
        if self.recent_issues_limit < 0:
            raise ValueError("RECENT_ISSUES_LIMIT must not be negative")
        return self

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def allowed_methods(self) -> list[str]:
        return [
            m.strip().upper() for m in self.cors_allow_methods.split(",") if m.strip()
        ]

    @property
    def allowed_headers(self) -> list[str]:
        return [h.strip() for h in self.cors_allow_headers.split(",") if h.strip()]

    @property
    def upload_types(self) -> set[str]:
        return {
            t.strip().lower() for t in self.allowed_upload_types.split(",") if t.strip()
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
