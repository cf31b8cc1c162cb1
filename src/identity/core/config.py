from functools import lru_cache
from urllib.parse import urlparse

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Learning Platform Identity"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Security
    log_user_emails: bool = False  # Keep False in production (GDPR)
    allowed_app_url_domains: list[str] = ["localhost", "127.0.0.1"]
    csp_production: str = "default-src 'self'; frame-ancestors 'none'"

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Session tokens
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    session_token_expire_hours: int = 24
    max_login_devices: int = 5

    # Password hashing
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1
    min_password_score: int = 1  # zxcvbn 0-4

    # Verification codes
    verification_code_length: int = 6
    email_verification_code_ttl_minutes: int = 10
    phone_verification_code_ttl_minutes: int = 10
    password_reset_code_ttl_minutes: int = 30
    supersede_previous_codes: bool = True
    verification_max_attempts: int = 5  # wrong guesses before outstanding codes are burned
    password_signup_email_verified: bool = False

    # Invitations
    invite_expire_days: int = 7

    # Email (Resend)
    resend_api_key: str | None = None  # If not set, emails are logged but not sent
    email_from: str = "noreply@example.com"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Frontend URL used in invitation links and OAuth redirects
    app_url: str = "http://localhost:3000"

    # Google OAuth
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str = "http://localhost:8000/api/v1/auth/google/callback"
    oauth_state_expire_minutes: int = 15

    # Metrics
    metrics_api_key: str | None = None

    # Redis (optional - app works without it)
    redis_url: str | None = None
    redis_pool_size: int = 10

    # Rate limiting
    global_rate_limit_per_second: int = 10
    global_rate_limit_burst: int = 20
    login_rate_limit: str = "5/15minutes"
    otp_rate_limit: str = "3/minute"
    registration_rate_limit: str = "10/hour"

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcard origins since credentials are allowed."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @field_validator("app_url")
    @classmethod
    def validate_app_url(cls, v: str, info: ValidationInfo) -> str:
        """APP_URL ends up in emailed links, so it must be an allowed domain."""
        allowed = info.data.get("allowed_app_url_domains", ["localhost", "127.0.0.1"])
        hostname = urlparse(v).hostname or ""

        if not any(hostname == domain or hostname.endswith(f".{domain}") for domain in allowed):
            raise ValueError(
                f"APP_URL domain '{hostname}' not in allowed list. "
                f"Add it to ALLOWED_APP_URL_DOMAINS or use: {allowed}"
            )
        return v

    @field_validator("verification_code_length")
    @classmethod
    def validate_code_length(cls, v: int) -> int:
        if not 4 <= v <= 10:
            raise ValueError("VERIFICATION_CODE_LENGTH must be between 4 and 10")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
