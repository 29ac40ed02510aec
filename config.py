"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file) once,
when the application is built, and are frozen afterwards. The verification
gate and both verifiers receive these objects explicitly; nothing in the
request path reads os.environ.

Several variables accept legacy aliases (PAT_ISSUER / PAT_ISSUER_ID,
RECAPTCHA_SECRET / RECAPTCHA_SECRET_KEY, ...) so existing deployments keep
working unchanged. ENV and NODE_ENV are read separately: either one set to
"test" turns the bypass on.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PAT_VERIFICATION_URL = (
    "https://token.relay.apple.com/v1/private-access-token/verify"
)
DEFAULT_RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
DEFAULT_HTTP_TIMEOUT_MS = 5000
DEFAULT_RECAPTCHA_MIN_SCORE = 0.5

_BASE_CONFIG = SettingsConfigDict(
    env_file=".env",
    extra="ignore",
    frozen=True,
    populate_by_name=True,
)


_TRUE_FLAGS = frozenset({"1", "true", "yes", "on"})


def _lenient_flag(value: Any) -> bool:
    """Parse an on/off switch; anything unrecognised (including empty) is off."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_FLAGS


def _positive_timeout_ms(value: Any) -> int:
    """Parse a millisecond timeout, falling back to the default when unusable."""
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return DEFAULT_HTTP_TIMEOUT_MS
    if not math.isfinite(parsed) or parsed <= 0:
        return DEFAULT_HTTP_TIMEOUT_MS
    return int(parsed)


class HumanVerificationSettings(BaseSettings):
    model_config = _BASE_CONFIG

    env: str = Field(
        default="development",
        validation_alias=AliasChoices("ENV", "env"),
    )
    node_env: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("NODE_ENV", "node_env"),
    )
    human_verification_bypass: bool = False
    recaptcha_test_bypass: bool = False

    @field_validator(
        "human_verification_bypass", "recaptcha_test_bypass", mode="before"
    )
    @classmethod
    def _lenient_switch(cls, v: Any) -> bool:
        return _lenient_flag(v)

    @property
    def bypass_enabled(self) -> bool:
        """True when every request must be admitted without calling out."""
        return (
            self.env == "test"
            or self.node_env == "test"
            or self.human_verification_bypass
            or self.recaptcha_test_bypass
        )


class PrivateAccessTokenSettings(BaseSettings):
    model_config = _BASE_CONFIG

    pat_verification_url: str = DEFAULT_PAT_VERIFICATION_URL
    pat_issuer_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("PAT_ISSUER_ID", "PAT_ISSUER", "pat_issuer_id"),
    )
    pat_key_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("PAT_KEY_ID", "PAT_KEYID", "pat_key_id"),
    )
    pat_team_id: Optional[str] = None
    pat_origin: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("PAT_ORIGIN", "APP_ORIGIN", "pat_origin"),
    )
    pat_http_timeout_ms: int = DEFAULT_HTTP_TIMEOUT_MS

    @field_validator("pat_verification_url", mode="before")
    @classmethod
    def _default_url_when_blank(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_PAT_VERIFICATION_URL
        return v

    @field_validator("pat_http_timeout_ms", mode="before")
    @classmethod
    def _lenient_timeout(cls, v: Any) -> int:
        return _positive_timeout_ms(v)

    @property
    def is_configured(self) -> bool:
        return bool(self.pat_issuer_id and self.pat_key_id)

    @property
    def timeout_seconds(self) -> float:
        return self.pat_http_timeout_ms / 1000


class RecaptchaSettings(BaseSettings):
    model_config = _BASE_CONFIG

    recaptcha_secret_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "RECAPTCHA_SECRET_KEY", "RECAPTCHA_SECRET", "recaptcha_secret_key"
        ),
    )
    recaptcha_verify_url: str = DEFAULT_RECAPTCHA_VERIFY_URL
    recaptcha_min_score: float = DEFAULT_RECAPTCHA_MIN_SCORE
    recaptcha_http_timeout_ms: int = DEFAULT_HTTP_TIMEOUT_MS

    @field_validator("recaptcha_min_score", mode="before")
    @classmethod
    def _lenient_min_score(cls, v: Any) -> float:
        # Unparseable or out-of-range values fall back to the default
        try:
            parsed = float(v)
        except (TypeError, ValueError):
            return DEFAULT_RECAPTCHA_MIN_SCORE
        if not math.isfinite(parsed) or not 0.0 <= parsed <= 1.0:
            return DEFAULT_RECAPTCHA_MIN_SCORE
        return parsed

    @field_validator("recaptcha_http_timeout_ms", mode="before")
    @classmethod
    def _lenient_timeout(cls, v: Any) -> int:
        return _positive_timeout_ms(v)

    @property
    def is_configured(self) -> bool:
        return bool(self.recaptcha_secret_key)

    @property
    def timeout_seconds(self) -> float:
        return self.recaptcha_http_timeout_ms / 1000


class ContactSettings(BaseSettings):
    model_config = _BASE_CONFIG

    contact_webhook: str = ""
    contact_require_human_verification: bool = False

    @field_validator("contact_require_human_verification", mode="before")
    @classmethod
    def _lenient_switch(cls, v: Any) -> bool:
        return _lenient_flag(v)


class LoggingSettings(BaseSettings):
    model_config = _BASE_CONFIG

    env: str = Field(
        default="development",
        validation_alias=AliasChoices("ENV", "NODE_ENV", "env"),
    )
    log_level: str = "INFO"
    log_format: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def output_format(self) -> str:
        """LOG_FORMAT when set, otherwise json in production and console elsewhere."""
        if self.log_format:
            return self.log_format
        return "json" if self.is_production else "console"


class SentrySettings(BaseSettings):
    model_config = _BASE_CONFIG

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1

    @field_validator("sentry_send_pii", mode="before")
    @classmethod
    def _lenient_switch(cls, v: Any) -> bool:
        return _lenient_flag(v)


class AppSettings(BaseSettings):
    model_config = _BASE_CONFIG

    # Core
    env: str = Field(
        default="development",
        validation_alias=AliasChoices("ENV", "NODE_ENV", "env"),
    )
    app_name: str = "human-verification-gate"

    # CORS defaults to all origins with credentials allowed
    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs share the same env/dotenv source
    verification: HumanVerificationSettings = Field(
        default_factory=HumanVerificationSettings
    )
    pat: PrivateAccessTokenSettings = Field(default_factory=PrivateAccessTokenSettings)
    recaptcha: RecaptchaSettings = Field(default_factory=RecaptchaSettings)
    contact: ContactSettings = Field(default_factory=ContactSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)

    @property
    def is_production(self) -> bool:
        return self.env == "production"
