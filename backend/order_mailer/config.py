# order_mailer/config.py
import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_PORT = 3000
DEFAULT_APP_NAME = "E-Waste App"
DEFAULT_PRIMARY_COLOR = "#4CAF50"
DEFAULT_CURRENCY_SYMBOL = "₹"
DEFAULT_MAILERSEND_API_URL = "https://api.mailersend.com/v1/email"
DEFAULT_TIMEOUT_SECONDS = 15.0

# Local dev servers. Hosted frontends are matched by DEFAULT_ALLOWED_ORIGIN_REGEX.
DEFAULT_ALLOWED_ORIGINS = ("http://localhost:3000", "http://localhost:5173")
DEFAULT_ALLOWED_ORIGIN_REGEX = (
    r"(https?://.*\.convex\.cloud"  # Convex actions
    r"|exp://.*"  # Expo Go builds
    r"|https?://.*\.expo\.dev)"  # Expo cloud previews
)

MISMATCH_POLICIES = ("accept", "reject")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class Settings:
    mailersend_api_key: str
    sender_email: str
    port: int = DEFAULT_PORT
    app_name: str = DEFAULT_APP_NAME
    primary_color: str = DEFAULT_PRIMARY_COLOR
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    allowed_origin_regex: Optional[str] = DEFAULT_ALLOWED_ORIGIN_REGEX
    mailersend_api_url: str = DEFAULT_MAILERSEND_API_URL
    provider_timeout: float = DEFAULT_TIMEOUT_SECONDS
    total_mismatch_policy: str = "accept"
    log_level: str = "INFO"

    @property
    def service_name(self) -> str:
        return f"{self.app_name} Email Service"

    @property
    def sender_name(self) -> str:
        return f"{self.app_name} Notifications"

    @property
    def masked_api_key(self) -> str:
        return self.mailersend_api_key[:5] + "..."


def _get(env: Mapping[str, str], key: str, default: Optional[str] = None) -> Optional[str]:
    v = env.get(key)
    if v is None:
        return default
    v = v.strip()
    return v or default


def _require(env: Mapping[str, str], key: str, hint: str = "") -> str:
    v = _get(env, key)
    if not v:
        raise ConfigurationError(f"{key} is not set in environment variables!{hint}")
    return v


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Builds Settings once at startup. With env=None the process environment is
    used, after loading a .env file if one exists.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    api_key = _require(env, "MAILERSEND_API_KEY")
    sender_email = _require(
        env,
        "SENDER_EMAIL",
        " Set it to your MailerSend verified sender (e.g. admin@yourtrialdomain.mlsender.net).",
    )

    port_raw = _get(env, "PORT", str(DEFAULT_PORT))
    try:
        port = int(port_raw)
    except ValueError:
        raise ConfigurationError(f"PORT must be an integer, got {port_raw!r}")

    timeout_raw = _get(env, "MAILERSEND_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ConfigurationError(f"MAILERSEND_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}")
    if timeout <= 0:
        raise ConfigurationError("MAILERSEND_TIMEOUT_SECONDS must be positive.")

    policy = _get(env, "TOTAL_MISMATCH_POLICY", "accept").lower()
    if policy not in MISMATCH_POLICIES:
        raise ConfigurationError(
            f"TOTAL_MISMATCH_POLICY must be one of {', '.join(MISMATCH_POLICIES)}, got {policy!r}"
        )

    log_level = _get(env, "LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    origin_regex = _get(env, "ALLOWED_ORIGIN_REGEX", DEFAULT_ALLOWED_ORIGIN_REGEX)
    try:
        re.compile(origin_regex)
    except re.error as e:
        raise ConfigurationError(f"ALLOWED_ORIGIN_REGEX is not a valid regular expression: {e}")

    origins_raw = _get(env, "ALLOWED_ORIGINS")
    if origins_raw is None:
        origins = DEFAULT_ALLOWED_ORIGINS
    else:
        origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip())

    return Settings(
        mailersend_api_key=api_key,
        sender_email=sender_email,
        port=port,
        app_name=_get(env, "APP_NAME", DEFAULT_APP_NAME),
        primary_color=_get(env, "APP_PRIMARY_COLOR", DEFAULT_PRIMARY_COLOR),
        currency_symbol=_get(env, "CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL),
        allowed_origins=origins,
        allowed_origin_regex=origin_regex,
        mailersend_api_url=_get(env, "MAILERSEND_API_URL", DEFAULT_MAILERSEND_API_URL),
        provider_timeout=timeout,
        total_mismatch_policy=policy,
        log_level=log_level,
    )
