"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from sf_proxy.core.salesforce.exceptions import CredentialsMissing

logger = logging.getLogger(__name__)

SUPPORTED_AUTH_FLOWS = {"web", "password"}


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as exc:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, exc)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_bool(var_name: str, default: str = "false") -> bool:
    return os.environ.get(var_name, default).strip().lower() in ("1", "true", "yes")


def _env_int(var_name: str, default: int) -> int:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {var_name} must be an integer") from None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Connected App
    salesforce_client_id: str
    salesforce_client_secret: str = field(repr=False)
    salesforce_auth_flow: str = "web"
    salesforce_redirect_uri: str = ""
    salesforce_login_url: str = "https://login.salesforce.com"
    salesforce_api_version: str = "60.0"
    salesforce_oauth_scope: str = "api refresh_token"

    # Username-Password flow
    salesforce_username: str = ""
    salesforce_password: str = field(default="", repr=False)
    salesforce_security_token: str = field(default="", repr=False)

    # Runtime
    request_timeout: int = 10
    pkce_state_ttl: int = 600
    trust_proxy_headers: bool = False
    log_level: str = "INFO"

    @property
    def uses_password_flow(self) -> bool:
        return self.salesforce_auth_flow == "password"

    def missing_settings(self) -> list[str]:
        """Names of required settings that are empty for the selected flow."""
        required = {
            "SALESFORCE_CLIENT_ID": self.salesforce_client_id,
            "SALESFORCE_CLIENT_SECRET": self.salesforce_client_secret,
        }
        if self.uses_password_flow:
            required["SALESFORCE_USERNAME"] = self.salesforce_username
            required["SALESFORCE_PASSWORD"] = self.salesforce_password
        else:
            required["SALESFORCE_REDIRECT_URI"] = self.salesforce_redirect_uri
        return [name for name, value in required.items() if not value]


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets.

    Raises:
        CredentialsMissing: If a setting required by the selected flow is empty
        ValueError: If SALESFORCE_AUTH_FLOW or a numeric setting is invalid
    """
    auth_flow = os.environ.get("SALESFORCE_AUTH_FLOW", "web").strip().lower()
    if auth_flow not in SUPPORTED_AUTH_FLOWS:
        raise ValueError(
            f"SALESFORCE_AUTH_FLOW must be one of {sorted(SUPPORTED_AUTH_FLOWS)}, got {auth_flow!r}"
        )

    cfg = AppConfig(
        salesforce_client_id=os.environ.get("SALESFORCE_CLIENT_ID", "").strip(),
        salesforce_client_secret=_load_secret_from_file(
            "salesforce_client_secret", "SALESFORCE_CLIENT_SECRET"
        ) or "",
        salesforce_auth_flow=auth_flow,
        salesforce_redirect_uri=os.environ.get("SALESFORCE_REDIRECT_URI", "").strip(),
        salesforce_login_url=(
            os.environ.get("SALESFORCE_LOGIN_URL", "").strip() or "https://login.salesforce.com"
        ).rstrip("/"),
        salesforce_api_version=os.environ.get("SALESFORCE_API_VERSION", "60.0").strip().lstrip("v"),
        salesforce_oauth_scope=os.environ.get("SALESFORCE_OAUTH_SCOPE", "api refresh_token").strip(),
        salesforce_username=os.environ.get("SALESFORCE_USERNAME", "").strip(),
        salesforce_password=_load_secret_from_file("salesforce_password", "SALESFORCE_PASSWORD") or "",
        salesforce_security_token=_load_secret_from_file(
            "salesforce_security_token", "SALESFORCE_SECURITY_TOKEN"
        ) or "",
        request_timeout=_env_int("REQUEST_TIMEOUT", 10),
        pkce_state_ttl=_env_int("PKCE_STATE_TTL", 600),
        trust_proxy_headers=_env_bool("TRUST_PROXY_HEADERS"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )

    missing = cfg.missing_settings()
    if missing:
        raise CredentialsMissing(missing)

    logger.info(
        "Settings loaded: flow=%s login_url=%s api_version=%s",
        cfg.salesforce_auth_flow,
        cfg.salesforce_login_url,
        cfg.salesforce_api_version,
    )
    return cfg
