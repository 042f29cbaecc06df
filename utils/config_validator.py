"""
Startup checks for the storefront configuration.

Anything that would otherwise surface as a confusing failure on the first
request (bad API_URL, weak encryption secret, zero timeout) is rejected here.
"""

import sys
from typing import Optional
from urllib.parse import urlparse

MIN_SECRET_LENGTH = 32


class ConfigValidationError(Exception):
    pass


def validate_api_url(api_url: Optional[str]) -> None:
    """API_URL must be an absolute http:// or https:// URL with a host."""
    if not api_url:
        raise ConfigValidationError(
            "API_URL is required!\n"
            "Add to .env: API_URL=http://localhost:8085"
        )

    parsed = urlparse(api_url)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return
    raise ConfigValidationError(
        f"API_URL must be an absolute http(s) URL (got: {api_url})\n"
        "Example: API_URL=https://api.example.com"
    )


def validate_session_encryption_secret(secret: Optional[str]) -> None:
    hint = "Generate one with: openssl rand -hex 32"
    if not secret:
        raise ConfigValidationError(
            "SESSION_ENCRYPTION_SECRET must be set when SESSION_ENCRYPTION=true!\n"
            f"{hint}\n"
            "Then add SESSION_ENCRYPTION_SECRET=<secret> to .env"
        )
    if len(secret) < MIN_SECRET_LENGTH:
        raise ConfigValidationError(
            f"SESSION_ENCRYPTION_SECRET is too short ({len(secret)} chars, need {MIN_SECRET_LENGTH})\n"
            f"{hint}"
        )


def validate_http_timeout(timeout: Optional[float]) -> None:
    if timeout is None or timeout > 0:
        return
    raise ConfigValidationError(
        f"HTTP_TIMEOUT_SECONDS must be positive (got: {timeout})\n"
        "Leave it unset to keep the HTTP client default."
    )


def validate_startup_config(config_module) -> None:
    """
    Run every check against a loaded config module.

    The encryption secret is only inspected when SESSION_ENCRYPTION is on.
    """
    validate_api_url(getattr(config_module, 'API_URL', None))
    if getattr(config_module, 'SESSION_ENCRYPTION', False):
        validate_session_encryption_secret(getattr(config_module, 'SESSION_ENCRYPTION_SECRET', None))
    validate_http_timeout(getattr(config_module, 'HTTP_TIMEOUT_SECONDS', None))


def validate_or_exit(config_module) -> None:
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        sys.stderr.write(f"\n Configuration error:\n{e}\n\nStorefront not started.\n")
        sys.exit(1)
