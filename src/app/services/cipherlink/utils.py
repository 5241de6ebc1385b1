"""Cipherlink Utility Functions.

Provides:
- Secret masking for logs
- URL sanitizing (auth token and key params redacted)
- Default browser-like headers for page, script and API requests
- Header merging
"""

import re

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

SENSITIVE_PARAMS = [
    "cpt_auth",
    "token",
    "key",
    "secret",
    "password",
]


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Mask a secret for logging, keeping only a short prefix.

    Args:
        value: Secret value
        visible: Number of leading characters kept

    Returns:
        Masked string such as ``"abcd***"``
    """
    if not value:
        return "<empty>"
    if len(value) <= visible:
        return "***"
    return value[:visible] + "***"


def sanitize_url(url: str) -> str:
    """Sanitize URL for logging (remove sensitive query params).

    Args:
        url: Original URL

    Returns:
        Sanitized URL safe for logging
    """
    sanitized = url
    for param in SENSITIVE_PARAMS:
        sanitized = re.sub(
            rf"([?&]{param}=)[^&]*",
            r"\1[REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )
    return sanitized


def build_default_headers(user_agent: str | None = None) -> dict[str, str]:
    """Build a set of default headers that mimic a real browser.

    Args:
        user_agent: User-Agent string to use

    Returns:
        Dictionary of HTTP headers
    """
    return {
        "User-Agent": user_agent or DEFAULT_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/json,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate, br",
        "Connection": "keep-alive",
    }


def build_api_headers(app_id: str) -> dict[str, str]:
    """Headers every signed API call carries."""
    return {
        "Appid": app_id,
        "Content-Type": "application/json",
    }


def merge_headers(default: dict[str, str], custom: dict[str, str] | None) -> dict[str, str]:
    """Merge custom headers with defaults, custom takes precedence.

    Args:
        default: Default headers dictionary
        custom: Custom headers to merge (can be None)

    Returns:
        Merged headers dictionary
    """
    if not custom:
        return default.copy()
    merged = default.copy()
    merged.update(custom)
    return merged
