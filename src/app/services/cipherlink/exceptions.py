"""
Cipherlink - Custom Exception Classes

Exception Hierarchy:
    CipherlinkException (base)
    |-- ConfigError      - Bootstrap could not resolve a required key / invalid plan
    |-- TransportError   - HTTP failure, non-2xx status, timeout
    |-- CryptoError      - Malformed base64, bad padding, corrupt ciphertext, non-UTF-8 plaintext
    |-- ProtocolError    - Server answered success=false or broke the envelope contract
    |-- SchemaError      - Decrypted JSON does not match the expected DTO
"""

from typing import Any

# Raw bodies are kept whole on the exception; only the rendered details are cut.
_SNIPPET_LENGTH = 200


def _snippet(text: str | None) -> str | None:
    if text is None:
        return None
    if len(text) > _SNIPPET_LENGTH:
        return text[:_SNIPPET_LENGTH] + "...(trunc)"
    return text


class CipherlinkException(Exception):
    """Base exception for all Cipherlink errors."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.url = url
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"url={self.url}")
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items() if v is not None)
            if details_str:
                parts.append(f"[{details_str}]")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "url": self.url,
            "details": self.details,
        }


class ConfigError(CipherlinkException):
    """Bootstrap failed or the bootstrap plan is invalid.

    Raised when a required key is still unresolved after every script was
    scanned, when no candidate origin yields a script, or when a pattern does
    not compile to a regex with exactly one capture group.
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        origins: list[str] | None = None,
    ) -> None:
        details = {
            "config_key": config_key,
            "origins": ", ".join(origins) if origins else None,
        }
        super().__init__(message, details=details)
        self.config_key = config_key
        self.origins = origins or []


class TransportError(CipherlinkException):
    """HTTP-level failure: DNS, connection refused, timeout, or non-2xx status."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
        is_timeout: bool = False,
        body: str | None = None,
    ) -> None:
        details = {
            "status_code": status_code,
            "error_code": error_code,
            "is_timeout": is_timeout or None,
        }
        super().__init__(message, url, details)
        self.status_code = status_code
        self.error_code = error_code
        self.is_timeout = is_timeout
        self.body = body


class CryptoError(CipherlinkException):
    """Envelope encryption or decryption failed."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
    ) -> None:
        details = {"operation": operation}
        super().__init__(message, details=details)
        self.operation = operation


class ProtocolError(CipherlinkException):
    """The server rejected the call or answered outside the envelope contract.

    Keeps the action path and the raw (undecrypted) response body so an operator
    can tell a signature/secret mismatch apart from a business rejection.
    """

    def __init__(
        self,
        message: str,
        action_path: str,
        raw_body: str | None = None,
        url: str | None = None,
    ) -> None:
        details = {
            "action_path": action_path,
            "raw_body": _snippet(raw_body),
        }
        super().__init__(message, url, details)
        self.action_path = action_path
        self.raw_body = raw_body


class SchemaError(CipherlinkException):
    """Decrypted response does not match the expected DTO shape."""

    def __init__(
        self,
        message: str,
        action_path: str | None = None,
        schema: str | None = None,
        raw_text: str | None = None,
    ) -> None:
        details = {
            "action_path": action_path,
            "schema": schema,
        }
        super().__init__(message, details=details)
        self.action_path = action_path
        self.schema = schema
        self.raw_text = raw_text
