import json
from collections.abc import Callable
from typing import Any

import pytest

from src.app.services.cipherlink.config import BootstrapPlan, ConfigLoader, ProtocolConfig
from src.app.services.cipherlink.envelope import TextEnvelopeCodec
from src.app.services.cipherlink.exceptions import TransportError
from src.app.services.cipherlink.transport import TransportResponse

TEST_KEY = "0123456789abcdef"
TEST_NONCE_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"
FIXED_TIME = 1700000000.75


class FakeTransport:
    """In-memory Transport.

    ``pages`` maps URL -> body text (or an exception to raise); an unknown URL
    answers 404. ``reply`` is the POST response text, or a callable
    ``(url, headers, body) -> text``.
    """

    def __init__(
        self,
        pages: dict[str, Any] | None = None,
        reply: str | Callable[[str, dict[str, str], str], str] | None = None,
        status_code: int = 200,
    ) -> None:
        self.pages = dict(pages or {})
        self.reply = reply
        self.status_code = status_code
        self.get_calls: list[str] = []
        self.posts: list[tuple[str, dict[str, str], str]] = []

    async def get_text(self, url: str) -> str:
        self.get_calls.append(url)
        value = self.pages.get(url)
        if value is None:
            raise TransportError("HTTP 404", url=url, status_code=404, error_code="http_status")
        if isinstance(value, Exception):
            raise value
        return value

    async def post(self, url: str, headers: dict[str, str], body: str) -> TransportResponse:
        self.posts.append((url, headers, body))
        text = self.reply(url, headers, body) if callable(self.reply) else self.reply
        return TransportResponse(url=url, status_code=self.status_code, text=text or "")


@pytest.fixture(autouse=True)
def clear_plan_cache():
    """Reset the cached default bootstrap plan between tests."""
    ConfigLoader.clear_cache()
    yield
    ConfigLoader.clear_cache()


@pytest.fixture
def protocol_values() -> dict[str, str]:
    return {
        "origin": "https://api.example.com/",
        "appId": "app42",
        "encryptionKey": TEST_KEY,
        "nonceTemplate": TEST_NONCE_TEMPLATE,
        "signatureSalt": "secret",
    }


@pytest.fixture
def protocol_config(protocol_values: dict[str, str]) -> ProtocolConfig:
    return ProtocolConfig.from_mapping(protocol_values)


@pytest.fixture
def codec() -> TextEnvelopeCodec:
    return TextEnvelopeCodec(TEST_KEY)


@pytest.fixture
def fixed_clock() -> Callable[[], float]:
    return lambda: FIXED_TIME


@pytest.fixture
def success_body(codec: TextEnvelopeCodec) -> Callable[[Any], str]:
    """Build a ``success=true`` envelope whose result encrypts the given JSON value."""

    def _build(result: Any) -> str:
        plaintext = result if isinstance(result, str) else json.dumps(result)
        return json.dumps({"success": True, "result": codec.encrypt(plaintext)})

    return _build


@pytest.fixture
def sample_plan() -> BootstrapPlan:
    return ConfigLoader.from_dict(
        {
            "_comment": "test plan",
            "origins": ["https://h5.example.com/", "https://m.example.com/"],
            "patterns": {
                "appId": r"appid:\"(\w+)\"",
                "encryptionKey": r"aesKey:\"(\w{16})\"",
                "nonceTemplate": r"nonce:\"([xy4-]+)\"",
                "signatureSalt": r"salt:\"(\w+)\"",
            },
            "static": {"origin": "https://api.example.com"},
        }
    )


@pytest.fixture
def make_transport() -> type[FakeTransport]:
    """The FakeTransport class, for tests that build several transports."""
    return FakeTransport
