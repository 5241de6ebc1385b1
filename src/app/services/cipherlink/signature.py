"""
Cipherlink - Signature Engine

Builds the time-boxed ``cpt_auth`` token appended to every API path:

    {path}{?|&}cpt_auth={timestamp}-{nonce}-0-{md5("{path}-{timestamp}-{nonce}-0-{salt}")}

The ``-0-`` segment is a fixed protocol marker. Timestamp and nonce are sampled
fresh on every call; nothing is cached between calls.
"""

import hashlib
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

AUTH_PARAM = "cpt_auth"
PROTOCOL_MARKER = "0"
API_PREFIX = "/api"


def api_path(name: str) -> str:
    """Expand a short action name into a full API path.

    ``"user/regUser"`` and ``"/user/regUser"`` both become ``"/api/user/regUser"``.
    """
    if not name.startswith("/"):
        name = "/" + name
    return API_PREFIX + name


def sign(path: str, timestamp: int, nonce: str, salt: str) -> str:
    """Return the hex MD5 signature of ``{path}-{timestamp}-{nonce}-0-{salt}``."""
    text = f"{path}-{timestamp}-{nonce}-{PROTOCOL_MARKER}-{salt}"
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def generate_nonce(template: str, rng: random.Random | None = None) -> str:
    """Fill a UUID-v4-like template.

    Each ``x`` becomes a random hex digit, each ``y`` a hex digit in {8, 9, a, b};
    every other character passes through unchanged.
    """
    rand = rng or random
    chars = []
    for c in template:
        n = rand.randrange(16)
        if c == "x":
            chars.append(f"{n:x}")
        elif c == "y":
            chars.append(f"{(n & 0x3) | 0x8:x}")
        else:
            chars.append(c)
    return "".join(chars)


@dataclass(frozen=True)
class SignedRequest:
    """One signing of one path. Never persisted."""

    path: str
    timestamp: int
    nonce: str
    signature: str

    @property
    def auth_token(self) -> str:
        return f"{self.timestamp}-{self.nonce}-{PROTOCOL_MARKER}-{self.signature}"

    @property
    def authenticated_path(self) -> str:
        separator = "&" if "?" in self.path else "?"
        return f"{self.path}{separator}{AUTH_PARAM}={self.auth_token}"


class RequestSigner:
    """Signs request paths with a nonce template and salt.

    Stateless apart from its immutable inputs, so one instance may be shared by
    any number of concurrent calls.
    """

    def __init__(
        self,
        nonce_template: str,
        salt: str,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ) -> None:
        self._nonce_template = nonce_template
        self._salt = salt
        self._clock = clock
        self._rng = rng

    def timestamp(self) -> int:
        """Current Unix time in whole seconds."""
        return int(self._clock())

    def sign_request(self, path: str) -> SignedRequest:
        timestamp = self.timestamp()
        nonce = generate_nonce(self._nonce_template, self._rng)
        signature = sign(path, timestamp, nonce, self._salt)
        logger.debug(f"Signed {path} at {timestamp}")
        return SignedRequest(path=path, timestamp=timestamp, nonce=nonce, signature=signature)

    def build_authenticated_path(self, path: str) -> str:
        return self.sign_request(path).authenticated_path
