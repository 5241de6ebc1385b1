"""
Cipherlink - Protocol Client

One call contract for every remote action:

    1. Serialize the request object to JSON and encrypt it (AES-ECB envelope).
    2. Sign the action path with a fresh timestamp and nonce.
    3. POST {"data": <ciphertext>} to {origin}{path}?cpt_auth=... with the Appid header.
    4. Require a boolean ``success``; decrypt ``result`` and validate it against
       the caller's DTO.

The client holds only immutable state, so one instance serves any number of
concurrent calls. Nothing is retried.
"""

import json
import logging
import random
import time
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from .config import ProtocolConfig
from .envelope import TextEnvelopeCodec
from .exceptions import ProtocolError, SchemaError
from .schemas import EnvelopeResponse
from .signature import RequestSigner
from .transport import Transport
from .utils import build_api_headers, sanitize_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


def dump_json(obj: Any) -> str:
    """Compact JSON, the way the official client serializes request bodies."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


class ProtocolClient:
    """Signed, envelope-encrypted calls against one ProtocolConfig."""

    def __init__(
        self,
        config: ProtocolConfig,
        transport: Transport,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._signer = RequestSigner(config.nonce_template, config.signature_salt, clock=clock, rng=rng)
        self._codec = TextEnvelopeCodec(config.encryption_key)

    @property
    def config(self) -> ProtocolConfig:
        return self._config

    def timestamp_str(self) -> str:
        """Current Unix seconds as the string every payload carries in ``timeStamp``."""
        return str(self._signer.timestamp())

    def build_url(self, action_path: str) -> str:
        return f"{self._config.origin}{self._signer.build_authenticated_path(action_path)}"

    def encode_body(self, payload: Any) -> str:
        return dump_json({"data": self._codec.encrypt(dump_json(payload))})

    def parse_envelope(self, action_path: str, raw_body: str, url: str | None = None) -> str:
        """Validate the outer envelope and return the ciphertext ``result``.

        Raises:
            ProtocolError: body is not a JSON object, ``success`` is missing,
                not a boolean or false, or a successful answer has no result
        """
        try:
            data = json.loads(raw_body)
        except json.JSONDecodeError as e:
            raise ProtocolError("Response is not JSON", action_path, raw_body, url) from e

        if not isinstance(data, dict):
            raise ProtocolError("Response is not a JSON object", action_path, raw_body, url)

        try:
            envelope = EnvelopeResponse.model_validate(data)
        except ValidationError as e:
            message = f"Malformed response envelope: {e.error_count()} errors"
            raise ProtocolError(message, action_path, raw_body, url) from e

        if not envelope.success:
            raise ProtocolError("Server reported success=false", action_path, raw_body, url)
        if envelope.result is None:
            raise ProtocolError("Successful response carries no result", action_path, raw_body, url)
        return envelope.result

    def decode_result(
        self,
        action_path: str,
        ciphertext: str,
        response_model: type[T] | None = None,
        parse_json: bool = True,
    ) -> Any:
        """Decrypt a ``result`` field and validate it against ``response_model``.

        With ``parse_json=False`` the decrypted text is returned as is.
        """
        text = self._codec.decrypt(ciphertext)
        if not parse_json:
            return text

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaError("Decrypted result is not JSON", action_path=action_path, raw_text=text) from e

        if response_model is None:
            return data

        schema = getattr(response_model, "__name__", str(response_model))
        try:
            return TypeAdapter(response_model).validate_python(data)
        except ValidationError as e:
            raise SchemaError(
                f"Decrypted result does not match {schema}: {e.error_count()} errors",
                action_path=action_path,
                schema=schema,
                raw_text=text,
            ) from e

    async def call(
        self,
        action_path: str,
        payload: Any,
        response_model: type[T] | None = None,
        parse_json: bool = True,
    ) -> Any:
        """Send one action and return its decrypted result.

        Args:
            action_path: Full API path, e.g. ``/api/user/regUser``
            payload: JSON-serializable request object
            response_model: DTO type to validate the result against; the raw
                decoded JSON is returned when omitted
            parse_json: return the decrypted text without JSON decoding, for
                actions whose result is only an acknowledgement

        Raises:
            TransportError: HTTP failure or non-2xx status
            ProtocolError: envelope contract broken or success=false
            CryptoError: ``result`` could not be decrypted
            SchemaError: decrypted JSON does not match ``response_model``
        """
        url = self.build_url(action_path)
        body = self.encode_body(payload)
        headers = build_api_headers(self._config.app_id)

        logger.debug(f"Calling {action_path} -> {sanitize_url(url)}")
        response = await self._transport.post(url, headers, body)

        ciphertext = self.parse_envelope(action_path, response.text, sanitize_url(url))
        return self.decode_result(action_path, ciphertext, response_model, parse_json)
