"""
Cipherlink - Protocol Configuration

The resolved runtime secrets every signed call needs. Produced once by the
bootstrap (or by an explicit refresh) and shared read-only afterwards.
"""

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import ConfigError
from ..utils import mask_secret

REQUIRED_KEYS = ("origin", "appId", "encryptionKey", "nonceTemplate", "signatureSalt")


class ProtocolConfig(BaseModel):
    """Immutable set of named protocol secrets.

    Field aliases are the logical key names used by bootstrap plans
    (``appId``, ``encryptionKey``...). Keys beyond the required five land in
    ``extras``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    origin: str
    app_id: str = Field(alias="appId")
    encryption_key: str = Field(alias="encryptionKey", repr=False)
    nonce_template: str = Field(alias="nonceTemplate")
    signature_salt: str = Field(alias="signatureSalt", repr=False)
    extras: Mapping[str, str] = Field(default_factory=dict, repr=False, validate_default=True)

    @field_validator("origin")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("extras")
    @classmethod
    def freeze_extras(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    def __hash__(self) -> int:
        return hash(
            (
                self.origin,
                self.app_id,
                self.encryption_key,
                self.nonce_template,
                self.signature_salt,
                frozenset(self.extras.items()),
            )
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ProtocolConfig":
        """Build from a flat ``{logicalKey: value}`` mapping.

        Raises:
            ConfigError: naming the first required key that is missing
        """
        for key in REQUIRED_KEYS:
            if not values.get(key):
                raise ConfigError(f"Missing required protocol key: {key}", config_key=key)

        extras = {k: v for k, v in values.items() if k not in REQUIRED_KEYS}
        return cls(
            origin=values["origin"],
            appId=values["appId"],
            encryptionKey=values["encryptionKey"],
            nonceTemplate=values["nonceTemplate"],
            signatureSalt=values["signatureSalt"],
            extras=extras,
        )

    def get(self, key: str, default: str | None = None) -> str | None:
        """Look up any key by its logical name, required or extra."""
        by_alias = {
            "origin": self.origin,
            "appId": self.app_id,
            "encryptionKey": self.encryption_key,
            "nonceTemplate": self.nonce_template,
            "signatureSalt": self.signature_salt,
        }
        if key in by_alias:
            return by_alias[key]
        return self.extras.get(key, default)

    def masked(self) -> dict[str, str]:
        """Log-safe view with secrets masked."""
        view = {
            "origin": self.origin,
            "appId": self.app_id,
            "encryptionKey": mask_secret(self.encryption_key),
            "nonceTemplate": self.nonce_template,
            "signatureSalt": mask_secret(self.signature_salt),
        }
        view.update({k: mask_secret(v) for k, v in self.extras.items()})
        return view
