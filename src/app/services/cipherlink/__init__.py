# ============================================
# CIPHERLINK - Signed, Encrypted Catalog API Client
# ============================================
#
# Talks to an undocumented catalog API the way its own H5 client does.
#
# Layers:
#   Bootstrap:  discover appId / key / nonce template / salt from the site's
#               script bundles (ConfigBootstrap, ConfigProvider)
#   Signature:  cpt_auth={ts}-{nonce}-0-{md5} on every path (RequestSigner)
#   Envelope:   AES-ECB/PKCS7 base64 bodies (TextEnvelopeCodec),
#               AES-CBC assets at rest (AssetEnvelopeCodec)
#   Client:     call(path, payload) -> decrypted DTO (ProtocolClient)
#   Actions:    register, tasks, catalog, purchase, content (CatalogActions)
# ============================================

from .actions import CatalogActions
from .bootstrap import ConfigBootstrap, ConfigProvider, bootstrap
from .client import ProtocolClient
from .config import BootstrapPlan, ConfigLoader, ProtocolConfig
from .envelope import AssetEnvelopeCodec, TextEnvelopeCodec

# Exceptions
from .exceptions import (
    CipherlinkException,
    ConfigError,
    CryptoError,
    ProtocolError,
    SchemaError,
    TransportError,
)
from .models import Book, Category, Chapter, Task, User
from .signature import RequestSigner, SignedRequest, api_path, generate_nonce, sign
from .transport import CurlTransport, Transport, TransportResponse

__all__ = [
    # Bootstrap
    "BootstrapPlan",
    "ConfigBootstrap",
    "ConfigLoader",
    "ConfigProvider",
    "ProtocolConfig",
    "bootstrap",
    # Signing and envelopes
    "RequestSigner",
    "SignedRequest",
    "api_path",
    "generate_nonce",
    "sign",
    "TextEnvelopeCodec",
    "AssetEnvelopeCodec",
    # Client
    "CurlTransport",
    "Transport",
    "TransportResponse",
    "ProtocolClient",
    "CatalogActions",
    # Entities
    "Book",
    "Category",
    "Chapter",
    "Task",
    "User",
    # Exceptions
    "CipherlinkException",
    "ConfigError",
    "TransportError",
    "CryptoError",
    "ProtocolError",
    "SchemaError",
]
