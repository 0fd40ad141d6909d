# ctxcrypto/__init__.py

from .api import ContextualCryptoApi
from .bip32 import (
    DerivationScheme,
    PrivateNode,
    PublicNode,
    derive_child_private,
    derive_child_public,
    derive_path,
    from_seed,
    harden,
)
from .context import (
    KeyContext,
    bip44_path,
    format_path,
    parse_path,
)
from .ecdh import SessionKeys
from .encoding import (
    RESERVED_TAGS,
    Encoding,
    SignMetadata,
    decode_payload,
)
from .errors import (
    ContextualCryptoError,
    DecodingError,
    InvalidHDPath,
    InvalidSeed,
    PrivateKeyRequired,
    ReservedTagPrefix,
    SchemaValidationFailed,
    UnknownSigner,
)
from .signing import verify_with_public_key

__all__ = [
    "ContextualCryptoApi",
    "DerivationScheme",
    "PrivateNode",
    "PublicNode",
    "derive_child_private",
    "derive_child_public",
    "derive_path",
    "from_seed",
    "harden",
    "KeyContext",
    "bip44_path",
    "format_path",
    "parse_path",
    "SessionKeys",
    "RESERVED_TAGS",
    "Encoding",
    "SignMetadata",
    "decode_payload",
    "ContextualCryptoError",
    "DecodingError",
    "InvalidHDPath",
    "InvalidSeed",
    "PrivateKeyRequired",
    "ReservedTagPrefix",
    "SchemaValidationFailed",
    "UnknownSigner",
    "verify_with_public_key",
]
