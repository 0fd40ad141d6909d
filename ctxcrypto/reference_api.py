"""
Stable reference API for contextual key derivation test vectors.

This wraps the service and derivation engine into a minimal, hex-friendly
surface that the vector generator and tests can depend on.
"""

from typing import Any, Dict

from ctxcrypto.api import ContextualCryptoApi
from ctxcrypto.bip32 import DerivationScheme, PublicNode, from_seed
from ctxcrypto.context import KeyContext, bip44_path, format_path, parse_path


def seed_to_root_key(seed: bytes) -> bytes:
    """96-byte root extended key kL | kR | chain code."""
    return from_seed(seed).to_bytes()


def key_gen(seed: bytes, context: str, account: int, index: int, scheme: str = "peikert") -> bytes:
    api = ContextualCryptoApi(seed, DerivationScheme.parse(scheme))
    return api.key_gen(KeyContext.parse(context), account, index)


def derive_public_child(ext_pub: bytes, index: int, scheme: str = "peikert") -> bytes:
    """Soft-derive from a 64-byte public node; returns the child's 64-byte public node."""
    node = PublicNode.from_bytes(ext_pub)
    return node.derive_child(index, DerivationScheme.parse(scheme)).to_bytes()


def derive_node(seed: bytes, path: str, private: bool = True, scheme: str = "peikert") -> bytes:
    """Extended key at a textual path such as "m/44'/283'/0'/0"."""
    api = ContextualCryptoApi(seed)
    node = api.derive_key(api.root_key, parse_path(path), private, DerivationScheme.parse(scheme))
    return node.to_bytes()


def key_vector(seed: bytes, context: str, account: int, index: int, scheme: str = "peikert") -> Dict[str, Any]:
    path = format_path(bip44_path(KeyContext.parse(context), account, index))
    return {
        "context": context,
        "account": account,
        "index": index,
        "scheme": scheme,
        "path": path,
        "pk_hex": key_gen(seed, context, account, index, scheme).hex(),
    }
