# ctxcrypto/api.py
"""
Contextual key service: one seed, many purpose-scoped keys.

ContextualCryptoApi holds the root extended key of a seed and derives the key
for (context, account, key index) on every call. Nothing is cached and the
root is never mutated, so one instance can be shared between threads.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from .bip32 import DerivationScheme, PrivateNode, PublicNode, derive_path, from_seed
from .context import KeyContext, account_path, bip44_path, format_path
from .ecdh import SessionKeys, ecdh_secret, session_keys
from .encoding import SignMetadata, validate_data
from .signing import raw_sign, verify_with_public_key

logger = logging.getLogger(__name__)


class ContextualCryptoApi:
    def __init__(self, seed: bytes, default_scheme: DerivationScheme = DerivationScheme.PEIKERT):
        self._root = from_seed(bytes(seed))
        self.default_scheme = DerivationScheme(default_scheme)

    @classmethod
    def from_root_key(
        cls,
        root_key: Union[bytes, PrivateNode],
        default_scheme: DerivationScheme = DerivationScheme.PEIKERT,
    ) -> "ContextualCryptoApi":
        """Build a service around an existing 96-byte root extended key."""
        if not isinstance(root_key, PrivateNode):
            root_key = PrivateNode.from_bytes(root_key)
        api = cls.__new__(cls)
        api._root = root_key
        api.default_scheme = DerivationScheme(default_scheme)
        return api

    @property
    def root_key(self) -> PrivateNode:
        return self._root

    def _scheme(self, scheme: Optional[DerivationScheme]) -> DerivationScheme:
        return self.default_scheme if scheme is None else DerivationScheme(scheme)

    # ---------- Derivation ----------

    def derive_key(
        self,
        root_key: PrivateNode,
        path: Iterable[int],
        derive_private: bool = True,
        scheme: Optional[DerivationScheme] = None,
    ) -> Union[PrivateNode, PublicNode]:
        """
        Derive the node at `path` below `root_key`.

        Every level is derived privately; when derive_private is False the
        final node is returned as its public projection (public key and
        chain code), ready to hand to a watch-only party.

        derive_private=False is the public-only mode: the caller gets a
        PublicNode and no secret material leaves this method.
        """
        path = list(path)
        node = derive_path(root_key, path, self._scheme(scheme))
        logger.debug("derived key at %s", format_path(path))
        if derive_private:
            return node
        return node.public_node()

    def _private_key(
        self,
        context: KeyContext,
        account: int,
        key_index: int,
        scheme: Optional[DerivationScheme],
    ) -> PrivateNode:
        path = bip44_path(KeyContext.parse(context), account, key_index)
        return self.derive_key(self._root, path, True, scheme)

    def key_gen(
        self,
        context: KeyContext,
        account: int,
        key_index: int,
        scheme: Optional[DerivationScheme] = None,
    ) -> bytes:
        """32-byte public key for (context, account, key_index)."""
        path = bip44_path(KeyContext.parse(context), account, key_index)
        return self.derive_key(self._root, path, False, scheme).public_key

    def public_node(
        self,
        context: KeyContext,
        account: int,
        scheme: Optional[DerivationScheme] = None,
    ) -> PublicNode:
        """Wallet-level public node m/44'/coin'/account'/0 for watch-only key derivation."""
        return self.derive_key(self._root, account_path(KeyContext.parse(context), account), False, scheme)

    # ---------- Signing ----------

    def sign_data(
        self,
        context: KeyContext,
        account: int,
        key_index: int,
        payload: bytes,
        metadata: SignMetadata,
        scheme: Optional[DerivationScheme] = None,
    ) -> bytes:
        """
        Sign arbitrary data after decoding it and checking it against the
        metadata schema. Payloads carrying a reserved protocol tag are
        refused whatever the schema says. The signature covers the decoded
        message, not the encoded payload.
        """
        decoded = validate_data(payload, metadata)
        node = self._private_key(context, account, key_index, scheme)
        return raw_sign(node, decoded.message)

    def sign_transaction(
        self,
        context: KeyContext,
        account: int,
        key_index: int,
        prefix_encoded_tx: bytes,
        scheme: Optional[DerivationScheme] = None,
    ) -> bytes:
        """Sign an already tagged ("TX" | msgpack) transaction as given."""
        node = self._private_key(context, account, key_index, scheme)
        return raw_sign(node, prefix_encoded_tx)

    @staticmethod
    def verify_with_public_key(signature: bytes, message: bytes, public_key: bytes) -> bool:
        return verify_with_public_key(signature, message, public_key)

    # ---------- Key agreement ----------

    def session_keys(
        self,
        context: KeyContext,
        account: int,
        key_index: int,
        other_party_pub: bytes,
        am_client: bool,
        scheme: Optional[DerivationScheme] = None,
    ) -> SessionKeys:
        node = self._private_key(context, account, key_index, scheme)
        return session_keys(node.scalar, node.public_key, other_party_pub, am_client)

    def ecdh(
        self,
        context: KeyContext,
        account: int,
        key_index: int,
        other_party_pub: bytes,
        am_client: bool,
        scheme: Optional[DerivationScheme] = None,
    ) -> bytes:
        """
        32-byte shared secret with the owner of other_party_pub.

        Both parties must pick opposite roles: A as client and B as server
        agree on one secret, A as server and B as client on another.
        """
        node = self._private_key(context, account, key_index, scheme)
        return ecdh_secret(node.scalar, node.public_key, other_party_pub, am_client)
