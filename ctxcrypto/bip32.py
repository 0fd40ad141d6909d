# ctxcrypto/bip32.py
"""
BIP32-Ed25519 hierarchical deterministic keys over a non-linear keyspace.

Reference: "BIP32-Ed25519 Hierarchical Deterministic Keys over a Non-linear
Keyspace", Dmitry Khovratovich and Jason Law.

A private node is the 96-byte extended key

    kL (32) | kR (32) | chain code (32)

where kL is the signing scalar and kR the extension that feeds nonce
generation. A public node is the 64-byte pair

    A (32) | chain code (32)

with A = kL * B. Soft children can be derived from either kind of node and
agree on the public key; hardened children need kL and kR.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Union

from .errors import InvalidHDPath, InvalidSeed, PrivateKeyRequired
from .scalar import (
    ED25519_ORDER,
    INT256_MASK,
    add_points,
    base_mul,
    clamp_root,
    hmac_sha512,
    int_to_le,
    le_to_int,
    mul8,
    public_key_from_scalar,
    sha256,
    sha512,
    trunc_256_minus_g_bits,
)

logger = logging.getLogger(__name__)

HARDENED_OFFSET = 0x80000000
MAX_INDEX = 0xFFFFFFFF


class DerivationScheme(IntEnum):
    """
    How many bits of ZL are discarded (see trunc_256_minus_g_bits) before
    the child scalar kL' = kL + 8 * trunc(ZL) is computed.

    KHOVRATOVICH keeps the low 28 bytes, the truncation of the paper.
    PEIKERT zeroes byte 31 and bit 240 only, so ZL stays below 2^248 and a
    five-level BIP44 path keeps kL in [2^254, 2^255) with its low 3 bits
    clear.
    """

    KHOVRATOVICH = 32
    PEIKERT = 9

    @classmethod
    def parse(cls, name: str) -> "DerivationScheme":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown derivation scheme: {name!r}") from None


def harden(index: int) -> int:
    return HARDENED_OFFSET + index


def is_hardened(index: int) -> bool:
    return index >= HARDENED_OFFSET


def _check_index(index: int) -> None:
    if not isinstance(index, int) or index < 0 or index > MAX_INDEX:
        raise InvalidHDPath(f"derivation index out of range: {index!r}")


# ---------- Nodes ----------

@dataclass(frozen=True)
class PublicNode:
    public_key: bytes
    chain_code: bytes

    def __post_init__(self):
        if len(self.public_key) != 32 or len(self.chain_code) != 32:
            raise ValueError("public node must be 32-byte key + 32-byte chain code")

    def to_bytes(self) -> bytes:
        return self.public_key + self.chain_code

    @classmethod
    def from_bytes(cls, data: bytes) -> "PublicNode":
        if len(data) != 64:
            raise ValueError(f"expected 64-byte public node, got {len(data)} bytes")
        return cls(bytes(data[:32]), bytes(data[32:]))

    def derive_child(self, index: int, scheme: DerivationScheme = DerivationScheme.PEIKERT) -> "PublicNode":
        return derive_child_public(self, index, scheme)


@dataclass(frozen=True)
class PrivateNode:
    scalar: bytes
    extension: bytes
    chain_code: bytes

    def __post_init__(self):
        if len(self.scalar) != 32 or len(self.extension) != 32 or len(self.chain_code) != 32:
            raise ValueError("private node must be three 32-byte fields")

    def __repr__(self) -> str:
        return f"PrivateNode(public_key={self.public_key.hex()})"

    def to_bytes(self) -> bytes:
        return self.scalar + self.extension + self.chain_code

    @classmethod
    def from_bytes(cls, data: bytes) -> "PrivateNode":
        if len(data) != 96:
            raise ValueError(f"expected 96-byte extended key, got {len(data)} bytes")
        return cls(bytes(data[:32]), bytes(data[32:64]), bytes(data[64:]))

    @property
    def public_key(self) -> bytes:
        return public_key_from_scalar(self.scalar)

    def public_node(self) -> PublicNode:
        return PublicNode(self.public_key, self.chain_code)

    def derive_child(self, index: int, scheme: DerivationScheme = DerivationScheme.PEIKERT) -> "PrivateNode":
        return derive_child_private(self, index, scheme)


Node = Union[PrivateNode, PublicNode]


# ---------- Root ----------

def from_seed(seed: bytes) -> PrivateNode:
    """
    Expand a seed into the root extended key.

    k = SHA-512(seed); while the third highest bit of kL is set,
    k = HMAC-SHA512(key=kL, data=kR). kL is then clamped and the chain code
    is SHA-256(0x01 | seed).
    """
    if not seed:
        raise InvalidSeed("seed must not be empty")

    k = sha512(seed)
    kl, kr = k[:32], k[32:]
    while kl[31] & 0b00100000:
        k = hmac_sha512(kl, kr)
        kl, kr = k[:32], k[32:]

    chain_code = sha256(b"\x01" + seed)
    return PrivateNode(clamp_root(kl), kr, chain_code)


# ---------- Child derivation ----------

def _child_scalar(kl: bytes, zl: bytes, scheme: DerivationScheme) -> bytes:
    child = le_to_int(kl) + 8 * le_to_int(trunc_256_minus_g_bits(zl, int(scheme)))
    if child.bit_length() > 256:
        raise InvalidHDPath("unusable path: overflow while computing child scalar")
    if child % ED25519_ORDER == 0:
        raise InvalidHDPath("unusable path: child scalar is zero")
    return int_to_le(child)


def derive_child_private(
    node: PrivateNode,
    index: int,
    scheme: DerivationScheme = DerivationScheme.PEIKERT,
) -> PrivateNode:
    _check_index(index)
    index_bytes = struct.pack("<I", index)

    if is_hardened(index):
        data = node.scalar + node.extension + index_bytes
        z = hmac_sha512(node.chain_code, b"\x00" + data)
        chain_code = hmac_sha512(node.chain_code, b"\x01" + data)[32:]
    else:
        data = node.public_key + index_bytes
        z = hmac_sha512(node.chain_code, b"\x02" + data)
        chain_code = hmac_sha512(node.chain_code, b"\x03" + data)[32:]

    scalar = _child_scalar(node.scalar, z[:32], scheme)
    extension = int_to_le((le_to_int(node.extension) + le_to_int(z[32:])) & INT256_MASK)
    return PrivateNode(scalar, extension, chain_code)


def derive_child_public(
    node: PublicNode,
    index: int,
    scheme: DerivationScheme = DerivationScheme.PEIKERT,
) -> PublicNode:
    _check_index(index)
    if is_hardened(index):
        raise PrivateKeyRequired(f"cannot derive hardened index {index} from a public node")

    data = node.public_key + struct.pack("<I", index)
    z = hmac_sha512(node.chain_code, b"\x02" + data)
    chain_code = hmac_sha512(node.chain_code, b"\x03" + data)[32:]

    # A' = A + (8 * trunc(ZL)) * B
    tweak = base_mul(mul8(trunc_256_minus_g_bits(z[:32], int(scheme))))
    return PublicNode(add_points(tweak, node.public_key), chain_code)


def derive_path(
    node: Node,
    path: Iterable[int],
    scheme: DerivationScheme = DerivationScheme.PEIKERT,
) -> Node:
    """Fold child derivation over every index of the path."""
    scheme = DerivationScheme(scheme)
    path = list(path)
    for index in path:
        node = node.derive_child(index, scheme)
    logger.debug("derived %s node at depth %d (%s)", type(node).__name__, len(path), scheme.name)
    return node
