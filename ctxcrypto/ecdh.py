# ctxcrypto/ecdh.py
"""
Key agreement with derived Ed25519 keys.

Both sides map their Ed25519 public keys onto Curve25519 and multiply the
counterparty's point by their own derived scalar. The shared point q is
turned into a directional secret

    BLAKE2b-256(q | client_x | server_x)

where the caller acting as client puts its own Curve25519 key first.
session_keys() offers the libsodium key exchange (crypto_kx) over the same
keys: the shared point is hashed as BLAKE2b-512(q | client_pk | server_pk)
and split into a receive and a transmit key, the client's rx being the
server's tx and vice versa.
"""

from typing import NamedTuple

from nacl import bindings
from nacl.encoding import RawEncoder
from nacl.exceptions import CryptoError
from nacl.hash import blake2b


class SessionKeys(NamedTuple):
    rx: bytes
    tx: bytes


def to_curve25519_public(ed_public_key: bytes) -> bytes:
    """Birational map of an Ed25519 public key onto Curve25519."""
    if len(ed_public_key) != 32:
        raise ValueError(f"public key must be 32 bytes, got {len(ed_public_key)}")
    try:
        return bindings.crypto_sign_ed25519_pk_to_curve25519(bytes(ed_public_key))
    except CryptoError as e:
        raise ValueError("public key is not a valid Ed25519 point") from e


def shared_secret(scalar: bytes, their_ed_public_key: bytes) -> bytes:
    """Raw X25519 output of our scalar and the counterparty's mapped key."""
    their_x = to_curve25519_public(their_ed_public_key)
    try:
        return bindings.crypto_scalarmult(bytes(scalar), their_x)
    except CryptoError as e:
        raise ValueError("key agreement produced no shared secret") from e


def session_keys(
    scalar: bytes,
    our_ed_public_key: bytes,
    their_ed_public_key: bytes,
    am_client: bool,
) -> SessionKeys:
    our_x = to_curve25519_public(our_ed_public_key)
    their_x = to_curve25519_public(their_ed_public_key)

    if am_client:
        rx, tx = bindings.crypto_kx_client_session_keys(our_x, bytes(scalar), their_x)
    else:
        rx, tx = bindings.crypto_kx_server_session_keys(our_x, bytes(scalar), their_x)
    return SessionKeys(rx, tx)


def ecdh_secret(
    scalar: bytes,
    our_ed_public_key: bytes,
    their_ed_public_key: bytes,
    am_client: bool,
) -> bytes:
    """
    Directional 32-byte shared secret.

    A (client) and B (server) obtain the same value; swapping both roles
    yields the other, complementary secret.
    """
    our_x = to_curve25519_public(our_ed_public_key)
    their_x = to_curve25519_public(their_ed_public_key)
    q = shared_secret(scalar, their_ed_public_key)

    if am_client:
        transcript = q + our_x + their_x
    else:
        transcript = q + their_x + our_x
    return blake2b(transcript, digest_size=32, encoder=RawEncoder)
