# ctxcrypto/signing.py

from nacl import signing
from nacl.exceptions import BadSignatureError

from .bip32 import PrivateNode
from .scalar import base_mul, scalar_add, scalar_mul, scalar_reduce, sha512


def raw_sign(node: PrivateNode, message: bytes) -> bytes:
    """
    Ed25519 signature with an extended (already expanded) private key.

    Steps:
    - A = kL * B
    - r = SHA-512(kR | M) mod L, R = r * B
    - h = SHA-512(R | A | M) mod L
    - S = (r + h * kL) mod L

    Returns R | S (64 bytes). The result verifies with any standard
    Ed25519 verifier against A.
    """
    message = bytes(message)
    public_key = node.public_key

    r = scalar_reduce(sha512(node.extension + message))
    big_r = base_mul(r)
    h = scalar_reduce(sha512(big_r + public_key + message))
    s = scalar_add(r, scalar_mul(h, scalar_reduce(node.scalar)))
    return big_r + s


def verify_with_public_key(signature: bytes, message: bytes, public_key: bytes) -> bool:
    """
    Verify an Ed25519 signature against a raw 32-byte public key.

    Returns:
        True if valid, False otherwise. Wrong-length inputs raise ValueError.
    """
    if len(signature) != 64:
        raise ValueError(f"signature must be 64 bytes, got {len(signature)}")
    if len(public_key) != 32:
        raise ValueError(f"public key must be 32 bytes, got {len(public_key)}")

    try:
        vk = signing.VerifyKey(bytes(public_key))
        vk.verify(bytes(message), bytes(signature))
    except BadSignatureError:
        return False

    return True
