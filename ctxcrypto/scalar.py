# ctxcrypto/scalar.py

import hashlib
import hmac

from nacl import bindings

# ---------- Constants ----------

# Order of the Ed25519 prime-order subgroup
ED25519_ORDER = 2 ** 252 + 27742317777372353535851937790883648493

INT256_MASK = (1 << 256) - 1


# ---------- Hashes ----------

def hmac_sha512(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha512).digest()


def sha512(data: bytes) -> bytes:
    return hashlib.sha512(data).digest()


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


# ---------- Little-endian integers ----------

def le_to_int(data: bytes) -> int:
    return int.from_bytes(data, "little")


def int_to_le(value: int, length: int = 32) -> bytes:
    return value.to_bytes(length, "little")


# ---------- Scalars ----------

def clamp_root(kl: bytes) -> bytes:
    """
    Clamp the left half of a root key:
    - the lowest 3 bits of the first byte are cleared
    - the highest bit of the last byte is cleared
    - the second highest bit of the last byte is set
    """
    if len(kl) != 32:
        raise ValueError("scalar must be 32 bytes")
    out = bytearray(kl)
    out[0] &= 0b11111000
    out[31] &= 0b01111111
    out[31] |= 0b01000000
    return bytes(out)


def trunc_256_minus_g_bits(data: bytes, g: int) -> bytes:
    """
    Discard g bits from the tail of a 32-byte little-endian value.

    Whole bytes are zeroed walking back from the last one, 8 bits at a time.
    A remainder r < 8 then clears the r lowest bits of the next byte, so
    g = 9 zeroes byte 31 and bit 0 of byte 30 (bit 240 of the value).
    Byte-aligned g (32 for KHOVRATOVICH) is a plain 256 - g bit truncation.
    """
    if len(data) != 32:
        raise ValueError("value must be 32 bytes")
    if g < 0 or g > 256:
        raise ValueError(f"g must be between 0 and 256, got {g}")

    out = bytearray(data)
    remaining = g
    i = len(out) - 1
    while i >= 0 and remaining > 0:
        if remaining >= 8:
            out[i] = 0
            remaining -= 8
        else:
            out[i] &= (0xFF << remaining) & 0xFF
            remaining = 0
        i -= 1
    return bytes(out)


def scalar_reduce(scalar: bytes) -> bytes:
    """Reduce a 32- or 64-byte little-endian value modulo the group order."""
    return bindings.crypto_core_ed25519_scalar_reduce(scalar.ljust(64, b"\x00"))


def scalar_add(x: bytes, y: bytes) -> bytes:
    return bindings.crypto_core_ed25519_scalar_add(x, y)


def scalar_mul(x: bytes, y: bytes) -> bytes:
    return bindings.crypto_core_ed25519_scalar_mul(x, y)


def mul8(z: bytes) -> bytes:
    """8 * z mod L, for a 32-byte little-endian z."""
    return scalar_mul(z, int_to_le(8))


# ---------- Points ----------

def public_key_from_scalar(scalar: bytes) -> bytes:
    """
    Multiply the base point by a raw (already clamped or derived) scalar.

    The scalar is reduced first so that no bit of it is dropped by the
    noclamp multiplication.
    """
    if len(scalar) != 32:
        raise ValueError("scalar must be 32 bytes")
    return bindings.crypto_scalarmult_ed25519_base_noclamp(scalar_reduce(scalar))


def base_mul(scalar: bytes) -> bytes:
    return bindings.crypto_scalarmult_ed25519_base_noclamp(scalar)


def add_points(p: bytes, q: bytes) -> bytes:
    return bindings.crypto_core_ed25519_add(p, q)
