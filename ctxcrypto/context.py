# ctxcrypto/context.py

from enum import IntEnum
from typing import Iterable, List, Union

from .bip32 import HARDENED_OFFSET, MAX_INDEX, harden
from .errors import InvalidHDPath, UnknownSigner

BIP44_PURPOSE = 44
MAX_ACCOUNT = HARDENED_OFFSET - 1


class KeyContext(IntEnum):
    """Semantic root of a key. Each context owns a distinct BIP44 subtree."""

    ADDRESS = 0
    IDENTITY = 1

    @property
    def coin_type(self) -> int:
        return _COIN_TYPES[self]

    @classmethod
    def parse(cls, value: Union[str, int, "KeyContext"]) -> "KeyContext":
        if isinstance(value, KeyContext):
            return value
        try:
            if isinstance(value, str):
                return cls[value.strip().upper()]
            return cls(value)
        except (KeyError, ValueError):
            raise UnknownSigner(f"unknown key context: {value!r}") from None


_COIN_TYPES = {
    KeyContext.ADDRESS: 283,
    KeyContext.IDENTITY: 0,
}


def _check_level(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= MAX_ACCOUNT:
        raise InvalidHDPath(f"{name} must be between 0 and {MAX_ACCOUNT}, got {value!r}")


def account_path(context: KeyContext, account: int) -> List[int]:
    """m/44'/coin'/account'/0, the wallet-level node above every key index."""
    context = KeyContext.parse(context)
    _check_level("account", account)
    return [harden(BIP44_PURPOSE), harden(context.coin_type), harden(account), 0]


def bip44_path(context: KeyContext, account: int, key_index: int) -> List[int]:
    """
    m/44'/283'/account'/0/key_index for addresses,
    m/44'/0'/account'/0/key_index for identities.
    """
    _check_level("key index", key_index)
    return account_path(context, account) + [key_index]


def parse_path(path: str) -> List[int]:
    """Parse "m/44'/283'/0'/0/0" into indices. ', h and H mark hardened levels."""
    parts = path.strip().split("/")
    if parts and parts[0] == "m":
        parts = parts[1:]
    if not parts or parts == [""]:
        raise InvalidHDPath(f"empty derivation path: {path!r}")

    out: List[int] = []
    for part in parts:
        hardened = part.endswith(("'", "h", "H"))
        digits = part.rstrip("'hH")
        if not (digits.isascii() and digits.isdigit()):
            raise InvalidHDPath(f"invalid path component {part!r} in {path!r}")
        index = int(digits)
        if hardened:
            if index >= HARDENED_OFFSET:
                raise InvalidHDPath(f"hardened component out of range: {part!r}")
            index = harden(index)
        elif index > MAX_INDEX:
            raise InvalidHDPath(f"path component out of range: {part!r}")
        out.append(index)
    return out


def format_path(path: Iterable[int]) -> str:
    parts = ["m"]
    for index in path:
        if index >= HARDENED_OFFSET:
            parts.append(f"{index - HARDENED_OFFSET}'")
        else:
            parts.append(str(index))
    return "/".join(parts)
