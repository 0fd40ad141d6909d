#!/usr/bin/env python3
import hashlib
import json
import unicodedata
from pathlib import Path
from typing import Any, Dict
import sys

# Add repo root so Python can import ctxcrypto.*
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Project imports: use the stable reference API
from ctxcrypto.reference_api import (
    seed_to_root_key,
    key_gen,
    key_vector,
)

VECTORS_PATH = ROOT / "tests" / "vectors" / "contextual_crypto.v1.json"


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    # BIP39, kept here because mnemonics are not part of the library
    return hashlib.pbkdf2_hmac(
        "sha512",
        unicodedata.normalize("NFKD", mnemonic).encode("utf-8"),
        unicodedata.normalize("NFKD", "mnemonic" + passphrase).encode("utf-8"),
        2048,
    )


def load_vectors() -> Dict[str, Any]:
    with VECTORS_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def save_vectors(data: Dict[str, Any]) -> None:
    # Pretty-print and keep key order stable
    with VECTORS_PATH.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=False)
        f.write("\n")


def populate_root(data: Dict[str, Any]) -> bytes:
    root = data["root"]
    seed = mnemonic_to_seed(root["mnemonic"])
    root["root_hex"] = seed_to_root_key(seed).hex()
    return seed


def populate_keys(data: Dict[str, Any], seed: bytes) -> None:
    data["keys"] = [
        key_vector(seed, k["context"], k["account"], k["index"], k["scheme"])
        for k in data.get("keys", [])
    ]


def populate_transactions(data: Dict[str, Any], seed: bytes) -> None:
    for tx in data.get("transactions", []):
        pk = key_gen(seed, tx["context"], tx["account"], tx["index"], tx["scheme"])
        tx["sender_pk_hex"] = pk.hex()


def main() -> None:
    if not VECTORS_PATH.exists():
        raise SystemExit(f"Vector file not found: {VECTORS_PATH}")

    data = load_vectors()

    seed = populate_root(data)
    populate_keys(data, seed)
    populate_transactions(data, seed)

    save_vectors(data)
    print(f"Updated vectors written to {VECTORS_PATH}")


if __name__ == "__main__":
    main()
