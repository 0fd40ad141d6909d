import hashlib
import json
import logging
import sys
import unicodedata
from pathlib import Path

import pytest

# Add repo root so we can import ctxcrypto.*
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from ctxcrypto.api import ContextualCryptoApi  # noqa: E402

VECTORS_PATH = ROOT / "tests" / "vectors" / "contextual_crypto.v1.json"
SCHEMAS_DIR = ROOT / "tests" / "schemas"


def load_vectors():
    with VECTORS_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """BIP39 seed: PBKDF2-HMAC-SHA512 over the NFKD mnemonic, 2048 rounds."""
    return hashlib.pbkdf2_hmac(
        "sha512",
        unicodedata.normalize("NFKD", mnemonic).encode("utf-8"),
        unicodedata.normalize("NFKD", "mnemonic" + passphrase).encode("utf-8"),
        2048,
    )


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    # the CLI binds its handler to the stderr of the test that ran it
    yield
    logging.getLogger("ctxcrypto").handlers.clear()


@pytest.fixture(scope="session")
def vectors():
    return load_vectors()


@pytest.fixture(scope="session")
def seed(vectors):
    return mnemonic_to_seed(vectors["root"]["mnemonic"])


@pytest.fixture
def api(seed):
    return ContextualCryptoApi(seed)


@pytest.fixture(scope="session")
def alice_seed(vectors):
    return mnemonic_to_seed(vectors["ecdh"]["alice_mnemonic"])


@pytest.fixture(scope="session")
def bob_seed(vectors):
    return mnemonic_to_seed(vectors["ecdh"]["bob_mnemonic"])


@pytest.fixture(scope="session")
def auth_schema():
    with (SCHEMAS_DIR / "auth.request.json").open("r", encoding="utf-8") as f:
        return json.load(f)
