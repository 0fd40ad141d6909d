import hashlib

import pytest
from nacl.secret import SecretBox

from ctxcrypto.api import ContextualCryptoApi
from ctxcrypto.bip32 import derive_path
from ctxcrypto.context import KeyContext, bip44_path
from ctxcrypto.ecdh import shared_secret, to_curve25519_public

IDENTITY = KeyContext.IDENTITY


@pytest.fixture
def alice(alice_seed):
    return ContextualCryptoApi(alice_seed)


@pytest.fixture
def bob(bob_seed):
    return ContextualCryptoApi(bob_seed)


def test_ecdh_agreement(alice, bob):
    alice_key = alice.key_gen(IDENTITY, 0, 0)
    bob_key = bob.key_gen(IDENTITY, 0, 0)
    assert alice_key != bob_key

    alice_secret = alice.ecdh(IDENTITY, 0, 0, bob_key, True)
    bob_secret = bob.ecdh(IDENTITY, 0, 0, alice_key, False)
    assert len(alice_secret) == 32
    assert alice_secret == bob_secret

    alice_secret2 = alice.ecdh(IDENTITY, 0, 0, bob_key, False)
    bob_secret2 = bob.ecdh(IDENTITY, 0, 0, alice_key, True)
    assert alice_secret2 == bob_secret2
    assert alice_secret2 != alice_secret


def test_session_keys_are_crossed(alice, bob):
    alice_key = alice.key_gen(IDENTITY, 0, 0)
    bob_key = bob.key_gen(IDENTITY, 0, 0)

    client = alice.session_keys(IDENTITY, 0, 0, bob_key, True)
    server = bob.session_keys(IDENTITY, 0, 0, alice_key, False)

    assert client.rx == server.tx
    assert client.tx == server.rx
    assert client.rx != client.tx


def test_raw_shared_secret_is_symmetric(alice, bob):
    a = derive_path(alice.root_key, bip44_path(IDENTITY, 0, 0))
    b = derive_path(bob.root_key, bip44_path(IDENTITY, 0, 0))

    assert shared_secret(a.scalar, b.public_key) == shared_secret(b.scalar, a.public_key)


def test_ecdh_encrypt_and_decrypt(alice, bob):
    alice_key = alice.key_gen(IDENTITY, 0, 0)
    bob_key = bob.key_gen(IDENTITY, 0, 0)

    alice_secret = alice.ecdh(IDENTITY, 0, 0, bob_key, True)
    bob_secret = bob.ecdh(IDENTITY, 0, 0, alice_key, False)
    assert alice_secret == bob_secret

    message = b"Hello, World!"
    nonce = bytes([16, 197, 142, 8, 174, 91, 118, 244, 202, 136, 43, 200, 97, 242, 104, 99, 42, 154, 191, 32, 67, 30, 6, 123])

    # MAC | ciphertext, as crypto_secretbox_easy lays it out
    cipher_text = SecretBox(alice_secret).encrypt(message, nonce).ciphertext
    assert cipher_text == bytes([
        158, 107, 5, 77, 134, 215, 212, 90, 192, 34, 131, 39, 160, 252, 74, 194,
        129, 54, 249, 113, 128, 241, 213, 244, 98, 55, 46, 233, 7,
    ])

    assert SecretBox(bob_secret).decrypt(cipher_text, nonce) == message


def test_ecdh_secret_is_hash_of_point_and_ordered_keys(alice, bob):
    a = derive_path(alice.root_key, bip44_path(IDENTITY, 0, 0))
    b = derive_path(bob.root_key, bip44_path(IDENTITY, 0, 0))

    q = shared_secret(a.scalar, b.public_key)
    a_x = to_curve25519_public(a.public_key)
    b_x = to_curve25519_public(b.public_key)

    assert alice.ecdh(IDENTITY, 0, 0, b.public_key, True) == hashlib.blake2b(q + a_x + b_x, digest_size=32).digest()
    assert alice.ecdh(IDENTITY, 0, 0, b.public_key, False) == hashlib.blake2b(q + b_x + a_x, digest_size=32).digest()


def test_ecdh_differs_per_key_index(alice, bob):
    bob_key = bob.key_gen(IDENTITY, 0, 0)
    assert alice.ecdh(IDENTITY, 0, 0, bob_key, True) != alice.ecdh(IDENTITY, 0, 1, bob_key, True)


def test_curve25519_map_rejects_small_order_point():
    identity_point = b"\x01" + b"\x00" * 31
    with pytest.raises(ValueError):
        to_curve25519_public(identity_point)


def test_ecdh_rejects_bad_counterparty_key(alice):
    with pytest.raises(ValueError):
        alice.ecdh(IDENTITY, 0, 0, b"\x01" * 31, True)
    with pytest.raises(ValueError):
        alice.ecdh(IDENTITY, 0, 0, b"\x01" + b"\x00" * 31, True)
