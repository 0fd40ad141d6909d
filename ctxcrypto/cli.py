#!/usr/bin/env python3
import argparse
import base64
import binascii
import json
import os
import sys
from pathlib import Path

from .api import ContextualCryptoApi
from .bip32 import DerivationScheme, PublicNode
from .context import KeyContext
from .encoding import Encoding, SignMetadata
from .logger import get_logger

SEED_ENV = "CTXCRYPTO_SEED_HEX"
SCHEME_ENV = "CTXCRYPTO_SCHEME"


def _hex(value: str, what: str) -> bytes:
    try:
        return binascii.unhexlify(value.strip())
    except (binascii.Error, ValueError):
        raise ValueError(f"{what} is not valid hex") from None


def _api(args) -> ContextualCryptoApi:
    if not args.seed_hex:
        raise ValueError(f"no seed given (use --seed-hex or set {SEED_ENV})")
    return ContextualCryptoApi(_hex(args.seed_hex, "seed"), DerivationScheme.parse(args.scheme))


def _emit(out):
    print(json.dumps(out, indent=2))


def cmd_root(args):
    """
    ctxcrypto root --seed-hex <hex>
    """
    api = _api(args)
    _emit({
        "root_hex": api.root_key.to_bytes().hex(),
        "pk_hex": api.root_key.public_key.hex(),
    })


def cmd_keygen(args):
    """
    ctxcrypto keygen --context address --account 0 --index 0
    """
    api = _api(args)
    context = KeyContext.parse(args.context)
    pk = api.key_gen(context, args.account, args.index)
    _emit({
        "context": context.name.lower(),
        "account": args.account,
        "index": args.index,
        "scheme": api.default_scheme.name.lower(),
        "pk_hex": pk.hex(),
    })


def cmd_xpub(args):
    """
    ctxcrypto xpub --context address --account 0
    """
    api = _api(args)
    node = api.public_node(KeyContext.parse(args.context), args.account)
    _emit({"xpub_hex": node.to_bytes().hex()})


def cmd_derive_public(args):
    """
    ctxcrypto derive-public --xpub-hex <64-byte hex> --index 3

    Needs no seed: soft derivation from public information only.
    """
    node = PublicNode.from_bytes(_hex(args.xpub_hex, "xpub"))
    child = node.derive_child(args.index, DerivationScheme.parse(args.scheme))
    _emit({
        "index": args.index,
        "pk_hex": child.public_key.hex(),
        "xpub_hex": child.to_bytes().hex(),
    })


def _read_payload(args) -> bytes:
    if args.payload_hex is not None:
        return _hex(args.payload_hex, "payload")
    if args.payload_file is not None:
        return Path(args.payload_file).read_bytes()
    return args.payload.encode("utf-8")


def cmd_sign_data(args):
    """
    ctxcrypto sign-data --context identity --encoding base64 --schema s.json --payload <text>
    """
    api = _api(args)
    schema = {}
    if args.schema:
        with open(args.schema, "r", encoding="utf-8") as f:
            schema = json.load(f)

    metadata = SignMetadata(encoding=Encoding(args.encoding), schema=schema)
    sig = api.sign_data(KeyContext.parse(args.context), args.account, args.index, _read_payload(args), metadata)
    _emit({"sig_hex": sig.hex()})


def cmd_sign_tx(args):
    """
    ctxcrypto sign-tx --tx-b64 <base64 of "TX" + msgpack>
    """
    api = _api(args)
    if args.tx_b64 is not None:
        try:
            tx = base64.b64decode(args.tx_b64, validate=True)
        except binascii.Error:
            raise ValueError("transaction is not valid base64") from None
    else:
        tx = _hex(args.tx_hex, "transaction")
    sig = api.sign_transaction(KeyContext.parse(args.context), args.account, args.index, tx)
    _emit({"sig_hex": sig.hex()})


def cmd_verify(args):
    """
    ctxcrypto verify --sig-hex <hex> --message-hex <hex> --pk-hex <hex>
    """
    ok = ContextualCryptoApi.verify_with_public_key(
        _hex(args.sig_hex, "signature"),
        _hex(args.message_hex, "message"),
        _hex(args.pk_hex, "public key"),
    )
    if ok:
        print("valid")
    else:
        print("invalid")
        sys.exit(1)


def cmd_ecdh(args):
    """
    ctxcrypto ecdh --context identity --other-pk-hex <hex> --role client
    """
    api = _api(args)
    secret = api.ecdh(
        KeyContext.parse(args.context),
        args.account,
        args.index,
        _hex(args.other_pk_hex, "counterparty public key"),
        args.role == "client",
    )
    _emit({"role": args.role, "shared_secret_hex": secret.hex()})


def _add_key_selector(p, with_index=True):
    p.add_argument("--context", default="address", help="address or identity (default: address)")
    p.add_argument("--account", type=int, default=0, help="account level, hardened (default: 0)")
    if with_index:
        p.add_argument("--index", type=int, default=0, help="key index, soft (default: 0)")


def build_parser():
    p = argparse.ArgumentParser(prog="ctxcrypto", description="Contextual HD Ed25519 keys")
    p.add_argument(
        "--seed-hex",
        default=os.environ.get(SEED_ENV),
        help=f"seed in hex (default: ${SEED_ENV}). RUN OFFLINE.",
    )
    p.add_argument(
        "--scheme",
        default=os.environ.get(SCHEME_ENV, "peikert"),
        choices=["peikert", "khovratovich"],
        help="derivation scheme (default: peikert)",
    )
    p.add_argument("--log-level", default=None, help="log level (default: $CTXCRYPTO_LOG_LEVEL or WARNING)")
    sub = p.add_subparsers(dest="cmd")

    # root
    r = sub.add_parser("root", help="print the root extended key")
    r.set_defaults(func=cmd_root)

    # keygen
    k = sub.add_parser("keygen", help="derive a context public key")
    _add_key_selector(k)
    k.set_defaults(func=cmd_keygen)

    # xpub
    x = sub.add_parser("xpub", help="export the account-level public node")
    _add_key_selector(x, with_index=False)
    x.set_defaults(func=cmd_xpub)

    # derive-public
    d = sub.add_parser("derive-public", help="soft-derive a child from a public node")
    d.add_argument("--xpub-hex", required=True, help="64-byte public node (key | chain code) in hex")
    d.add_argument("--index", type=int, required=True, help="soft child index")
    d.set_defaults(func=cmd_derive_public)

    # sign-data
    s = sub.add_parser("sign-data", help="sign schema-checked arbitrary data")
    _add_key_selector(s)
    s.add_argument("--encoding", default="none", choices=[e.value for e in Encoding])
    s.add_argument("--schema", help="path to a JSON Schema file (default: {})")
    g = s.add_mutually_exclusive_group(required=True)
    g.add_argument("--payload", help="payload text")
    g.add_argument("--payload-hex", help="payload bytes in hex")
    g.add_argument("--payload-file", help="path to a payload file")
    s.set_defaults(func=cmd_sign_data)

    # sign-tx
    t = sub.add_parser("sign-tx", help="sign a prefix-encoded transaction")
    _add_key_selector(t)
    tg = t.add_mutually_exclusive_group(required=True)
    tg.add_argument("--tx-b64", help="transaction bytes in base64")
    tg.add_argument("--tx-hex", help="transaction bytes in hex")
    t.set_defaults(func=cmd_sign_tx)

    # verify
    v = sub.add_parser("verify", help="verify a signature")
    v.add_argument("--sig-hex", required=True)
    v.add_argument("--message-hex", required=True)
    v.add_argument("--pk-hex", required=True)
    v.set_defaults(func=cmd_verify)

    # ecdh
    e = sub.add_parser("ecdh", help="derive a shared secret with a counterparty")
    _add_key_selector(e)
    e.add_argument("--other-pk-hex", required=True, help="counterparty Ed25519 public key in hex")
    e.add_argument("--role", choices=["client", "server"], required=True)
    e.set_defaults(func=cmd_ecdh)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    log = get_logger(level=args.log_level)
    try:
        args.func(args)
    except (ValueError, OSError) as e:
        log.debug("command %s failed", args.cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
