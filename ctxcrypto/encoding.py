# ctxcrypto/encoding.py
"""
Payload decoding and the checks that gate arbitrary-data signing.

A payload handed to sign_data() is decoded according to its declared
encoding. The decoded message must not start with a reserved protocol domain
tag (transactions, multisig transactions, logic programs, program data), so
that a generic signing request can never produce a signature that a
transaction or program context would accept. A decoded string value is held
to the same rule even when the bytes signed are its msgpack form. Only then
is the decoded document validated against the caller's JSON Schema.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Union

import jsonschema
import msgpack
from referencing.exceptions import Unresolvable

from .errors import DecodingError, ReservedTagPrefix, SchemaValidationFailed

logger = logging.getLogger(__name__)

RESERVED_TAGS = (b"TX", b"MX", b"Program", b"ProgData")


class Encoding(str, Enum):
    NONE = "none"
    BASE64 = "base64"
    MSGPACK = "msgpack"


@dataclass(frozen=True)
class SignMetadata:
    encoding: Encoding
    schema: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "encoding", Encoding(self.encoding))


@dataclass(frozen=True)
class DecodedPayload:
    message: bytes  # exact bytes that get signed
    document: Any  # JSON view used for schema validation


# ---------- Domain tags ----------

def has_reserved_tag(data: bytes) -> bool:
    return any(bytes(data).startswith(tag) for tag in RESERVED_TAGS)


def reject_reserved_tags(data: bytes) -> None:
    if has_reserved_tag(data):
        raise ReservedTagPrefix("payload starts with a reserved protocol tag (TX, MX, Program or ProgData)")


# ---------- Decoding ----------

def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return list(value)
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _document_from_bytes(data: bytes) -> Any:
    """UTF-8 JSON text is validated as JSON; anything else as a list of octets."""
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return list(data)


def decode_payload(payload: bytes, encoding: Union[Encoding, str]) -> DecodedPayload:
    payload = bytes(payload)
    encoding = Encoding(encoding)

    if encoding is Encoding.NONE:
        return DecodedPayload(payload, _document_from_bytes(payload))

    if encoding is Encoding.BASE64:
        try:
            message = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodingError(f"payload is not valid base64: {e}") from e
        return DecodedPayload(message, _document_from_bytes(message))

    try:
        value = msgpack.unpackb(payload, raw=False, strict_map_key=False)
    except (msgpack.ExtraData, msgpack.UnpackException, ValueError, TypeError) as e:
        raise DecodingError(f"payload is not valid msgpack: {e}") from e

    if isinstance(value, (bytes, bytearray)):
        message = bytes(value)
        return DecodedPayload(message, _document_from_bytes(message))
    # structured documents are signed in their msgpack form
    return DecodedPayload(payload, _jsonable(value))


# ---------- Schema ----------

def validate_schema(document: Any, schema: Mapping[str, Any]) -> None:
    schema = dict(schema)
    validator_cls = jsonschema.validators.validator_for(schema)
    try:
        validator_cls.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise SchemaValidationFailed(f"invalid schema: {e.message}", [e.message]) from e

    try:
        errors: List[str] = [err.message for err in validator_cls(schema).iter_errors(document)]
    except Unresolvable as e:
        raise SchemaValidationFailed(f"invalid schema: unresolvable reference: {e}", [str(e)]) from e

    if errors:
        logger.warning("payload rejected by schema: %s", "; ".join(errors))
        raise SchemaValidationFailed("payload does not match schema", errors)


def validate_data(payload: bytes, metadata: SignMetadata) -> DecodedPayload:
    """
    Decode and gate a payload for arbitrary-data signing.

    Order:
    - reserved tags on the raw payload (not for base64, whose text is never signed)
    - decode per metadata.encoding
    - reserved tags on the decoded message, and on the decoded document when
      it is a string (a msgpack str is signed in its msgpack form)
    - JSON Schema validation of the decoded document

    Returns the decoded payload whose message is what gets signed.
    """
    try:
        if metadata.encoding is not Encoding.BASE64:
            reject_reserved_tags(payload)
        decoded = decode_payload(payload, metadata.encoding)
        reject_reserved_tags(decoded.message)
        if isinstance(decoded.document, str):
            reject_reserved_tags(decoded.document.encode("utf-8"))
    except ReservedTagPrefix:
        logger.warning("signing request rejected: reserved protocol tag")
        raise

    validate_schema(decoded.document, metadata.schema)
    return decoded

