# ctxcrypto/errors.py


class ContextualCryptoError(ValueError):
    """Base class for every error raised by ctxcrypto."""


class InvalidSeed(ContextualCryptoError):
    pass


class InvalidHDPath(ContextualCryptoError):
    """A derivation path or path component cannot be used."""


class PrivateKeyRequired(ContextualCryptoError):
    """Hardened derivation was attempted from a public-only node."""


class UnknownSigner(ContextualCryptoError):
    """The requested key context cannot be resolved."""


class DecodingError(ContextualCryptoError):
    """The payload could not be decoded with the declared encoding."""


class ReservedTagPrefix(ContextualCryptoError):
    """The payload starts with a reserved protocol domain tag."""


class SchemaValidationFailed(ContextualCryptoError):
    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = list(errors or [])
