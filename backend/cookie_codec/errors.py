"""Codec error hierarchy."""
from typing import List


class CodecError(Exception):
    """Base codec error."""


class HashKeyError(CodecError):
    """Hash key missing."""


class BlockKeyError(CodecError):
    """Block key has an invalid length."""


class ValueTooLongError(CodecError):
    """Encoded value exceeds the configured max length."""


class DecodeError(CodecError):
    """Value is not a well-formed encoding."""


class MacInvalidError(CodecError):
    """MAC does not authenticate name|date|value."""


class TimestampExpiredError(CodecError):
    """Timestamp older than max age."""


class TimestampTooNewError(CodecError):
    """Timestamp newer than min age allows."""


class DecryptionError(CodecError):
    """Authenticated decryption failed."""


class SerializationError(CodecError):
    """Value could not be (de)serialized."""


class MultiError(CodecError):
    """Every codec in the set failed."""

    def __init__(self, errors: List[CodecError]):
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors) or "securecookie: no codecs")
