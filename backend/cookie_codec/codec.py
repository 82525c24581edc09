"""SecureCookie — authenticated (optionally encrypted) value encoding.

Wire format (before the outer base64url):
    date|value|mac
where mac = HMAC-SHA256(hash_key, name|date|value). `name` is the
authentication context: an encoding minted for one name never decodes
under another.

With a block key the serialized value is encrypted with AES-GCM
(12-byte nonce prepended) before it is MACed.
"""
import base64
import binascii
import hashlib
import hmac
import logging
import os
import secrets
import time
from typing import Any, List, Optional, Protocol, Sequence

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from cookie_codec.errors import (
    BlockKeyError,
    CodecError,
    DecodeError,
    DecryptionError,
    HashKeyError,
    MacInvalidError,
    MultiError,
    TimestampExpiredError,
    TimestampTooNewError,
    ValueTooLongError,
)
from cookie_codec.serializers import BSONSerializer

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = 86400 * 30
DEFAULT_MAX_LENGTH = 4096
NONCE_SIZE = 12


class Codec(Protocol):
    def encode(self, name: str, value: Any) -> str: ...

    def decode(self, name: str, value: str) -> Any: ...


def _timestamp() -> int:
    return int(time.time())


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    """Strict unpadded base64url decode.

    Characters outside the alphabet and non-zero trailing bits are rejected,
    so exactly one string decodes to a given payload.
    """
    try:
        decoded = base64.b64decode(data + b"=" * (-len(data) % 4), altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"securecookie: base64 decode failed: {e}")
    if _b64encode(decoded) != data:
        raise DecodeError("securecookie: non-canonical base64")
    return decoded


def generate_random_key(length: int) -> bytes:
    """Cryptographically strong random bytes."""
    return secrets.token_bytes(length)


class SecureCookie:
    """Encodes and decodes authenticated values bound to a name."""

    def __init__(self, hash_key: bytes, block_key: Optional[bytes] = None, serializer=None):
        if not hash_key:
            raise HashKeyError("securecookie: hash key is not set")
        self._hash_key = hash_key
        self._aead: Optional[AESGCM] = None
        if block_key:
            if len(block_key) not in (16, 24, 32):
                raise BlockKeyError(
                    f"securecookie: block key must be 16, 24 or 32 bytes, got {len(block_key)}"
                )
            self._aead = AESGCM(block_key)
        self._serializer = serializer or BSONSerializer()
        self._max_age = DEFAULT_MAX_AGE
        self._min_age = 0
        self._max_length = DEFAULT_MAX_LENGTH

    def max_age(self, seconds: int) -> "SecureCookie":
        """Upper bound on timestamp age. 0 disables the check."""
        self._max_age = seconds
        return self

    def min_age(self, seconds: int) -> "SecureCookie":
        self._min_age = seconds
        return self

    def max_length(self, length: int) -> "SecureCookie":
        """Upper bound on encoded length. 0 disables the check."""
        self._max_length = length
        return self

    def _mac(self, *parts: bytes) -> bytes:
        return hmac.new(self._hash_key, b"|".join(parts), hashlib.sha256).digest()

    def encode(self, name: str, value: Any) -> str:
        data = self._serializer.serialize(value)
        if self._aead is not None:
            nonce = os.urandom(NONCE_SIZE)
            data = nonce + self._aead.encrypt(nonce, data, None)
        data = _b64encode(data)
        date = str(_timestamp()).encode("ascii")
        mac = self._mac(name.encode("utf-8"), date, data)
        encoded = _b64encode(b"|".join((date, data, mac))).decode("ascii")
        if self._max_length and len(encoded) > self._max_length:
            raise ValueTooLongError("securecookie: the value is too long")
        return encoded

    def decode(self, name: str, value: str) -> Any:
        if self._max_length and len(value) > self._max_length:
            raise ValueTooLongError("securecookie: the value is too long")
        raw = _b64decode(value.encode("ascii", errors="replace"))
        parts = raw.split(b"|", 2)
        if len(parts) != 3:
            raise MacInvalidError("securecookie: the value is not valid")
        date, data, mac = parts
        if not hmac.compare_digest(self._mac(name.encode("utf-8"), date, data), mac):
            raise MacInvalidError("securecookie: the value is not valid")

        try:
            t1 = int(date)
        except ValueError:
            raise DecodeError("securecookie: invalid timestamp")
        t2 = _timestamp()
        if self._min_age and t1 > t2 - self._min_age:
            raise TimestampTooNewError("securecookie: timestamp is too new")
        if self._max_age and t1 < t2 - self._max_age:
            raise TimestampExpiredError("securecookie: expired timestamp")

        data = _b64decode(data)
        if self._aead is not None:
            if len(data) <= NONCE_SIZE:
                raise DecryptionError("securecookie: the value could not be decrypted")
            try:
                data = self._aead.decrypt(data[:NONCE_SIZE], data[NONCE_SIZE:], None)
            except InvalidTag:
                raise DecryptionError("securecookie: the value could not be decrypted")
        return self._serializer.deserialize(data)


def codecs_from_pairs(*key_pairs: Optional[bytes]) -> List[SecureCookie]:
    """Build a codec per (hash key, block key) pair.

    A trailing hash key without a block key yields a sign-only codec.
    """
    codecs = []
    for i in range(0, len(key_pairs), 2):
        block_key = key_pairs[i + 1] if i + 1 < len(key_pairs) else None
        codecs.append(SecureCookie(key_pairs[i], block_key))
    return codecs


def encode_multi(name: str, value: Any, codecs: Sequence[Codec]) -> str:
    """Encode with the first codec of the set."""
    if not codecs:
        raise CodecError("securecookie: no codecs were provided")
    return codecs[0].encode(name, value)


def decode_multi(name: str, value: str, codecs: Sequence[Codec]) -> Any:
    """Decode with each codec in turn; the first success wins."""
    if not codecs:
        raise CodecError("securecookie: no codecs were provided")
    errors: List[CodecError] = []
    for codec in codecs:
        try:
            return codec.decode(name, value)
        except CodecError as e:
            errors.append(e)
    raise MultiError(errors)
