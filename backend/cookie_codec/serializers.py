"""Value serializers used by SecureCookie.

BSON is the default: it keeps datetimes typed, so the reserved `modified`
session value survives an encode/decode round trip.
"""
import json
from datetime import timezone
from typing import Any

import bson
from bson.codec_options import CodecOptions
from bson.errors import BSONError

from cookie_codec.errors import SerializationError

# BSON documents need a mapping at the top level; scalars are boxed under this key.
_BOX_KEY = "v"

_CODEC_OPTIONS = CodecOptions(tz_aware=True, tzinfo=timezone.utc)


class BSONSerializer:
    """Serialize any BSON-encodable value."""

    def serialize(self, value: Any) -> bytes:
        try:
            return bson.encode({_BOX_KEY: value}, codec_options=_CODEC_OPTIONS)
        except (BSONError, TypeError, OverflowError) as e:
            raise SerializationError(f"securecookie: bson encode failed: {e}")

    def deserialize(self, data: bytes) -> Any:
        try:
            doc = bson.decode(data, codec_options=_CODEC_OPTIONS)
        except (BSONError, TypeError, ValueError) as e:
            raise SerializationError(f"securecookie: bson decode failed: {e}")
        if _BOX_KEY not in doc:
            raise SerializationError("securecookie: bson payload has no value")
        return doc[_BOX_KEY]


class JSONSerializer:
    """Serialize JSON-compatible values. Datetimes are not preserved."""

    def serialize(self, value: Any) -> bytes:
        try:
            return json.dumps(value, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"securecookie: json encode failed: {e}")

    def deserialize(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationError(f"securecookie: json decode failed: {e}")
