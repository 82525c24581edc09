"""SecureCookie codec: authentication context, rotation, age bounds, encryption."""
import string
from datetime import datetime, timezone

import pytest

from cookie_codec import codec as codec_module
from cookie_codec.codec import (
    SecureCookie,
    codecs_from_pairs,
    decode_multi,
    encode_multi,
    generate_random_key,
)
from cookie_codec.errors import (
    BlockKeyError,
    CodecError,
    HashKeyError,
    MacInvalidError,
    MultiError,
    TimestampExpiredError,
    TimestampTooNewError,
    ValueTooLongError,
)
from cookie_codec.serializers import BSONSerializer, JSONSerializer

URL_ALPHABET = string.ascii_letters + string.digits + "-_"


@pytest.fixture
def codec():
    return SecureCookie(generate_random_key(32), generate_random_key(32))


def test_round_trip_values(codec):
    values = {"user": "alice", "roles": ["admin", "dev"], "count": 3}
    assert codec.decode("sid", codec.encode("sid", values)) == values


def test_round_trip_plain_string(codec):
    assert codec.decode("sid", codec.encode("sid", "ABC234")) == "ABC234"


def test_encoding_is_bound_to_name(codec):
    encoded = codec.encode("A", "session-id")
    with pytest.raises(MacInvalidError):
        codec.decode("B", encoded)


def test_encoding_is_url_safe(codec):
    encoded = codec.encode("sid", {"k": "v" * 50})
    assert "=" not in encoded
    assert "+" not in encoded and "/" not in encoded


def test_flipped_character_is_rejected(codec):
    encoded = codec.encode("sid", "session-id")
    i = len(encoded) // 2
    flipped = encoded[:i] + ("A" if encoded[i] != "A" else "B") + encoded[i + 1:]
    with pytest.raises(CodecError):
        codec.decode("sid", flipped)


def test_every_last_character_change_is_rejected():
    signed = SecureCookie(generate_random_key(32))
    encoded = signed.encode("sid", "session-id")
    for c in URL_ALPHABET.replace(encoded[-1], ""):
        with pytest.raises(CodecError):
            signed.decode("sid", encoded[:-1] + c)


@pytest.mark.parametrize("extra", [".", "!", "=", " "])
def test_characters_outside_alphabet_are_rejected(codec, extra):
    encoded = codec.encode("sid", "session-id")
    i = len(encoded) // 2
    for altered in (encoded + extra, encoded[:i] + extra + encoded[i:], extra + encoded):
        with pytest.raises(CodecError):
            codec.decode("sid", altered)


def test_garbage_is_rejected(codec):
    with pytest.raises(CodecError):
        codec.decode("sid", "not-a-cookie")


def _inner_payload(encoded: str) -> bytes:
    _, data, _ = codec_module._b64decode(encoded.encode()).split(b"|", 2)
    return codec_module._b64decode(data)


def test_block_key_hides_plaintext():
    hash_key = generate_random_key(32)
    signed = SecureCookie(hash_key)
    encrypted = SecureCookie(hash_key, generate_random_key(16))
    secret = "correct horse battery staple"

    assert secret.encode() in _inner_payload(signed.encode("sid", secret))
    assert secret.encode() not in _inner_payload(encrypted.encode("sid", secret))
    assert encrypted.decode("sid", encrypted.encode("sid", secret)) == secret


def test_wrong_block_key_fails():
    hash_key = generate_random_key(32)
    a = SecureCookie(hash_key, generate_random_key(32))
    b = SecureCookie(hash_key, generate_random_key(32))
    with pytest.raises(CodecError):
        b.decode("sid", a.encode("sid", "value"))


def test_expired_timestamp(codec, monkeypatch):
    codec.max_age(60)
    monkeypatch.setattr(codec_module, "_timestamp", lambda: 1_000_000)
    encoded = codec.encode("sid", "value")
    monkeypatch.setattr(codec_module, "_timestamp", lambda: 1_000_061)
    with pytest.raises(TimestampExpiredError):
        codec.decode("sid", encoded)


def test_max_age_zero_disables_expiry(codec, monkeypatch):
    codec.max_age(0)
    monkeypatch.setattr(codec_module, "_timestamp", lambda: 1_000_000)
    encoded = codec.encode("sid", "value")
    monkeypatch.setattr(codec_module, "_timestamp", lambda: 9_000_000)
    assert codec.decode("sid", encoded) == "value"


def test_min_age(codec):
    codec.min_age(3600)
    with pytest.raises(TimestampTooNewError):
        codec.decode("sid", codec.encode("sid", "value"))


def test_max_length(codec):
    codec.max_length(64)
    with pytest.raises(ValueTooLongError):
        codec.encode("sid", {"big": "x" * 200})
    with pytest.raises(ValueTooLongError):
        codec.decode("sid", "A" * 65)


def test_key_validation():
    with pytest.raises(HashKeyError):
        SecureCookie(b"")
    with pytest.raises(BlockKeyError):
        SecureCookie(generate_random_key(32), b"short")


def test_codecs_from_pairs():
    keys = [generate_random_key(32) for _ in range(3)]
    codecs = codecs_from_pairs(*keys)
    assert len(codecs) == 2
    # trailing hash key without a block key is sign-only
    assert codecs[1]._aead is None
    assert codecs[0]._aead is not None


def test_encode_multi_uses_first_codec():
    k1 = SecureCookie(generate_random_key(32))
    k2 = SecureCookie(generate_random_key(32))
    encoded = encode_multi("sid", "value", [k1, k2])
    assert k1.decode("sid", encoded) == "value"
    with pytest.raises(MacInvalidError):
        k2.decode("sid", encoded)


def test_decode_multi_key_rotation():
    k0, k1, k2 = (SecureCookie(generate_random_key(32)) for _ in range(3))
    encoded = encode_multi("sid", "value", [k1, k2])

    assert decode_multi("sid", encoded, [k0, k1]) == "value"

    with pytest.raises(MultiError) as exc:
        decode_multi("sid", encoded, [k0])
    assert len(exc.value.errors) == 1


def test_empty_codec_set():
    with pytest.raises(CodecError):
        encode_multi("sid", "value", [])
    with pytest.raises(CodecError):
        decode_multi("sid", "value", [])


def test_bson_serializer_keeps_datetimes():
    ts = datetime(2024, 5, 6, 7, 8, 9, 123000, tzinfo=timezone.utc)
    s = BSONSerializer()
    assert s.deserialize(s.serialize({"modified": ts})) == {"modified": ts}


def test_json_serializer():
    c = SecureCookie(generate_random_key(32), serializer=JSONSerializer())
    assert c.decode("sid", c.encode("sid", {"a": [1, 2]})) == {"a": [1, 2]}
