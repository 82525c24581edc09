"""Record mapper — Session <-> {_id, data, modified} documents.

`data` is the codec-set encoding of the values mapping under the session
name. `modified` anchors TTL expiry; callers may pin it by storing a
datetime under the reserved `modified` value key.
"""
import base64
import logging
import re
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Sequence

from motor.motor_asyncio import AsyncIOMotorCollection

from cookie_codec.codec import Codec, decode_multi, encode_multi
from cookie_codec.errors import SerializationError
from core.exceptions import InvalidModifiedError, InvalidSessionIdError, SessionNotFoundError
from schemas.session import Session, SessionRecord

logger = logging.getLogger(__name__)

MODIFIED_KEY = "modified"
SESSION_ID_BYTES = 32

# 32 bytes -> 52 base32 chars once padding is stripped
_SESSION_ID_RE = re.compile(r"^[A-Z2-7]{52}$")


def generate_session_id() -> str:
    return base64.b32encode(secrets.token_bytes(SESSION_ID_BYTES)).decode("ascii").rstrip("=")


def is_valid_session_id(session_id: str) -> bool:
    return bool(session_id) and _SESSION_ID_RE.match(session_id) is not None


def _filter_by_id(session_id: str) -> dict:
    return {"_id": session_id}


def _modified_value(values: Dict[str, Any]) -> datetime:
    if MODIFIED_KEY not in values:
        return datetime.now(timezone.utc)
    modified = values[MODIFIED_KEY]
    if not isinstance(modified, datetime):
        raise InvalidModifiedError()
    return modified


async def load(
    collection: AsyncIOMotorCollection,
    session: Session,
    codecs: Sequence[Codec],
) -> None:
    """Load values for session.id into session.values."""
    doc = await collection.find_one(_filter_by_id(session.id))
    if doc is None:
        raise SessionNotFoundError()
    record = SessionRecord.from_doc(doc)
    values = decode_multi(session.name, record.data, codecs)
    if not isinstance(values, dict):
        raise SerializationError("mongostore: session data is not a mapping")
    session.values = values


async def upsert(
    collection: AsyncIOMotorCollection,
    session: Session,
    codecs: Sequence[Codec],
) -> SessionRecord:
    """Insert or replace the record for session.id."""
    modified = _modified_value(session.values)
    encoded = encode_multi(session.name, session.values, codecs)
    record = SessionRecord(id=session.id, data=encoded, modified=modified)
    await collection.update_one(
        _filter_by_id(record.id),
        {"$set": {"data": record.data, "modified": record.modified}},
        upsert=True,
    )
    return record


async def delete(collection: AsyncIOMotorCollection, session: Session) -> None:
    """Remove the record for session.id. A missing record is not an error."""
    result = await collection.delete_one(_filter_by_id(session.id))
    if not result.deleted_count:
        logger.debug("Session record already absent on delete")


async def find_by_id(
    collection: AsyncIOMotorCollection,
    name: str,
    session_id: str,
    codecs: Sequence[Codec],
) -> Dict[str, Any]:
    """Decode the values stored under a raw session id.

    For operator tooling that already holds an id; request handling goes
    through the cookie instead.
    """
    if not is_valid_session_id(session_id):
        raise InvalidSessionIdError()
    session = Session(name=name, id=session_id)
    await load(collection, session, codecs)
    return session.values
