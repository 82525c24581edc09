"""MongoStore — server-side sessions in a MongoDB collection.

The cookie carries only the codec-encoded session id; values live in the
`data` field of the session's document.

Soft-miss policy: a valid cookie whose record is missing, expired or
undecodable yields a fresh session and no error. A cookie that fails
authentication also yields a fresh session; its error is kept on
`session.error` for the caller to inspect.
"""
import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from starlette.requests import Request
from starlette.responses import Response

from cookie_codec.codec import Codec, codecs_from_pairs, decode_multi, encode_multi
from cookie_codec.errors import CodecError
from core.exceptions import SessionNotFoundError, TokenNotFoundError
from mongostore import record
from mongostore.indexes import ensure_ttl_index
from mongostore.token import CookieToken, TokenCarrier
from schemas.session import Options, Session
from sessions.registry import get_registry

logger = logging.getLogger(__name__)


class MongoStore:
    """Session store backed by a motor collection.

    `codecs`, `options` and `token` may be replaced before first use.
    """

    def __init__(self, collection: AsyncIOMotorCollection, max_age: int, *key_pairs: Optional[bytes]):
        self.codecs: List[Codec] = codecs_from_pairs(*key_pairs)
        self.options = Options(path="/", max_age=max_age)
        self.token: TokenCarrier = CookieToken()
        self._collection = collection
        self.max_age(max_age)

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._collection

    async def get(self, request: Request, name: str) -> Session:
        """Return the session registered for name on this request.

        A new session is created (and registered) if there is none.
        """
        return await get_registry(request).get(self, name)

    async def new(self, request: Request, name: str) -> Session:
        """Return a session for name without registering it."""
        session = Session(name=name, store=self, options=self.options.model_copy(), is_new=True)

        try:
            token = self.token.get_token(request, name)
        except TokenNotFoundError:
            return session

        try:
            session_id = decode_multi(name, token, self.codecs)
        except CodecError as e:
            logger.warning("Session cookie rejected: name=%s reason=%s", name, e)
            session.error = e
            return session
        if not isinstance(session_id, str):
            logger.warning("Session cookie rejected: name=%s reason=non-string id", name)
            return session
        session.id = session_id

        try:
            await record.load(self._collection, session, self.codecs)
        except (SessionNotFoundError, CodecError, ValidationError, PyMongoError) as e:
            logger.debug("Session soft-miss: name=%s reason=%s", name, type(e).__name__)
            session.values = {}
            return session

        session.is_new = False
        return session

    async def save(self, request: Request, response: Response, session: Session) -> None:
        """Persist session and write its cookie.

        options.max_age < 0 deletes the record and clears the cookie.
        """
        if session.options.max_age < 0:
            if session.id:
                await record.delete(self._collection, session)
            self.token.set_token(response, session.name, "", session.options)
            return

        if not session.id:
            session.id = record.generate_session_id()

        await record.upsert(self._collection, session, self.codecs)

        encoded = encode_multi(session.name, session.id, self.codecs)
        self.token.set_token(response, session.name, encoded, session.options)

    def max_age(self, age: int) -> None:
        """Set the default max age for new sessions and every codec.

        Individual sessions are deleted by setting options.max_age = -1.
        """
        self.options.max_age = age
        for codec in self.codecs:
            set_max_age = getattr(codec, "max_age", None)
            if callable(set_max_age):
                set_max_age(age)

    async def lookup(self, name: str, session_id: str) -> dict:
        """Values stored under a raw session id."""
        return await record.find_by_id(self._collection, name, session_id, self.codecs)


async def new_mongo_store(
    collection: AsyncIOMotorCollection,
    max_age: int,
    ensure_ttl: bool,
    *key_pairs: Optional[bytes],
) -> MongoStore:
    """Build a MongoStore; with ensure_ttl, MongoDB reaps records past max_age.

    Raises TTLIndexError when the index cannot be created.
    """
    store = MongoStore(collection, max_age, *key_pairs)
    if ensure_ttl:
        await ensure_ttl_index(collection, max_age)
    return store


async def build_store(settings, collection: AsyncIOMotorCollection) -> MongoStore:
    """Wire a MongoStore from Settings."""
    store = await new_mongo_store(
        collection,
        settings.SESSION_MAX_AGE,
        settings.SESSION_ENSURE_TTL,
        *settings.key_pairs(),
    )
    store.options = Options(
        path=settings.SESSION_COOKIE_PATH,
        domain=settings.SESSION_COOKIE_DOMAIN,
        max_age=settings.SESSION_MAX_AGE,
        secure=settings.SESSION_COOKIE_SECURE,
        http_only=settings.SESSION_COOKIE_HTTP_ONLY,
        same_site=settings.SESSION_COOKIE_SAME_SITE,
    )
    return store
