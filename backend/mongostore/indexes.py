"""TTL index bootstrap for the sessions collection."""
import logging

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from core.exceptions import TTLIndexError

logger = logging.getLogger(__name__)


async def ensure_ttl_index(collection: AsyncIOMotorCollection, max_age: int) -> str:
    """Create a background, sparse TTL index on `modified`. Idempotent.

    Raises TTLIndexError if MongoDB refuses the index.
    """
    try:
        index_name = await collection.create_index(
            [("modified", ASCENDING)],
            background=True,
            sparse=True,
            expireAfterSeconds=max_age,
        )
    except PyMongoError as e:
        raise TTLIndexError(f"mongostore: could not ensure TTL index: {e}") from e
    logger.info("Session TTL index ready: collection=%s expire_after=%ds", collection.name, max_age)
    return index_name
