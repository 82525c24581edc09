"""Custom exception hierarchy for the session store."""


class MongoStoreError(Exception):
    """Base error."""
    def __init__(self, message: str, code: str = "MONGOSTORE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class SessionNotFoundError(MongoStoreError):
    """No persisted record for the session id (missing or TTL-expired)."""
    def __init__(self, message: str = "mongostore: session not found"):
        super().__init__(message, code="SESSION_NOT_FOUND")


class InvalidSessionIdError(MongoStoreError):
    """Raw session id lookups with a malformed id."""
    def __init__(self, message: str = "mgostore: invalid session id"):
        super().__init__(message, code="INVALID_SESSION_ID")


class InvalidModifiedError(MongoStoreError):
    """Reserved `modified` value is present but not a datetime."""
    def __init__(self, message: str = "mongostore: invalid modified value"):
        super().__init__(message, code="INVALID_MODIFIED")


class TokenNotFoundError(MongoStoreError):
    """No session token on the incoming request."""
    def __init__(self, message: str = "mongostore: token not present"):
        super().__init__(message, code="TOKEN_NOT_FOUND")


class TTLIndexError(MongoStoreError):
    """TTL index bootstrap failed at construction."""
    def __init__(self, message: str = "mongostore: could not ensure TTL index"):
        super().__init__(message, code="TTL_INDEX_ERROR")
