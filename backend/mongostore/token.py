"""Token carriers — how the encoded session id travels over HTTP.

Cookies by default; HeaderToken swaps in a header transport without
touching the store.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from starlette.requests import Request
from starlette.responses import Response

from core.exceptions import TokenNotFoundError
from schemas.session import Options

# Expires value for deletion cookies
_EPOCH = datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)


class TokenCarrier(ABC):
    """Reads the session token from a request and writes it on a response."""

    @abstractmethod
    def get_token(self, request: Request, name: str) -> str:
        """Return the token for name. Raises TokenNotFoundError when absent."""
        ...

    @abstractmethod
    def set_token(self, response: Response, name: str, value: str, options: Options) -> None:
        ...


class CookieToken(TokenCarrier):
    """Session token carried in a cookie named after the session."""

    def get_token(self, request: Request, name: str) -> str:
        value = request.cookies.get(name)
        if not value:
            raise TokenNotFoundError(f"mongostore: cookie {name!r} not present")
        return value

    def set_token(self, response: Response, name: str, value: str, options: Options) -> None:
        max_age = None
        expires = None
        if options.max_age > 0:
            max_age = options.max_age
            expires = options.max_age
        elif options.max_age < 0:
            max_age = options.max_age
            expires = _EPOCH
        response.set_cookie(
            name,
            value,
            max_age=max_age,
            expires=expires,
            path=options.path,
            domain=options.domain,
            secure=options.secure,
            httponly=options.http_only,
            samesite=options.same_site,
        )


class HeaderToken(TokenCarrier):
    """Session token carried in a request/response header.

    Requests may also present it as `Authorization: Bearer <token>`.
    The session name is not part of the transport, so one header carries
    one session.
    """

    def __init__(self, header: str = "X-Session-Token"):
        self.header = header

    def get_token(self, request: Request, name: str) -> str:
        value = request.headers.get(self.header)
        if not value:
            auth = request.headers.get("authorization", "")
            scheme, _, token = auth.partition(" ")
            if scheme.lower() == "bearer":
                value = token.strip()
        if not value:
            raise TokenNotFoundError(f"mongostore: header {self.header!r} not present")
        return value

    def set_token(self, response: Response, name: str, value: str, options: Options) -> None:
        response.headers[self.header] = value
