"""Per-request session registry.

Guarantees one Session object per (request, name). The registry lives on
the ASGI scope state, so every Request built from the same scope shares it.
"""
from typing import Dict

from starlette.requests import Request
from starlette.responses import Response

from schemas.session import Session

_STATE_ATTR = "session_registry"


class Registry:
    """Sessions registered for a single request."""

    def __init__(self, request: Request):
        self.request = request
        self._sessions: Dict[str, Session] = {}

    async def get(self, store, name: str) -> Session:
        """Return the cached session for name, or ask the store for one."""
        session = self._sessions.get(name)
        if session is None:
            session = await store.new(self.request, name)
            self._sessions[name] = session
        return session

    async def save_all(self, response: Response) -> None:
        """Save every registered session. Raises the first failure."""
        errors = []
        for session in self._sessions.values():
            try:
                await session.save(self.request, response)
            except Exception as e:
                errors.append(e)
        if errors:
            raise errors[0]


def get_registry(request: Request) -> Registry:
    registry = getattr(request.state, _STATE_ATTR, None)
    if registry is None:
        registry = Registry(request)
        setattr(request.state, _STATE_ATTR, registry)
    return registry


async def save_all(request: Request, response: Response) -> None:
    """Save all sessions registered for the current request."""
    await get_registry(request).save_all(response)
