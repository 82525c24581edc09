"""Session schemas — in-memory session, cookie options and persisted record."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

FLASHES_KEY = "_flash"


class Options(BaseModel):
    """Cookie attributes. max_age < 0 deletes; 0 is a browser-session cookie."""
    path: str = "/"
    domain: Optional[str] = None
    max_age: int = 0
    secure: bool = False
    http_only: bool = False
    same_site: Optional[Literal["lax", "strict", "none"]] = None


@dataclass
class Session:
    """A named session bound to the store that created it.

    An empty `id` means the session has never been persisted.
    """
    name: str
    store: Any = field(default=None, repr=False)
    id: str = ""
    values: Dict[str, Any] = field(default_factory=dict)
    options: Options = field(default_factory=Options)
    is_new: bool = True
    # Cookie decode failure reported by the store; the session itself is fresh.
    error: Optional[Exception] = field(default=None, repr=False)

    async def save(self, request, response) -> None:
        await self.store.save(request, response, self)

    def add_flash(self, value: Any, key: str = FLASHES_KEY) -> None:
        self.values.setdefault(key, []).append(value)

    def flashes(self, key: str = FLASHES_KEY) -> List[Any]:
        """Return and clear flash messages under key."""
        return list(self.values.pop(key, None) or [])


class SessionRecord(BaseModel):
    """Persisted document: {_id, data, modified}."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    data: str
    modified: datetime

    def to_doc(self) -> dict:
        """Convert to MongoDB document."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_doc(cls, doc: dict) -> "SessionRecord":
        return cls.model_validate(doc)
