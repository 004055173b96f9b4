"""Artist list kept as a single JSON array in the repository.

Every operation is one read-modify-write cycle: read the file and its sha,
apply the change in memory, write back conditioned on that sha. Nothing is
cached between calls.
"""

import enum
import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from pyuca import Collator

from .content_store import StoredContent
from .errors import StoreContentError, ValidationError

logger = logging.getLogger("tourtracker_proxy.artists")

# Default Unicode collation table, loaded once per worker.
_COLLATOR = Collator()


class ContentStore(Protocol):
    async def read(self, path: str) -> StoredContent: ...

    async def write(self, path: str, text: str, sha: str, message: str) -> None: ...


class Outcome(enum.Enum):
    ADDED = "added"
    REMOVED = "removed"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class MutationResult:
    artists: List[str]
    outcome: Outcome
    name: str

    @property
    def message(self) -> str:
        if self.outcome is Outcome.ADDED:
            return f"Added {self.name}"
        if self.outcome is Outcome.REMOVED:
            return f"Removed {self.name}"
        if self.outcome is Outcome.ALREADY_EXISTS:
            return "Already exists"
        return "Not found"


def normalize_name(raw: Optional[str]) -> str:
    name = (raw or "").strip()
    if not name:
        raise ValidationError("Missing name")
    return name


def sort_artists(artists: List[str]) -> List[str]:
    """Alphabetical order on the lowercased names, accents collated with their base letter."""
    return sorted(artists, key=lambda a: _COLLATOR.sort_key(a.lower()))


def serialize_artists(artists: List[str]) -> str:
    return json.dumps(artists, indent=2, ensure_ascii=False)


def parse_artists(text: str) -> List[str]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StoreContentError(f"Stored artist list is not valid JSON: {e.msg}") from e
    if not isinstance(data, list) or not all(isinstance(a, str) for a in data):
        raise StoreContentError("Stored artist list must be a JSON array of strings")
    return data


class ArtistListService:
    def __init__(self, store: ContentStore, file_path: str):
        self._store = store
        self._file_path = file_path

    async def _load(self):
        stored = await self._store.read(self._file_path)
        return parse_artists(stored.text), stored.sha

    async def _save(self, artists: List[str], sha: str, message: str) -> None:
        await self._store.write(self._file_path, serialize_artists(artists), sha, message)
        logger.info("artists_saved", extra={"commit_message": message, "count": len(artists)})

    async def list_artists(self) -> List[str]:
        artists, _ = await self._load()
        return artists

    async def add_artist(self, raw_name: Optional[str]) -> MutationResult:
        name = normalize_name(raw_name)
        artists, sha = await self._load()
        wanted = name.lower()
        if any(a.lower() == wanted for a in artists):
            return MutationResult(artists, Outcome.ALREADY_EXISTS, name)
        updated = sort_artists(artists + [name])
        await self._save(updated, sha, f"Add {name}")
        return MutationResult(updated, Outcome.ADDED, name)

    async def remove_artist(self, raw_name: Optional[str]) -> MutationResult:
        name = normalize_name(raw_name)
        artists, sha = await self._load()
        # Exact match only; adding is case-insensitive but removal is not.
        filtered = [a for a in artists if a != name]
        if len(filtered) == len(artists):
            return MutationResult(artists, Outcome.NOT_FOUND, name)
        await self._save(filtered, sha, f"Remove {name}")
        return MutationResult(filtered, Outcome.REMOVED, name)
