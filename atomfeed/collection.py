"""
Entry storage for a single feed.
"""

import copy
from typing import Iterator, List, Tuple

import structlog

from .types import Entry, FeedError
from .validator import validate_entry


logger = structlog.get_logger(__name__)


class EntryCollection:
    """
    Ordered, exclusively owned collection of feed entries.

    Entries are validated and copied on ``add``. Readers get tuples, so the
    backing list is never handed out and a snapshot cannot be changed in
    place. Ids are not required to be unique.
    """

    def __init__(self):
        self._entries: List[Entry] = []
        self.logger = logger.bind(component="EntryCollection")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(tuple(self._entries))

    def add(self, entry: Entry) -> None:
        """
        Validate ``entry`` and append a copy of it.

        Raises:
            FeedError: If validation fails; the collection is unchanged
        """
        try:
            validate_entry(entry)
        except FeedError as e:
            self.logger.warning("Rejected entry", entry_id=getattr(entry, "id", None), error=str(e))
            raise

        self._entries.append(copy.deepcopy(entry))
        self.logger.debug("Added entry", entry_id=entry.id, total=len(self._entries))

    def remove(self, entry_id: str) -> bool:
        """
        Remove every entry whose id is ``entry_id``.

        Returns:
            True if at least one entry was removed
        """
        initial_length = len(self._entries)
        self._entries = [entry for entry in self._entries if entry.id != entry_id]
        removed = initial_length - len(self._entries)

        self.logger.debug("Removed entries", entry_id=entry_id, removed=removed)
        return removed > 0

    def list(self) -> Tuple[Entry, ...]:
        """Read-only snapshot of copies of the entries in insertion order."""
        return tuple(copy.deepcopy(self._entries))

    def clear(self) -> None:
        self._entries = []
        self.logger.debug("Cleared entries")
