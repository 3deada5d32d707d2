import logging
from typing import List

MISSING_PREFIX = "Missing "


class NoteLedger:
    """Flagged images in first-seen order. Adding an existing entry is a no-op."""

    def __init__(self):
        self._entries: List[str] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry: str) -> bool:
        return entry in self._entries

    def add(self, entry: str) -> bool:
        if entry in self._entries:
            logging.debug(f"Note for '{entry}' already present")
            return False
        logging.debug(f"Adding note for '{entry}'")
        self._entries.append(entry)
        return True

    def add_missing(self, url: str) -> bool:
        """Record an image that failed to load; kept apart from manual notes by its prefix."""
        return self.add(f"{MISSING_PREFIX}{url}")

    def list(self) -> List[str]:
        return list(self._entries)

    def reset(self) -> None:
        logging.debug(f"Clearing {len(self._entries)} notes")
        self._entries.clear()
