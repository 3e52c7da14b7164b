"""Tracking of users whose plan changed after the last allocation run."""

import logging
from typing import Dict, FrozenSet, Iterable, Optional

logger = logging.getLogger(__name__)


class StalenessTracker:
    """
    Set of user names whose plan was edited after the latest allocation
    generation.

    Every dirtying event is stamped with a logical version. A generation run
    captures the version when its request is issued and, once its response is
    observed, clears only the entries stamped at or before that capture. An
    edit that lands while the generation is in flight therefore survives.
    """

    def __init__(self):
        self._version = 0
        self._entries: Dict[str, int] = {}

    @property
    def version(self) -> int:
        return self._version

    def _tick(self) -> int:
        self._version += 1
        return self._version

    def mark_dirty(self, user_name: str) -> None:
        """
        Add a user to the set.

        Marking an already dirty user keeps a single entry in its place but
        restamps it, so a repeated edit counts as newer than any capture taken
        before it.
        """
        if not user_name:
            return
        known = user_name in self._entries
        self._entries[user_name] = self._tick()
        if known:
            return
        logger.info("Plan of %s changed after allocation, regeneration needed", user_name)

    def capture(self) -> int:
        """Get the version a generation request was issued at."""
        return self._version

    def clear(self, captured_version: Optional[int] = None) -> None:
        """
        Drop entries stamped at or before ``captured_version``.

        Without a captured version the whole set is cleared.
        """
        if captured_version is None:
            self._entries.clear()
            return
        survivors = {
            name: stamp for name, stamp in self._entries.items() if stamp > captured_version
        }
        if survivors:
            logger.info("Kept %d stale entries newer than the generation request", len(survivors))
        self._entries = survivors

    def load(self, user_names: Iterable[str], keep_after: Optional[int] = None) -> None:
        """
        Replace the set with the server's list of stale users.

        Entries stamped after ``keep_after`` are local edits the server list
        may not reflect yet; they are kept.
        """
        stamp = self._version
        kept = {}
        if keep_after is not None:
            kept = {name: s for name, s in self._entries.items() if s > keep_after}
        loaded = {name: stamp for name in user_names if name and name not in kept}
        self._entries = {**loaded, **kept}

    def snapshot(self) -> FrozenSet[str]:
        return frozenset(self._entries)

    def ordered(self) -> list:
        """Names in the order they first became stale."""
        # restamping an entry keeps its dict position
        return list(self._entries)

    @property
    def banner_visible(self) -> bool:
        return bool(self._entries)

    def __contains__(self, user_name: str) -> bool:
        return user_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
