"""Recover master tiles and orientations from serialized edge patterns."""

import logging
from collections.abc import Iterable

from macmahon.tiles import ORIENTATIONS, Tile

logger = logging.getLogger(__name__)


class CanonicalResolver:
    """Maps effective edge patterns (as seen on the board) to a master tile and orientation.

    When several master tiles or orientations produce the same effective pattern, the first
    in master-list order, then ascending orientation, wins.
    """

    def __init__(self, master_tiles: Iterable[Tile]) -> None:
        self.master_tiles: tuple[Tile, ...] = tuple(master_tiles)
        self._index: dict[str, tuple[Tile, int]] = {}
        for tile in self.master_tiles:
            for orientation in ORIENTATIONS:
                key = tile.oriented(orientation).effective_pattern
                self._index.setdefault(key, (tile, orientation))

    def resolve(self, pattern: str) -> tuple[Tile, int] | None:
        """Return (master tile, orientation) whose effective pattern equals `pattern`.

        Returns None, and logs a warning, if no master tile matches in any orientation.
        """
        match = self._index.get(pattern)
        if match is None:
            logger.warning("No canonical tile for pattern %r", pattern)
        return match

    def resolve_tile(self, pattern: str) -> Tile | None:
        """Like `resolve`, but return a new Tile at the matching orientation."""
        match = self.resolve(pattern)
        if match is None:
            return None
        tile, orientation = match
        return tile.oriented(orientation)


def resolve(pattern: str, master_tiles: Iterable[Tile]) -> tuple[Tile, int] | None:
    """One-off lookup; build a CanonicalResolver when resolving many patterns."""
    return CanonicalResolver(master_tiles).resolve(pattern)
