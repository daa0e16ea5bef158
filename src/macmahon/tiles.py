"""Module for tile-related classes and functions."""

import logging
from collections.abc import Sequence
from enum import Enum, IntEnum
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ValidationError

from macmahon.solver.config import config as solver_config

logger = logging.getLogger(__name__)

EDGE_COUNT = 4
"""Number of edges on a tile."""

ORIENTATIONS = (0, 90, 180, 270)
"""Valid tile orientations in clockwise degrees, in enumeration order."""

DEFAULT_TILES_PATH = Path(__file__).parent / "data" / "tiles.json"
"""Packaged master tile list (the 24 MacMahon tiles)."""


class Color(Enum):
    """Edge colors, keyed by their one-character serialization code."""

    RED = "R"
    GREEN = "G"
    YELLOW = "Y"
    HOLE = "H"  # Edge of a hole cell
    NONE = "N"  # No constraint

    @property
    def code(self) -> str:
        """One-character code used in serialized patterns."""
        return self.value

    @classmethod
    def from_code(cls, code: str) -> "Color":
        """Return the color for a one-character code.

        Raises:
            ValueError: If no color uses the given code.
        """
        try:
            return cls(code)
        except ValueError:
            raise ValueError(f"No color found for character: {code!r}") from None


EDGE_COLORS = (Color.RED, Color.GREEN, Color.YELLOW)
"""The real edge colors; HOLE and NONE are sentinels."""


class Direction(IntEnum):
    """Compass directions, in edge-index order."""

    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3

    def opposite(self) -> "Direction":
        return Direction((self + 2) % 4)

    @property
    def delta(self) -> tuple[int, int]:
        """(row, col) offset of the neighboring cell in this direction."""
        return _DELTAS[self]


_DELTAS = {
    Direction.TOP: (-1, 0),
    Direction.RIGHT: (0, 1),
    Direction.BOTTOM: (1, 0),
    Direction.LEFT: (0, -1),
}


class InvalidOrientationError(ValueError):
    """Raised when an orientation is not a multiple of 90 degrees."""

    pass


class TileDefinitionsError(RuntimeError):
    """Raised when the master tile list cannot be loaded."""

    pass


def parse_pattern(pattern: str) -> tuple[Color, ...]:
    """Parse a 4-character pattern string (TOP, RIGHT, BOTTOM, LEFT) into colors.

    Raises:
        ValueError: If the pattern has the wrong length or an unknown character.
    """
    if len(pattern) != EDGE_COUNT:
        raise ValueError(f"Color pattern must have exactly {EDGE_COUNT} characters: {pattern!r}")
    return tuple(Color.from_code(ch) for ch in pattern)


def pattern_code(colors: Sequence[Color]) -> str:
    """Inverse of `parse_pattern`."""
    return "".join(color.code for color in colors)


@lru_cache(maxsize=4096)
def rotate_pattern(pattern: tuple[Color, ...], orientation: int) -> tuple[Color, ...]:
    """Return the effective (TOP, RIGHT, BOTTOM, LEFT) colors of a pattern at an orientation.

    Note: the returned tuple is shared between callers.
    """
    shift = (360 - orientation) // 90
    return tuple(pattern[(base + shift) % EDGE_COUNT] for base in range(EDGE_COUNT))


class Tile:
    """A square tile with four colored edges.

    The pattern is fixed in the base orientation; the orientation (clockwise degrees)
    decides which slot of the pattern faces which direction.
    """

    def __init__(self, pattern: Sequence[Color], orientation: int = 0) -> None:
        if len(pattern) != EDGE_COUNT:
            raise ValueError(f"Color pattern must have exactly {EDGE_COUNT} colors.")

        self.pattern: tuple[Color, ...] = tuple(pattern)
        """Edge colors in the base orientation, in (TOP, RIGHT, BOTTOM, LEFT) order."""

        self._orientation = 0
        self.set_orientation(orientation)

        self.placement: tuple[int, int] | None = None
        """(row, col) where the tile was last placed.  Informational only; the Board is
        authoritative for placement."""

    @classmethod
    def from_pattern(cls, pattern: str, orientation: int = 0) -> "Tile":
        """Create a tile from a pattern string such as "RGYR"."""
        return cls(parse_pattern(pattern), orientation)

    @property
    def orientation(self) -> int:
        return self._orientation

    def set_orientation(self, degrees: int) -> None:
        """Set the orientation, normalized into [0, 360).

        Raises:
            InvalidOrientationError: If `degrees` is not a multiple of 90.
        """
        if degrees % 90 != 0:
            raise InvalidOrientationError(
                f"Orientation must be a multiple of 90 degrees, got {degrees}."
            )
        self._orientation = degrees % 360

    def rotate(self) -> None:
        """Rotate the tile 90 degrees clockwise."""
        self._orientation = (self._orientation + 90) % 360

    def effective_edge(self, direction: Direction) -> Color:
        """Color facing `direction` at the current orientation."""
        return self.pattern[(direction + (360 - self._orientation) // 90) % EDGE_COUNT]

    def edges_at(self, orientation: int) -> tuple[Color, ...]:
        """Effective (TOP, RIGHT, BOTTOM, LEFT) colors if the tile were at `orientation`."""
        return rotate_pattern(self.pattern, orientation % 360)

    @property
    def effective_pattern(self) -> str:
        """Pattern string as seen on the board at the current orientation."""
        return pattern_code(self.edges_at(self._orientation))

    @property
    def base_pattern(self) -> str:
        """Pattern string in the base orientation; identifies the tile."""
        return pattern_code(self.pattern)

    @property
    def rotation_key(self) -> str:
        """Smallest pattern string over all rotations; equal for rotations of one tile."""
        return min(pattern_code(self.edges_at(o)) for o in ORIENTATIONS)

    def oriented(self, orientation: int) -> "Tile":
        """Return a new tile with the same pattern at the given orientation."""
        return Tile(self.pattern, orientation)

    def edge_count(self, color: Color) -> int:
        return self.pattern.count(color)

    def __repr__(self) -> str:
        return f"Tile({self.base_pattern!r}, orientation={self._orientation})"


class TilesDefinition(BaseModel):
    """Shape of the master tile list document."""

    tiles: list[str]


def load_master_tiles(path: str | Path | None = None) -> tuple[Tile, ...]:
    """Load the master tile list.

    Args:
        path: Path to a tile list JSON document.  Defaults to the configured `tiles_path`,
            or the packaged list when that is unset.

    Returns:
        The master tiles, in document order, each at orientation 0.

    Raises:
        TileDefinitionsError: If the document is missing, malformed, empty, contains a
            non-edge color or lists two rotations of the same tile.
    """
    if path is None:
        path = solver_config.tiles_path or DEFAULT_TILES_PATH
    tiles_path = Path(path)
    if not tiles_path.is_file():
        raise TileDefinitionsError(f"Tile definitions not found: {tiles_path}")

    try:
        definition = TilesDefinition.model_validate_json(tiles_path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        raise TileDefinitionsError(f"Could not read tile definitions from {tiles_path}") from e

    if not definition.tiles:
        raise TileDefinitionsError(f"No tile definitions in {tiles_path}")

    tiles: list[Tile] = []
    seen: dict[str, str] = {}
    for pattern in definition.tiles:
        try:
            tile = Tile.from_pattern(pattern)
        except ValueError as e:
            raise TileDefinitionsError(f"Invalid tile pattern {pattern!r} in {tiles_path}") from e
        if any(color not in EDGE_COLORS for color in tile.pattern):
            raise TileDefinitionsError(f"Tile pattern {pattern!r} uses a non-edge color.")

        key = tile.rotation_key
        if key in seen:
            raise TileDefinitionsError(
                f"Tile pattern {pattern!r} is a rotation of {seen[key]!r} in {tiles_path}"
            )
        seen[key] = pattern
        tiles.append(tile)

    logger.debug("Loaded %d master tiles from %s", len(tiles), tiles_path)
    return tuple(tiles)
