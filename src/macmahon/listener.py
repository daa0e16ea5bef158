"""Notification sink used by the game to report state changes."""

import logging
from collections.abc import Mapping, Sequence
from typing import Protocol

from macmahon.board import BorderPosition
from macmahon.tiles import Color

logger = logging.getLogger(__name__)


class GameListener(Protocol):
    """Receives every change the game wants presented.

    Message arguments are keys (e.g. "status.cell_occupied") plus format arguments;
    rendering and translation are up to the implementation.
    """

    def initialize_board_view(
        self, n_rows: int, n_cols: int, border_colors: Mapping[BorderPosition, Color]
    ) -> None: ...

    def update_cell(
        self,
        row: int,
        col: int,
        pattern: str | None,
        orientation: int,
        is_error: bool,
        is_hole: bool,
    ) -> None: ...

    def display_available_tiles(self, patterns: Sequence[str]) -> None: ...

    def update_border_color(self, position: BorderPosition, color: Color) -> None: ...

    def highlight_cell(self, row: int, col: int, pattern: str) -> None: ...

    def set_editor_mode(self, enabled: bool) -> None: ...

    def show_status(self, key: str, *args: object) -> None: ...

    def show_alert(self, title_key: str, body_key: str, *args: object) -> None: ...

    def show_game_end(self, title_key: str, message_key: str, *args: object) -> None: ...


class LoggingListener:
    """A GameListener that writes every notification to the module logger."""

    def initialize_board_view(
        self, n_rows: int, n_cols: int, border_colors: Mapping[BorderPosition, Color]
    ) -> None:
        logger.info(
            "Board %dx%d with %d colored border segments", n_rows, n_cols, len(border_colors)
        )

    def update_cell(
        self,
        row: int,
        col: int,
        pattern: str | None,
        orientation: int,
        is_error: bool,
        is_hole: bool,
    ) -> None:
        if is_hole:
            logger.debug("Cell (%d, %d): hole", row, col)
        elif pattern is None:
            logger.debug("Cell (%d, %d): empty", row, col)
        else:
            logger.debug(
                "Cell (%d, %d): %s at %d%s",
                row,
                col,
                pattern,
                orientation,
                " (error)" if is_error else "",
            )

    def display_available_tiles(self, patterns: Sequence[str]) -> None:
        logger.debug("Available tiles (%d): %s", len(patterns), " ".join(patterns))

    def update_border_color(self, position: BorderPosition, color: Color) -> None:
        logger.debug("Border %s_%d: %s", position.side.name, position.index, color.name)

    def highlight_cell(self, row: int, col: int, pattern: str) -> None:
        logger.info("Hint: %s at (%d, %d)", pattern, row, col)

    def set_editor_mode(self, enabled: bool) -> None:
        logger.info("Editor mode %s", "on" if enabled else "off")

    def show_status(self, key: str, *args: object) -> None:
        logger.info("%s %s", key, args if args else "")

    def show_alert(self, title_key: str, body_key: str, *args: object) -> None:
        logger.warning("%s: %s %s", title_key, body_key, args if args else "")

    def show_game_end(self, title_key: str, message_key: str, *args: object) -> None:
        logger.info("%s: %s %s", title_key, message_key, args if args else "")
