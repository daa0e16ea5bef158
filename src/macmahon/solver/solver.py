"""Main solver module for MacMahon mosaic puzzles."""

import logging
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from os import PathLike
from pathlib import Path
from typing import TextIO

from macmahon.board import Board
from macmahon.puzzle_file import PuzzleState, dumps, load
from macmahon.solver.config import config as solver_config
from macmahon.solver.constraints import BorderMap, find_invalid_placements
from macmahon.solver.search import SolverStats, solve
from macmahon.solver.supply import EdgeSupplyReport, check_edge_supply
from macmahon.tiles import Tile, load_master_tiles

logger = logging.getLogger(__name__)

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S.%f %Z%z"


@dataclass(kw_only=True)
class SolveResult:
    """Outcome of a solvability check."""

    solution: Board | None = None
    """A fully solved copy of the board, if one was found."""

    supply: EdgeSupplyReport | None = None
    """Edge-supply report, if the check was run."""

    stats: SolverStats = field(default_factory=SolverStats)
    """Search statistics.  Untouched if the search was skipped."""

    @property
    def solvable(self) -> bool:
        return self.solution is not None


def unplaced_tiles(master_tiles: Iterable[Tile], board: Board) -> list[Tile]:
    """Return the master tiles whose rotation class is not already on the board, in master order."""
    placed_keys = {tile.rotation_key for _, tile in board.placed_tiles()}
    return [tile for tile in master_tiles if tile.rotation_key not in placed_keys]


def find_solution(
    board: Board,
    available: Sequence[Tile],
    border_colors: BorderMap | None = None,
    *,
    stats: SolverStats | None = None,
) -> Board | None:
    """Search for a completion of `board` using the available tiles.

    The board is not modified; the search runs on a deep copy.

    Args:
        board (Board): The board to complete.
        available (Sequence[Tile]): Tiles not yet placed, in the order to try them.
        border_colors (BorderMap | None): Border requirements.  If None, uses the board's own.
        stats (SolverStats | None): Statistics to update, if given.

    Returns:
        The solved copy of the board, or None if no completion exists.
    """
    scratch = board.deep_copy()

    # A board that already has a conflict can never become a valid tiling
    conflicts = find_invalid_placements(scratch, border_colors)
    if conflicts:
        logger.debug("Board has conflicting placements at %s; not searching", conflicts)
        return None

    return solve(scratch, available, border_colors, stats=stats)


def is_solvable(
    board: Board,
    available: Sequence[Tile],
    *,
    use_supply_check: bool = True,
) -> SolveResult:
    """Check whether `board` can be completed, running the edge-supply check first.

    Args:
        board (Board): The board to check.  Not modified.
        available (Sequence[Tile]): Tiles not yet placed.
        use_supply_check (bool): Whether to run the edge-supply pre-check.

    Returns:
        A SolveResult.  If the supply check fails, the search is not run.
    """
    result = SolveResult()
    if use_supply_check:
        result.supply = check_edge_supply(board, available)
        if not result.supply.feasible:
            logger.debug("Skipping search: %s", result.supply)
            return result

    result.solution = find_solution(board, available, stats=result.stats)
    return result


def run(puzzle_path: str | PathLike, master_tiles: Sequence[Tile] | None = None) -> bool:
    """Run the solver on a puzzle file, logging to `<log_dir>/<puzzle stem>.log`.

    Args:
        puzzle_path (str | PathLike): Path to the puzzle file.
        master_tiles (Sequence[Tile] | None): Master tile list.  If None, loads the default.

    Returns:
        Whether the puzzle is solvable.
    """
    puzzle_path = Path(puzzle_path)
    if master_tiles is None:
        master_tiles = load_master_tiles()

    logfile = Path(solver_config.log_dir) / f"{puzzle_path.stem}.log"
    print(f"Puzzle: {puzzle_path}")
    print(f"Log file: {logfile}")

    logfile.parent.mkdir(parents=True, exist_ok=True)

    with open(logfile, "w", encoding="utf-8") as logf:
        try:
            solved = solve_one(puzzle_path, master_tiles, logf=logf)
        except KeyboardInterrupt:
            print("Solver interrupted by user.", file=logf, flush=True)
            print("Solver interrupted by user.")
            sys.exit(1)
    print()
    return solved


def solve_one(puzzle_path: Path, master_tiles: Sequence[Tile], *, logf: TextIO) -> bool:
    """Attempt to solve one puzzle file, writing a human-readable log.

    Args:
        puzzle_path (Path): Path to the puzzle file.
        master_tiles (Sequence[Tile]): Master tile list.
        logf: File object to log the solving process.

    Returns:
        Whether the puzzle is solvable.
    """
    print(f"Solver config: {solver_config.model_dump()}", file=logf, flush=True)

    state: PuzzleState = load(puzzle_path, master_tiles)
    board = state.board
    available = unplaced_tiles(master_tiles, board)

    print(f"Selected puzzle: {puzzle_path}", file=logf, flush=True)
    print(f"Dimensions: {board.dims}", file=logf, flush=True)
    print(f"Holes: {board.n_holes}", file=logf, flush=True)
    print(f"Free cells: {board.n_free_cells}", file=logf, flush=True)
    print(f"Available tiles: {len(available)}", file=logf, flush=True)
    if state.degraded:
        print(
            f"Corrupt cells: {list(state.corrupt_cells)}; "
            f"corrupt border segments: {list(state.corrupt_borders)}",
            file=logf,
            flush=True,
        )
    print("Initial grid:", file=logf, flush=True)
    print("", file=logf, flush=True)
    board.print(file=logf)
    print("", file=logf, flush=True)

    # Start time as formatted string (in local timezone)
    start_time_str = datetime.now().astimezone().strftime(TIMESTAMP_FMT)
    print(f"Start time: {start_time_str}", file=logf, flush=True)

    result = is_solvable(board, available, use_supply_check=solver_config.use_edge_supply_check)
    if result.supply is not None:
        print(str(result.supply), file=logf, flush=True)
    print(f"Search stats: {result.stats}", file=logf, flush=True)

    if result.solution is None:
        print("No solution found.", file=logf, flush=True)
        print("No solution found.")
        return False

    print("Solution found!", file=logf, flush=True)
    print("", file=logf, flush=True)
    result.solution.print(file=logf)
    print("Solution found!")
    print(dumps(result.solution))
    return True
