"""MacMahon Mosaic Puzzle Solver.

Attempts to complete a MacMahon mosaic: a grid of square tiles with red, green and
yellow edges, where touching edges and the colored border must match.  The board may
contain pre-placed tiles and holes (cells that never hold a tile).  Uses backtracking,
filling the most constrained cell first, to search for a completion.
"""

import logging
from sys import argv, exit

from .puzzle_file import PuzzleFormatError
from .solver import solver
from .tiles import TileDefinitionsError, load_master_tiles


def main() -> None:
    """Main entry point for the MacMahon mosaic solver."""
    # Expect one or more arguments: paths to puzzle files
    if len(argv) < 2:
        print("Usage: python -m macmahon <puzzle_file> [<puzzle_file> ...]")
        exit(1)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    try:
        master_tiles = load_master_tiles()
    except TileDefinitionsError as e:
        print(f"Could not load tile definitions: {e}")
        exit(1)

    all_solved = True
    for puzzle_path in argv[1:]:
        try:
            solved = solver.run(puzzle_path, master_tiles)
        except (OSError, PuzzleFormatError) as e:
            print(f"Could not load puzzle {puzzle_path}: {e}")
            solved = False
        all_solved = solved and all_solved
    exit(0 if all_solved else 2)
