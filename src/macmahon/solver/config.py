"""MacMahon mosaic solver configuration."""

from dotenv import find_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine the environment file path, or None if not found
ENV_FILE = find_dotenv() or None


class SolverConfig(BaseSettings):
    """Configuration settings for the MacMahon mosaic solver."""

    tiles_path: str | None = None
    """Path to the master tile list (JSON).  If None (default), uses the packaged list."""

    max_pieces: int = 24
    """Number of tiles in the master inventory.  Default: 24.

    Boards with more cells than this need at least `cells - max_pieces` holes.
    """

    solvability_check_max_free_cells: int | None = 18
    """Skip the full solvability search when more than this many cells are free.

    Boards above the limit are allowed into play unchecked.  If None, the search always
    runs.  Default: 18.
    """

    use_edge_supply_check: bool = True
    """Whether to run the edge-supply pre-check before the full search.  Default: True."""

    log_dir: str = "logs"
    """Directory for per-puzzle log files written by the command line runner."""

    model_config = SettingsConfigDict(
        env_prefix="MOSAIC_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )


config = SolverConfig()
