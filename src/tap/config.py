"""Store location configuration."""

from __future__ import annotations

from pathlib import Path

from tap.errors import ConfigError

TAP_STORE = "TAP_STORE"
LOG_FILENAME = "log.txt"

MISSING_STORE_MESSAGE = f"Set the `{TAP_STORE}` environment variable to point to an existing `.tap` directory."


def resolve_store_dir(value: str | Path | None) -> Path:
    """Validate the configured store directory.

    Args:
        value: Directory from ``--store`` or the ``TAP_STORE`` environment
            variable, or None if neither is set.

    Returns:
        The store directory as a Path.

    Raises:
        ConfigError: No directory was configured, or it does not exist.
    """
    if value is None or str(value) == "":
        raise ConfigError(MISSING_STORE_MESSAGE)
    store_dir = Path(value).expanduser()
    if not store_dir.is_dir():
        raise ConfigError(f"{TAP_STORE} directory does not exist: {store_dir}")
    return store_dir


def log_path(store_dir: Path) -> Path:
    return store_dir / LOG_FILENAME
