#ghddl_data/utils/file_utils.py
"""
Utility functions for file system operations.
"""
from pathlib import Path

from ghddl_data.exceptions import IOFailure


def create_dir_if_not_exists(path: Path) -> None:
    """Creates a directory including parent directories if it doesn't exist."""
    if path.exists() and not path.is_dir():
        raise IOFailure(f"Path '{path}' exists but is not a directory.")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOFailure(f"Could not create directory '{path}'. Error: {e}") from e


def remove_if_exists(path: Path) -> None:
    """Deletes a file left behind by an interrupted operation."""
    # A failed unlink must not mask the error that triggered the cleanup.
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        print(f"[WARNING] Could not remove '{path}': {e}")


def is_within_directory(directory: Path, target: Path) -> bool:
    """Checks that `target` resolves to a location inside `directory`."""
    directory = directory.resolve()
    target = target.resolve()
    return directory == target or directory in target.parents
