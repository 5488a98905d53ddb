"""Deployment directory discovery.

Finds the directory holding .lantern/ from any subdirectory, the way git
finds .git/.
"""

from pathlib import Path


def find_lantern_root(start_path: Path | None = None) -> Path | None:
    """Find the directory containing .lantern/ by walking up directories.

    Args:
        start_path: Directory to start searching from. Defaults to CWD.

    Returns:
        Absolute path to the directory containing .lantern/, or None if
        not found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()
    while True:
        if (current / ".lantern").is_dir():
            return current

        parent = current.parent
        if parent == current:
            return None
        current = parent
