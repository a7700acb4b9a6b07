"""Filesystem helpers shared across layers."""

from pathlib import Path


def get_project_root() -> Path:
    """Return the repository root directory.

    Returns:
        Path: Directory containing the giving_engine package.
    """
    return Path(__file__).resolve().parents[2]


__all__ = ["get_project_root"]
