"""
Utility functions for gitversion.

Path handling shared by the configuration layer and the resolver.
"""

import os
from typing import Optional


def is_windows() -> bool:
    """Check if running on Windows operating system."""
    return os.name == 'nt'


def sanitize_path(path: str) -> str:
    """
    Normalize a path for the current platform.

    On Windows forward slashes become backslashes; elsewhere the path is only
    normalized (redundant separators and up-level references removed).

    Args:
        path: The path to sanitize

    Returns:
        str: Normalized absolute path
    """
    if is_windows():
        path = path.replace('/', '\\')
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


def resolve_search_root(root_dir: str, source_dir: Optional[str] = None) -> str:
    """
    Determine the directory whose history is used for versioning.

    Args:
        root_dir: Project root directory
        source_dir: Optional sub-directory, relative to ``root_dir`` or absolute

    Returns:
        str: Absolute path of the effective search root
    """
    if source_dir:
        if os.path.isabs(os.path.expanduser(source_dir)):
            return sanitize_path(source_dir)
        return sanitize_path(os.path.join(root_dir, source_dir))
    return sanitize_path(root_dir)
