"""Version file.

Kept in sync with the version in pyproject.toml.
"""

from typing import Tuple

__version__ = "0.1.0"
__version_tuple__: Tuple[int, int, int] = (0, 1, 0)
