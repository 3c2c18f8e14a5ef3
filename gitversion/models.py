"""
Value types for version resolution.

All entities are created and consumed within a single resolution call.
Nothing here is cached or shared between calls.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True, order=True)
class VersionTriple:
    """MAJOR.MINOR.PATCH, ordered lexicographically."""
    major: int = 0
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class TagMatch:
    """Nearest reachable tag matching the version glob."""
    tag_name: str
    prefix_stripped_version: str
    commits_since_tag: int
    abbreviated_hash: str

    @property
    def is_exact(self) -> bool:
        return self.commits_since_tag == 0


@dataclass(frozen=True)
class RepoState:
    """Working-tree state of the effective search root."""
    is_dirty: bool = False
    branch_name: Optional[str] = None  # None when detached or outside a repo


class BuildState(Enum):
    """Closed set of build classifications (tag found x distance x dirty)."""
    EXACT_RELEASE = "exact-release"
    DIRTY_EXACT = "dirty-exact"
    DEVELOPMENT = "development"
    DIRTY_DEVELOPMENT = "dirty-development"
    UNTAGGED = "untagged"
    DIRTY_UNTAGGED = "dirty-untagged"


@dataclass(frozen=True)
class ResolvedVersion:
    """
    Result handed to the build system.

    The base fields are always populated. Extended fields stay None unless
    extended output was requested.
    """
    version: str
    full_version: str
    major: int
    minor: int
    patch: int

    commit_hash: Optional[str] = None
    commit_count: Optional[int] = None
    is_dirty: Optional[bool] = None
    is_tagged: Optional[bool] = None
    is_development: Optional[bool] = None
    tag_name: Optional[str] = None
    branch_name: Optional[str] = None
