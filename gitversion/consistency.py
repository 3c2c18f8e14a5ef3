"""
Consistency check between a project's declared version and its Git tag.
"""

from dataclasses import dataclass
from typing import Optional

from .models import TagMatch, VersionTriple


@dataclass(frozen=True)
class Mismatch:
    """Declared version violates the rule for the current build."""
    declared: str
    actual: str
    is_development: bool

    def message(self) -> str:
        if self.is_development:
            rule = ('must be greater than or equal to the tagged ancestor version '
                    'for development builds')
        else:
            rule = 'must equal the tag version for exact tagged releases'
        return (
            f"GitVersion: version mismatch: declared default version ({self.declared}) "
            f"vs Git tag version ({self.actual}). The declared version {rule}."
        )


class VersionMismatchError(Exception):
    """Raised when strict checking finds a Mismatch. Fatal for the build."""

    def __init__(self, mismatch: Mismatch):
        super().__init__(mismatch.message())
        self.mismatch = mismatch

    @property
    def declared(self) -> str:
        return self.mismatch.declared

    @property
    def actual(self) -> str:
        return self.mismatch.actual


def check(declared_default: VersionTriple, tag_match: Optional[TagMatch],
          resolved: VersionTriple, declared_literal: Optional[str] = None) -> Optional[Mismatch]:
    """
    Check a declared default version against the tag-derived version.

    Args:
        declared_default: Parsed declared default version
        tag_match: Matched tag, or None
        resolved: Tag-derived version
        declared_literal: Declared version as the user wrote it, for messages

    Returns:
        None when consistent, otherwise a Mismatch
    """
    if tag_match is None:
        return None

    if tag_match.is_exact:
        consistent = declared_default == resolved
    else:
        consistent = declared_default >= resolved

    if consistent:
        return None

    return Mismatch(
        declared=declared_literal if declared_literal is not None else str(declared_default),
        actual=str(resolved),
        is_development=not tag_match.is_exact
    )
