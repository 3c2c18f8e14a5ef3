"""
Best-effort version string parsing.

Every input string yields a VersionTriple. Malformed components degrade to 0
instead of raising, so callers never need error handling around parsing.
"""

import re

from .models import VersionTriple

# Leading run of ASCII digits in a single dot-separated group
_LEADING_DIGITS = re.compile(r'^[0-9]+')

# MAJOR.MINOR.PATCH followed by anything (pre-release, build metadata)
_STRICT_SEMVER = re.compile(r'^([0-9]+)\.([0-9]+)\.([0-9]+)(.*)$')


def strip_prefix(raw: str, prefix: str) -> str:
    """Remove ``prefix`` from the front of ``raw`` if it is there."""
    if prefix and raw.startswith(prefix):
        return raw[len(prefix):]
    return raw


def _component(group: str) -> int:
    match = _LEADING_DIGITS.match(group)
    return int(match.group(0)) if match else 0


def parse_version(raw: str, prefix: str = '') -> VersionTriple:
    """
    Parse a version string into a VersionTriple.

    Handles tags and configured default versions identically:
    "1.2.3", "v1.2.3" (with prefix "v"), "1.0.0-alpha.1", "1.2.3rc1",
    "1.2" (patch defaults to 0), "1.2.3.4" (fourth group ignored),
    "version-abc" (all zeros).

    Args:
        raw: Version string, possibly prefixed
        prefix: Literal prefix to strip before parsing

    Returns:
        VersionTriple: Parsed components, 0 where no digits were found
    """
    groups = strip_prefix(raw.strip(), prefix).split('.')[:3]
    groups += [''] * (3 - len(groups))
    major, minor, patch = (_component(group) for group in groups)
    return VersionTriple(major, minor, patch)


def is_strict_semver(raw: str) -> bool:
    """Check whether a string starts with a full MAJOR.MINOR.PATCH triple."""
    return _STRICT_SEMVER.match(raw.strip()) is not None
