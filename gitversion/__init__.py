"""
GitVersion

Derive a deterministic semantic version for a build from Git history:
the nearest version tag, the commit distance from it and the working-tree
state, with an optional consistency check against a declared version.
"""

from ._version import __version__
from .consistency import VersionMismatchError
from .models import ResolvedVersion, VersionTriple
from .resolver import ResolveOptions, resolve
from .vcs import VcsInvocationError

__description__ = "Derive build versions from Git tags"
