"""
Version resolution.

Composes tag lookup, parsing, classification and the optional consistency
check into a single ResolvedVersion for the calling build.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from .classifier import classify
from .consistency import VersionMismatchError, check
from .models import RepoState, ResolvedVersion
from .parser import is_strict_semver, parse_version
from .tag_matcher import find_latest_tag, stripped_version
from .utils import resolve_search_root
from .vcs import GitBackend, VcsBackend

DEFAULT_VERSION = '0.0.0'
DEFAULT_HASH_LENGTH = 9


@dataclass
class ResolveOptions:
    """Inputs to resolve()."""
    root_dir: str = field(default_factory=os.getcwd)
    source_dir: Optional[str] = None
    prefix: str = ''
    default_version: str = DEFAULT_VERSION
    fail_on_mismatch: bool = False
    hash_length: int = DEFAULT_HASH_LENGTH
    extended: bool = False

    @property
    def search_root(self) -> str:
        return resolve_search_root(self.root_dir, self.source_dir)


def resolve(options: ResolveOptions, vcs: Optional[VcsBackend] = None) -> ResolvedVersion:
    """
    Resolve the build version for the configured search root.

    Args:
        options: Resolution options
        vcs: VCS backend (default: GitBackend)

    Returns:
        ResolvedVersion: Base fields always, extended fields if requested

    Raises:
        VcsInvocationError: If git is missing or fails unexpectedly
        VersionMismatchError: If strict checking is on and the declared
            default version is inconsistent with the tag
    """
    vcs = vcs or GitBackend()
    search_root = options.search_root

    declared_version = stripped_version(options.default_version.strip(), options.prefix)
    if not is_strict_semver(declared_version):
        logger.warning(f"GitVersion: Default version '{options.default_version}' does not follow semver format.")

    in_repository = os.path.isdir(search_root) and vcs.is_repository(search_root)
    if not in_repository:
        logger.info(f"GitVersion: {search_root} is not a git repository, using default version {options.default_version}.")

    tag_match = None
    if in_repository:
        tag_match = find_latest_tag(options.prefix, search_root, vcs, options.hash_length,
                                    check_repository=False)

    if tag_match:
        base_version = parse_version(tag_match.prefix_stripped_version)
        commit_hash = tag_match.abbreviated_hash
    else:
        base_version = parse_version(declared_version)
        commit_hash = vcs.abbreviated_hash(search_root, options.hash_length) if in_repository else None
        if in_repository:
            logger.info(f"GitVersion: No matching tag found, using default version {base_version}.")

    if in_repository:
        repo_state = RepoState(
            is_dirty=vcs.is_dirty(search_root),
            branch_name=vcs.branch_name(search_root)
        )
    else:
        repo_state = RepoState()

    classification = classify(tag_match, repo_state, base_version, commit_hash)
    logger.debug(f"Build state: {classification.state.value}")

    if options.fail_on_mismatch:
        mismatch = check(
            parse_version(declared_version),
            tag_match,
            base_version,
            declared_literal=options.default_version
        )
        if mismatch:
            raise VersionMismatchError(mismatch)

    extended = {}
    if options.extended:
        extended = dict(
            commit_hash=commit_hash or '',
            commit_count=tag_match.commits_since_tag if tag_match else 0,
            is_dirty=repo_state.is_dirty,
            is_tagged=classification.is_tagged,
            is_development=classification.is_development,
            tag_name=tag_match.tag_name if tag_match else '',
            branch_name=repo_state.branch_name or ''
        )

    resolved = ResolvedVersion(
        version=str(base_version),
        full_version=classification.full_version,
        major=base_version.major,
        minor=base_version.minor,
        patch=base_version.patch,
        **extended
    )
    logger.info(f"GitVersion: Resolved version {resolved.version} ({resolved.full_version})")
    return resolved
