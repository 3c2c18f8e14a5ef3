"""
Build-state classification and full version rendering.

The classification is a closed state machine over (tag found, commit distance,
dirty). Each BuildState has exactly one rendering rule in _RENDERERS.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .models import BuildState, RepoState, TagMatch, VersionTriple


@dataclass(frozen=True)
class Classification:
    """Outcome of classify()."""
    state: BuildState
    full_version: str
    is_tagged: bool
    is_development: bool


def build_state(tag_match: Optional[TagMatch], is_dirty: bool) -> BuildState:
    """Map raw repository facts onto a BuildState."""
    if tag_match is None:
        return BuildState.DIRTY_UNTAGGED if is_dirty else BuildState.UNTAGGED
    if tag_match.is_exact:
        return BuildState.DIRTY_EXACT if is_dirty else BuildState.EXACT_RELEASE
    return BuildState.DIRTY_DEVELOPMENT if is_dirty else BuildState.DEVELOPMENT


def _development_suffix(tag_match: TagMatch) -> str:
    return f"-dev.{tag_match.commits_since_tag}+{tag_match.abbreviated_hash}"


def _untagged_dirty(base: str, tag_match: Optional[TagMatch], commit_hash: Optional[str]) -> str:
    # A repository with no commits has no hash to report
    if not commit_hash:
        return base
    return f"{base}+{commit_hash}.dirty"


_RENDERERS: Dict[BuildState, Callable[[str, Optional[TagMatch], Optional[str]], str]] = {
    BuildState.EXACT_RELEASE: lambda base, tag, commit: base,
    BuildState.DIRTY_EXACT: lambda base, tag, commit: f"{base}-dirty",
    BuildState.DEVELOPMENT: lambda base, tag, commit: base + _development_suffix(tag),
    BuildState.DIRTY_DEVELOPMENT: lambda base, tag, commit: base + _development_suffix(tag) + ".dirty",
    BuildState.UNTAGGED: lambda base, tag, commit: base,
    BuildState.DIRTY_UNTAGGED: _untagged_dirty,
}


def render_full_version(state: BuildState, base_version: VersionTriple,
                        tag_match: Optional[TagMatch] = None,
                        commit_hash: Optional[str] = None) -> str:
    """Render the decorated full version string for a given state."""
    return _RENDERERS[state](str(base_version), tag_match, commit_hash)


def classify(tag_match: Optional[TagMatch], repo_state: RepoState,
             base_version: VersionTriple, commit_hash: Optional[str] = None) -> Classification:
    """
    Classify a build and compute its full version.

    Args:
        tag_match: Matched tag, or None when no tag was found
        repo_state: Working-tree state
        base_version: Tag-derived version, or the default version without a tag
        commit_hash: Abbreviated HEAD hash (used only without a tag)

    Returns:
        Classification: state, full version and tagged/development flags
    """
    state = build_state(tag_match, repo_state.is_dirty)
    return Classification(
        state=state,
        full_version=render_full_version(state, base_version, tag_match, commit_hash),
        is_tagged=state in (BuildState.EXACT_RELEASE, BuildState.DIRTY_EXACT),
        is_development=state in (BuildState.DEVELOPMENT, BuildState.DIRTY_DEVELOPMENT)
    )
