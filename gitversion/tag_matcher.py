"""
Tag lookup: nearest semantic-version-shaped tag reachable from HEAD.
"""

import re
from typing import Optional

from loguru import logger

from .models import TagMatch
from .parser import strip_prefix
from .vcs import VcsBackend

_V_TAG = re.compile(r'^v[0-9]')


def tag_pattern(prefix: str = '') -> str:
    """Glob matching ``<prefix>`` followed by at least three dot-separated groups."""
    return f'{prefix}*.*.*'


def stripped_version(tag_name: str, prefix: str = '') -> str:
    """
    Remove the configured prefix from a tag name.

    Without a configured prefix a conventional "v" directly before the major
    version is dropped too, so "v1.2.3" reads as "1.2.3".
    """
    if not prefix and _V_TAG.match(tag_name):
        return tag_name[1:]
    return strip_prefix(tag_name, prefix)


def find_latest_tag(prefix: str, search_root: str, vcs: VcsBackend,
                    hash_length: int = 9, check_repository: bool = True) -> Optional[TagMatch]:
    """
    Find the nearest tag reachable from HEAD whose name matches ``<prefix>*.*.*``.

    Only the repository that owns ``search_root`` is consulted; tags of an
    enclosing repository are never seen from a nested one.

    Args:
        prefix: Tag name prefix (may be empty)
        search_root: Directory whose history is searched
        vcs: VCS backend to query
        hash_length: Abbreviated hash width
        check_repository: Verify the work tree first (False when the caller already has)

    Returns:
        TagMatch, or None if the root is not a work tree, has no commits,
        or has no matching tag

    Raises:
        VcsInvocationError: If the VCS tool fails unexpectedly
    """
    if check_repository and not vcs.is_repository(search_root):
        logger.debug(f"{search_root} is not inside a git work tree")
        return None

    pattern = tag_pattern(prefix)
    tag_name = vcs.latest_tag(search_root, pattern)
    if not tag_name:
        logger.debug(f"No tag matching '{pattern}' reachable from HEAD in {search_root}")
        return None

    commits = vcs.commits_since(search_root, tag_name)
    commit_hash = vcs.abbreviated_hash(search_root, hash_length) or ''

    match = TagMatch(
        tag_name=tag_name,
        prefix_stripped_version=stripped_version(tag_name, prefix),
        commits_since_tag=commits,
        abbreviated_hash=commit_hash
    )
    logger.debug(f"Matched tag {tag_name} ({commits} commit(s) since, HEAD {commit_hash})")
    return match
