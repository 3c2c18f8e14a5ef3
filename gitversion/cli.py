"""
Command-line interface for gitversion.

Main entry point that orchestrates all components: configuration, version
resolution and output rendering for the calling build system.
"""

import argparse
import os
import sys
from typing import List, Optional

from loguru import logger
from rich.console import Console

from .config import VALID_LOG_LEVELS, Config, load_config
from .consistency import VersionMismatchError
from .logging_config import setup_logging
from .output import OUTPUT_FORMATS, print_table, render
from .resolver import resolve
from .vcs import GitBackend, VcsInvocationError

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_VCS_ERROR = 3
EXIT_VERSION_MISMATCH = 4

# Logs go to stderr, resolved values to stdout
console = Console(stderr=True)
stdout_console = Console()


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='gitversion',
        description='Derive a semantic version for a build from Git tags, commit distance and working-tree state'
    )

    # Output slots
    slots = parser.add_argument_group('output variables')
    slots.add_argument('--version-var', help='Variable for MAJOR.MINOR.PATCH (default: PROJECT_VERSION)')
    slots.add_argument('--full-version-var', help='Variable for the decorated full version (default: PROJECT_FULL_VERSION)')
    slots.add_argument('--major-var', help='Variable for the major version (default: PROJECT_VERSION_MAJOR)')
    slots.add_argument('--minor-var', help='Variable for the minor version (default: PROJECT_VERSION_MINOR)')
    slots.add_argument('--patch-var', help='Variable for the patch version (default: PROJECT_VERSION_PATCH)')

    # Extended output slots, any of them enables extended output
    extended = parser.add_argument_group('extended output variables')
    extended.add_argument('--extended', action='store_true', default=None, help='Emit extended fields with default variable names')
    extended.add_argument('--commit-hash-var', help='Variable for the abbreviated commit hash')
    extended.add_argument('--commit-count-var', help='Variable for the number of commits since the tag')
    extended.add_argument('--is-dirty-var', help='Variable for the dirty working-tree flag')
    extended.add_argument('--is-tagged-var', help='Variable for the exact-tag flag')
    extended.add_argument('--is-development-var', help='Variable for the development-build flag')
    extended.add_argument('--tag-name-var', help='Variable for the matched tag name')
    extended.add_argument('--branch-name-var', help='Variable for the current branch name')

    # Resolution
    parser.add_argument('--root-dir', help='Project root directory (default: current directory)')
    parser.add_argument('--source-dir', help='Sub-directory (or nested repository) to take the version from')
    parser.add_argument('--prefix', help='Tag name prefix stripped before parsing, e.g. "v" (default: none)')
    parser.add_argument('--default-version', help='Version used when no matching tag exists (default: 0.0.0)')
    parser.add_argument('--fail-on-mismatch', action='store_true', default=None,
                        help='Fail if the default version is inconsistent with the Git tag')
    parser.add_argument('--hash-length', type=int, help='Abbreviated commit hash width (default: 9)')
    parser.add_argument('--git-executable', help='Path to the git executable (default: git on PATH)')

    # Output
    parser.add_argument('--format', choices=OUTPUT_FORMATS, help='Output format (default: env)')
    parser.add_argument('--output', '-o', help='Write output to this file instead of stdout')

    # Logging
    parser.add_argument('--log-level', choices=VALID_LOG_LEVELS + [level.lower() for level in VALID_LOG_LEVELS],
                        help='Logging level (default: INFO)')

    return parser.parse_args(argv)


def setup_application(argv: Optional[List[str]] = None) -> Optional[Config]:
    """Set up logging, parse arguments and load configuration."""
    setup_logging(console=console)

    args = parse_arguments(argv)

    if args.log_level:
        setup_logging(args.log_level.upper(), console=console)

    config = load_config(args)
    if config is None:
        return None

    setup_logging(config.log_level, console=console)
    return config


def write_output(text: str, output_file: Optional[str]) -> None:
    """Write rendered output to a file or stdout."""
    if not output_file:
        sys.stdout.write(text)
        sys.stdout.flush()
        return

    directory = os.path.dirname(os.path.abspath(output_file))
    os.makedirs(directory, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(text)
    logger.debug(f"Wrote version information to {output_file}")


def run(config: Config, vcs=None) -> int:
    """
    Resolve the version and emit it.

    Args:
        config: Validated configuration
        vcs: VCS backend (default: GitBackend)

    Returns:
        int: Process exit code
    """
    vcs = vcs or GitBackend(config.git_executable)
    options = config.to_resolve_options()

    try:
        resolved = resolve(options, vcs)
    except VersionMismatchError as e:
        logger.error(str(e))
        return EXIT_VERSION_MISMATCH
    except VcsInvocationError as e:
        logger.error(f"GitVersion: {e}")
        logger.error('Make sure git is installed and the directory is readable.')
        return EXIT_VCS_ERROR

    # Tables go to the terminal unless an output file is set
    if config.output_format == 'table' and not config.output_file:
        print_table(resolved, config.slots, stdout_console)
        return EXIT_OK

    head_file = None
    if config.output_format == 'cmake':
        try:
            if os.path.isdir(options.search_root):
                head_file = vcs.head_file(options.search_root)
        except VcsInvocationError as e:
            logger.error(f"GitVersion: {e}")
            return EXIT_VCS_ERROR

    try:
        write_output(render(resolved, config.slots, config.output_format, head_file), config.output_file)
    except OSError as e:
        logger.error(f"Failed to write output to {config.output_file}: {e}")
        return EXIT_CONFIG_ERROR

    logger.info(f"GitVersion: Configured {config.slots.version}={resolved.version}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the application."""
    config = setup_application(argv)
    if config is None:
        sys.exit(EXIT_CONFIG_ERROR)

    exit_code = run(config)
    if exit_code != EXIT_OK:
        sys.exit(exit_code)


if __name__ == '__main__':
    main()
