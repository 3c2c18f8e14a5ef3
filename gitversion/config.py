"""
Configuration management for gitversion.

Handles environment variable loading, validation, and provides a centralized
configuration object for the command-line tool.
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from .output import OUTPUT_FORMATS, OutputSlots
from .resolver import DEFAULT_HASH_LENGTH, DEFAULT_VERSION, ResolveOptions

# Load environment variables from .env file
load_dotenv()

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

# git --abbrev accepts 4 up to a full SHA-1
MIN_HASH_LENGTH = 4
MAX_HASH_LENGTH = 40

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def get_config_value(cli_args, field_name: str, env_key: str, default, value_type: type = str):
    """
    Get configuration value with proper precedence: CLI args > env vars > defaults.

    Args:
        cli_args: CLI arguments object or None
        field_name: Name of the CLI argument field
        env_key: Environment variable key
        default: Default value if neither CLI nor env var is set
        value_type: Type to convert the value to (str, int, bool)

    Returns:
        The configuration value converted to the specified type
    """
    cli_value = getattr(cli_args, field_name, None) if cli_args else None
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(env_key, '')

    # Handle boolean conversion specially
    if value_type == bool:
        if env_value.strip().lower() in ('true', '1', 'yes', 'on'):
            return True
        elif env_value.strip().lower() in ('false', '0', 'no', 'off'):
            return False
        return default

    # Handle other types
    if not env_value:
        return default

    try:
        return value_type(env_value)
    except (ValueError, TypeError):
        return default


def get_config_value_str(cli_args, field_name: str, env_key: str, default: Optional[str] = '') -> Optional[str]:
    """Get string configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, str)


def get_config_value_int(cli_args, field_name: str, env_key: str, default: int = 0) -> int:
    """Get integer configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, int)


def get_config_value_bool(cli_args, field_name: str, env_key: str, default: bool = False) -> bool:
    """Get boolean configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, bool)


@dataclass
class Config:
    """Configuration object containing all application settings."""

    # Repository location
    root_dir: str
    source_dir: Optional[str]

    # Resolution behavior
    prefix: str
    default_version: str
    fail_on_mismatch: bool
    hash_length: int
    extended: bool

    # Output
    output_format: str
    output_file: Optional[str]
    slots: OutputSlots = field(default_factory=OutputSlots)

    # Tooling
    git_executable: Optional[str] = None

    # Logging
    log_level: str = 'INFO'

    def to_resolve_options(self) -> ResolveOptions:
        """Build the resolver's options from this configuration."""
        return ResolveOptions(
            root_dir=self.root_dir,
            source_dir=self.source_dir,
            prefix=self.prefix,
            default_version=self.default_version,
            fail_on_mismatch=self.fail_on_mismatch,
            hash_length=self.hash_length,
            extended=self.extended
        )


def _load_slots(cli_args) -> tuple:
    """
    Load output slot names.

    Returns:
        tuple: (OutputSlots, extended_requested) where extended_requested is
        True if any extended slot name was supplied explicitly
    """
    defaults = OutputSlots()
    names = {}
    for name in OutputSlots.BASE_FIELDS:
        names[name] = get_config_value_str(cli_args, f'{name}_var', f'GITVERSION_{name.upper()}_VAR', getattr(defaults, name))

    extended_requested = False
    for name in OutputSlots.EXTENDED_FIELDS:
        value = get_config_value_str(cli_args, f'{name}_var', f'GITVERSION_{name.upper()}_VAR', None)
        if value:
            extended_requested = True
        names[name] = value or getattr(defaults, name)

    return OutputSlots(**names), extended_requested


def _validate_slots(slots: OutputSlots, validation_errors: list) -> None:
    """
    Validate output variable names.

    Args:
        slots: Output slot names
        validation_errors: List to append validation errors
    """
    names = slots.names()
    for name in names:
        if not _IDENTIFIER.match(name):
            validation_errors.append(f'Output variable name must be a valid identifier (got: {name!r})')

    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        validation_errors.append(f'Output variable names must be unique (duplicated: {", ".join(duplicates)})')


def _validate_resolution_config(root_dir: str, hash_length: int, default_version: str,
                                validation_errors: list) -> None:
    """
    Validate resolution parameters.

    Args:
        root_dir: Project root directory
        hash_length: Abbreviated hash width
        default_version: Fallback version string
        validation_errors: List to append validation errors
    """
    if not os.path.isdir(root_dir):
        validation_errors.append(f'GITVERSION_ROOT_DIR ({root_dir}) does not exist or is not a directory')

    if hash_length < MIN_HASH_LENGTH or hash_length > MAX_HASH_LENGTH:
        validation_errors.append(
            f'GITVERSION_HASH_LENGTH must be between {MIN_HASH_LENGTH}-{MAX_HASH_LENGTH} (got: {hash_length})'
        )

    if not default_version.strip():
        validation_errors.append('GITVERSION_DEFAULT_VERSION must not be empty')


def load_config(cli_args=None) -> Optional[Config]:
    """
    Load and validate configuration from CLI arguments and environment variables.
    CLI arguments take precedence over environment variables.

    Args:
        cli_args: Parsed CLI arguments or None

    Returns:
        Config: Validated configuration object, or None if validation failed
    """
    root_dir = get_config_value_str(cli_args, 'root_dir', 'GITVERSION_ROOT_DIR', os.getcwd())
    source_dir = get_config_value_str(cli_args, 'source_dir', 'GITVERSION_SOURCE_DIR', None) or None

    prefix = get_config_value_str(cli_args, 'prefix', 'GITVERSION_PREFIX', '')
    default_version = get_config_value_str(cli_args, 'default_version', 'GITVERSION_DEFAULT_VERSION', DEFAULT_VERSION)
    fail_on_mismatch = get_config_value_bool(cli_args, 'fail_on_mismatch', 'GITVERSION_FAIL_ON_MISMATCH', False)
    hash_length = get_config_value_int(cli_args, 'hash_length', 'GITVERSION_HASH_LENGTH', DEFAULT_HASH_LENGTH)
    extended = get_config_value_bool(cli_args, 'extended', 'GITVERSION_EXTENDED', False)

    output_format = get_config_value_str(cli_args, 'format', 'GITVERSION_FORMAT', 'env').lower()
    output_file = get_config_value_str(cli_args, 'output', 'GITVERSION_OUTPUT', None) or None
    git_executable = get_config_value_str(cli_args, 'git_executable', 'GITVERSION_GIT_EXECUTABLE', None) or None

    # Handle log_level (case insensitive)
    log_level = get_config_value_str(cli_args, 'log_level', 'LOG_LEVEL', 'INFO').upper()

    slots, extended_requested = _load_slots(cli_args)
    extended = extended or extended_requested

    validation_errors: List[str] = []

    if log_level not in VALID_LOG_LEVELS:
        validation_errors.append(f'LOG_LEVEL must be one of {VALID_LOG_LEVELS} (got: {log_level})')

    if output_format not in OUTPUT_FORMATS:
        validation_errors.append(f'GITVERSION_FORMAT must be one of {OUTPUT_FORMATS} (got: {output_format})')

    _validate_resolution_config(root_dir, hash_length, default_version, validation_errors)
    _validate_slots(slots, validation_errors)

    if validation_errors:
        logger.error('❌ Configuration Error:')
        for i, error_msg in enumerate(validation_errors, 1):
            logger.error(f'   {i}. {error_msg}')
        return None

    config = Config(
        root_dir=root_dir,
        source_dir=source_dir,
        prefix=prefix,
        default_version=default_version.strip(),
        fail_on_mismatch=fail_on_mismatch,
        hash_length=hash_length,
        extended=extended,
        output_format=output_format,
        output_file=output_file,
        slots=slots,
        git_executable=git_executable,
        log_level=log_level
    )

    logger.debug(f'GITVERSION_ROOT_DIR = {config.root_dir}')
    logger.debug(f'GITVERSION_SOURCE_DIR = {config.source_dir}')
    logger.debug(f'GITVERSION_PREFIX = {config.prefix!r}')
    logger.debug(f'GITVERSION_DEFAULT_VERSION = {config.default_version}')
    logger.debug(f'GITVERSION_FAIL_ON_MISMATCH = {config.fail_on_mismatch}')
    logger.debug(f'GITVERSION_HASH_LENGTH = {config.hash_length}')
    logger.debug(f'GITVERSION_EXTENDED = {config.extended}')
    logger.debug(f'GITVERSION_FORMAT = {config.output_format}')

    return config
