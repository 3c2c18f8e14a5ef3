"""
Output slots and renderers.

Maps ResolvedVersion fields onto caller-chosen variable names and renders
them in a format the calling build can consume.
"""

import json
import shlex
from dataclasses import dataclass
from io import StringIO
from typing import Dict, List, Optional, Tuple, Union

from rich.console import Console
from rich.table import Table

from .models import ResolvedVersion

OUTPUT_FORMATS = ['env', 'cmake', 'json', 'table']

SlotValue = Union[str, int, bool]


@dataclass
class OutputSlots:
    """Variable names the resolved fields are written to."""
    version: str = 'PROJECT_VERSION'
    full_version: str = 'PROJECT_FULL_VERSION'
    major: str = 'PROJECT_VERSION_MAJOR'
    minor: str = 'PROJECT_VERSION_MINOR'
    patch: str = 'PROJECT_VERSION_PATCH'

    # Extended slots, written only when extended output is resolved
    commit_hash: str = 'PROJECT_COMMIT_HASH'
    commit_count: str = 'PROJECT_COMMIT_COUNT'
    is_dirty: str = 'PROJECT_IS_DIRTY'
    is_tagged: str = 'PROJECT_IS_TAGGED'
    is_development: str = 'PROJECT_IS_DEVELOPMENT'
    tag_name: str = 'PROJECT_TAG_NAME'
    branch_name: str = 'PROJECT_BRANCH_NAME'

    BASE_FIELDS = ('version', 'full_version', 'major', 'minor', 'patch')
    EXTENDED_FIELDS = ('commit_hash', 'commit_count', 'is_dirty', 'is_tagged',
                       'is_development', 'tag_name', 'branch_name')

    def names(self) -> List[str]:
        return [getattr(self, name) for name in self.BASE_FIELDS + self.EXTENDED_FIELDS]


def collect_values(resolved: ResolvedVersion, slots: OutputSlots) -> List[Tuple[str, SlotValue]]:
    """Pair each slot name with its value, skipping unpopulated extended fields."""
    values = []
    for field_name in OutputSlots.BASE_FIELDS + OutputSlots.EXTENDED_FIELDS:
        value = getattr(resolved, field_name)
        if value is None:
            continue
        values.append((getattr(slots, field_name), value))
    return values


def _cmake_value(value: SlotValue) -> str:
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    escaped = str(value).replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def render_cmake(values: List[Tuple[str, SlotValue]], head_file: Optional[str] = None) -> str:
    """
    Render ``set()`` commands for inclusion from a CMakeLists.txt.

    With ``head_file``, also registers the repository HEAD as a configure
    dependency so a new commit triggers a reconfigure.
    """
    lines = [f'set({name} {_cmake_value(value)})' for name, value in values]
    if head_file:
        path = head_file.replace('\\', '/')
        lines.append(f'set_property(DIRECTORY APPEND PROPERTY CMAKE_CONFIGURE_DEPENDS "{path}")')
    return '\n'.join(lines) + '\n'


def render_env(values: List[Tuple[str, SlotValue]]) -> str:
    """Render ``NAME=value`` lines, shell-quoted."""
    lines = []
    for name, value in values:
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        lines.append(f'{name}={shlex.quote(str(value))}')
    return '\n'.join(lines) + '\n'


def render_json(values: List[Tuple[str, SlotValue]]) -> str:
    """Render a single JSON object of name -> value."""
    data: Dict[str, SlotValue] = dict(values)
    return json.dumps(data, indent=2) + '\n'


def render(resolved: ResolvedVersion, slots: OutputSlots, output_format: str,
           head_file: Optional[str] = None) -> str:
    """
    Render resolved values in a text format.

    Args:
        resolved: Resolution result
        slots: Output variable names
        output_format: One of 'env', 'cmake', 'json', 'table'
        head_file: Repository HEAD file for the cmake configure dependency

    Returns:
        str: Rendered text

    Raises:
        ValueError: For an unknown format
    """
    values = collect_values(resolved, slots)
    if output_format == 'cmake':
        return render_cmake(values, head_file)
    if output_format == 'env':
        return render_env(values)
    if output_format == 'json':
        return render_json(values)
    if output_format == 'table':
        return render_table(resolved, slots)
    raise ValueError(f"Unsupported output format: {output_format}")


def print_table(resolved: ResolvedVersion, slots: OutputSlots, console: Console) -> None:
    """Print resolved values as a rich table for human inspection."""
    table = Table(title='GitVersion', show_header=True, header_style='bold cyan')
    table.add_column('Variable', style='green')
    table.add_column('Value')
    for name, value in collect_values(resolved, slots):
        table.add_row(name, str(value))
    console.print(table)


def render_table(resolved: ResolvedVersion, slots: OutputSlots) -> str:
    """Render the table as plain text, for writing to a file."""
    console = Console(file=StringIO(), record=True, color_system=None, width=120)
    print_table(resolved, slots, console)
    return console.export_text()
