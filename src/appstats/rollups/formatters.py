"""Report renderers.

Every renderer takes the already sorted and capped result set and returns
the text to print. Human-readable renderers skip entries without a name or
without running time; ``json`` renders every entry unchanged.
"""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

from rich import box
from rich.cells import cell_len
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..config.settings import ConfigError

if TYPE_CHECKING:
    from .aggregator import StatEntry

__all__ = [
    "OutputFormat",
    "format_duration",
    "format_percentage",
    "render",
    "render_json",
    "render_pretty",
    "render_simple",
]

_HEADER = ("Name", "Duration", "Percentage")
_CONSOLE_WIDTH = 1000


class OutputFormat(str, Enum):
    """Supported output formats."""

    PRETTY = "pretty"
    SIMPLE = "simple"
    JSON = "json"

    @classmethod
    def from_name(cls, name: str | OutputFormat) -> OutputFormat:
        """Resolve a format name.

        Raises
        ------
        ConfigError
            If the name is not a known format
        """
        try:
            return cls(name)
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ConfigError(f"Unknown output format {name!r}. Choose one of: {choices}") from None

    @property
    def is_structured(self) -> bool:
        """Structured output keeps full names and every entry."""
        return self is OutputFormat.JSON


def split_duration(seconds: int) -> tuple[int, int, int]:
    """Split seconds into (hours, minutes, seconds)."""
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return hours, minutes, secs


def format_duration(seconds: int) -> str:
    """Render seconds as ``"1h 2m 3s"``."""
    hours, minutes, secs = split_duration(seconds)
    return f"{hours}h {minutes}m {secs}s"


def format_percentage(percentage: float) -> str:
    return f"{percentage:.2f}"


def _visible(entries: Sequence[StatEntry]) -> list[StatEntry]:
    return [entry for entry in entries if entry.name and entry.running_time != 0]


def render_pretty(entries: Sequence[StatEntry]) -> str:
    """Render an ASCII-boxed table.

    The console is sized to the widest row, so names are never cut by the
    renderer.
    """
    rows = [
        (entry.name, format_duration(entry.running_time), format_percentage(entry.percentage))
        for entry in _visible(entries)
    ]
    column_widths = [max(cell_len(value) for value in column) for column in zip(_HEADER, *rows)]
    # Each column adds one padding cell per side plus a border
    width = max(_CONSOLE_WIDTH, sum(column_widths) + 3 * len(column_widths) + 1)

    table = Table(box=box.ASCII, show_header=True, show_edge=True, pad_edge=True)
    table.add_column(_HEADER[0], no_wrap=True, overflow="fold")
    table.add_column(_HEADER[1], no_wrap=True)
    table.add_column(_HEADER[2], justify="right", no_wrap=True)

    for name, duration, percentage in rows:
        table.add_row(Text(name), duration, percentage)

    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, highlight=False, emoji=False)
    console.print(table)
    return buffer.getvalue().rstrip("\n")


def render_simple(entries: Sequence[StatEntry]) -> str:
    """Render tab-separated rows under a header line."""
    lines = ["\t".join(_HEADER)]
    for entry in _visible(entries):
        lines.append(f"{entry.name}\t{format_duration(entry.running_time)}\t{format_percentage(entry.percentage)}")
    return "\n".join(lines)


def render_json(entries: Sequence[StatEntry]) -> str:
    """Render a JSON array with full names, integer seconds and float shares."""
    return json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False)


_RENDERERS: dict[OutputFormat, Callable[[Sequence[StatEntry]], str]] = {
    OutputFormat.PRETTY: render_pretty,
    OutputFormat.SIMPLE: render_simple,
    OutputFormat.JSON: render_json,
}


def render(output_format: OutputFormat | str, entries: Sequence[StatEntry]) -> str:
    """Render ``entries`` in ``output_format``."""
    return _RENDERERS[OutputFormat.from_name(output_format)](entries)
