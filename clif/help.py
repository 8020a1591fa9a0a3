"""
clif help text.

Two plain-text listings built from the command tree, meant to be embedded in a
handler's own usage output:
- subcommands_help(command): one "name  description" line per visible child.
- flags_help(command): one "name  <type>  description" line per own flag.

Aliases are never listed. Both listings are rendered through borderless rich
tables so columns line up, then returned as strings without styling.
"""
from rich.console import Console
from rich.table import Table


def _render(rows, columns, /):
    table = Table(box=None, show_header=False, show_edge=False, pad_edge=False, padding=(0, 2), collapse_padding=True)
    for _ in range(columns):
        table.add_column(no_wrap=True)
    for row in rows:
        table.add_row(*row)
    if not table.row_count:
        return ""

    console = Console(width=1024, color_system=None, highlight=False, markup=False)
    with console.capture() as capture:
        console.print(table)
    return "".join(line.rstrip() + "\n" for line in capture.get().splitlines())


def subcommands_help(command, /):
    """Return the name and description of every visible child of `command`."""
    return _render(
        ((child.name, child.descr or "") for child in command.children if not child.hidden),
        2,
    )


def flags_help(command, /):
    """Return the name, type tag and description of every flag `command` owns."""
    return _render(
        ((flag.name, f"<{flag.typename}>", flag.descr or "") for flag in command.flags),
        3,
    )


__all__ = (
    "subcommands_help",
    "flags_help",
)
