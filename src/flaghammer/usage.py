"""Usage text rendering, derived from a Schema alone."""

from typing import Optional

from .schema import Field, Kind, Schema, scalar_kind

_PLACEHOLDERS = {
    Kind.INTEGER: "<INT>",
    Kind.FLOAT: "<FLOAT>",
    Kind.TEXT: "<STRING>",
    Kind.FLAG: "",
    Kind.COLLECTOR: "[ARGS...]",
}

_DESCRIPTION_GAP = "    "


def placeholder(field: Field) -> str:
    return _PLACEHOLDERS[scalar_kind(field.kind)]


def format_field(field: Field) -> str:
    """Render one usage line, e.g. ``--count, -c <INT>    How many``."""
    line = f"--{field.long_flag}"
    if field.short_flag is not None:
        line += f", -{field.short_flag}"
    value = placeholder(field)
    if value:
        line += f" {value}"
    if field.description:
        line += f"{_DESCRIPTION_GAP}{field.description}"
    return line


def render_usage(schema: Schema, show_description: bool = False) -> str:
    """
    Render one line per field in Schema order.

    When ``show_description`` is set and the Schema has a description, it is
    appended as a trailing paragraph after a blank line.
    """
    out = "".join(f"{format_field(field)}\n" for field in schema)
    if show_description and schema.description:
        out += f"\n{schema.description}\n"
    return out


def usage(schema: Schema) -> tuple[Optional[str], str]:
    """Return the record description and the option lines separately."""
    return schema.description, render_usage(schema)
