"""
flaghammer - decode command-line arguments into typed records.

This package turns an argv token list into a flat, typed record described by a
Schema, which can be written by hand or reflected from a dataclass. Usage text
is rendered from the same Schema.
"""

from .decoder import Record, decode
from .errors import (
    DecodeError,
    DuplicateFieldName,
    DuplicateLongFlag,
    DuplicateShortFlag,
    HammerError,
    InvalidNumber,
    MalformedCluster,
    MissingRequired,
    MissingValue,
    MultipleCollectors,
    ScanError,
    SchemaError,
    UnexpectedPositionalArguments,
    UnexpectedValue,
    UnknownField,
    UnknownFlag,
    UnsupportedType,
)
from .parser import FlagParser
from .registry import FlagRegistry
from .scanner import Match, ScanResult, scan
from .schema import (
    MISSING,
    Field,
    Kind,
    OptionalArgument,
    Schema,
    SchemaBuilder,
    load_schema_file,
    schema_for,
)
from .usage import render_usage, usage

__version__ = "0.1.0"
__all__ = [
    "MISSING",
    "DecodeError",
    "DuplicateFieldName",
    "DuplicateLongFlag",
    "DuplicateShortFlag",
    "Field",
    "FlagParser",
    "FlagRegistry",
    "HammerError",
    "InvalidNumber",
    "Kind",
    "MalformedCluster",
    "Match",
    "MissingRequired",
    "MissingValue",
    "MultipleCollectors",
    "OptionalArgument",
    "Record",
    "ScanError",
    "ScanResult",
    "Schema",
    "SchemaBuilder",
    "SchemaError",
    "UnexpectedPositionalArguments",
    "UnexpectedValue",
    "UnknownField",
    "UnknownFlag",
    "UnsupportedType",
    "decode",
    "load_schema_file",
    "render_usage",
    "scan",
    "schema_for",
    "usage",
]
