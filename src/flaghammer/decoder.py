"""
Decoder: turns scanner matches into a typed, immutable Record.
"""

import logging
from typing import Any, Iterable, Iterator, Mapping, Sequence, Type

from .errors import InvalidNumber, MissingRequired, UnexpectedPositionalArguments
from .scanner import Match
from .schema import Field, Kind, Schema, scalar_kind

logger = logging.getLogger(__name__)


class Record(Mapping[str, Any]):
    """
    Read-only mapping of field name to decoded value.

    Values are also reachable as attributes, so ``record.name`` and
    ``record["name"]`` are equivalent. Records compare equal to any mapping
    with the same items.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any]) -> None:
        object.__setattr__(self, "_values", dict(values))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"Record has no field '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Record is immutable")

    def __repr__(self) -> str:
        return f"Record({self._values!r})"

    def to(self, cls: Type[Any]) -> Any:
        """Instantiate ``cls`` with the record's values as keyword arguments."""
        return cls(**self._values)


def _coerce(field: Field, raw: str) -> Any:
    kind = scalar_kind(field.kind)
    if kind is Kind.INTEGER:
        try:
            return int(raw)
        except ValueError:
            raise InvalidNumber(field.name, raw)
    if kind is Kind.FLOAT:
        try:
            return float(raw)
        except ValueError:
            raise InvalidNumber(field.name, raw)
    return raw


def decode(
    matches: Iterable[Match], leftovers: Sequence[str], schema: Schema
) -> Record:
    """
    Build a Record from scanner output.

    Fields are resolved in Schema order. A repeated value-bearing field keeps
    its last value. Leftovers go to the collector field, and any required
    field that never matched is reported, first one in Schema order.

    Args:
        matches: Field matches, in argv order.
        leftovers: Tokens not claimed by any flag, in argv order.
        schema: The Schema the matches were scanned against.

    Returns:
        Record: The decoded values for every field in the Schema.

    Raises:
        InvalidNumber: A numeric field received text that is not a number.
        UnexpectedPositionalArguments: Leftovers exist but no field collects them.
        MissingRequired: A required field never appeared.
    """
    last: dict[str, Match] = {}
    for match in matches:
        last[match.field.name] = match

    values: dict[str, Any] = {}
    for field in schema:
        match = last.get(field.name)
        if field.kind is Kind.FLAG:
            values[field.name] = match is not None
        elif field.kind is not Kind.COLLECTOR and match is not None:
            values[field.name] = _coerce(field, match.value)

    collector = schema.collector
    if collector is not None:
        values[collector.name] = tuple(leftovers)
    elif leftovers:
        raise UnexpectedPositionalArguments(leftovers)

    for field in schema:
        if field.name in values:
            continue
        if field.required:
            raise MissingRequired(field.name)
        values[field.name] = field.default if field.has_default else None

    logger.debug("Decoded %d fields from %d matches", len(values), len(last))
    return Record({field.name: values[field.name] for field in schema})
