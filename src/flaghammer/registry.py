"""Lookup tables from flag names to Schema fields."""

from typing import Optional

from .errors import DuplicateLongFlag, DuplicateShortFlag
from .schema import Field, Kind, Schema, takes_value


class FlagRegistry:
    """
    Index a Schema's fields by long flag and by short character.

    A valid Schema already guarantees both namespaces are injective; the
    registry checks again so that it never silently shadows a field.
    """

    def __init__(self, schema: Schema) -> None:
        self.schema = schema
        self._long: dict[str, Field] = {}
        self._short: dict[str, Field] = {}

        for f in schema:
            if f.long_flag in self._long:
                raise DuplicateLongFlag(f.long_flag)
            self._long[f.long_flag] = f
            if f.short_flag is not None:
                if f.short_flag in self._short:
                    raise DuplicateShortFlag(f.short_flag)
                self._short[f.short_flag] = f

    def resolve_long(self, name: str) -> Optional[Field]:
        return self._long.get(name)

    def resolve_short(self, char: str) -> Optional[Field]:
        return self._short.get(char)

    def is_short(self, char: str) -> bool:
        return char in self._short

    @staticmethod
    def needs_value(field: Field) -> bool:
        """Whether a flag for ``field`` consumes a value token."""
        return takes_value(field.kind) or field.kind is Kind.COLLECTOR
