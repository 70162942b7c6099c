"""
Token scanner: classifies argv tokens into flag matches and leftovers.

The scanner only decides which field each token belongs to. Raw values stay
text; coercion is the decoder's job.
"""

import dataclasses
import logging
import re
from typing import Optional, Sequence

from .errors import MalformedCluster, MissingValue, UnexpectedValue, UnknownFlag
from .registry import FlagRegistry
from .schema import Field, Kind

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Match:
    """A field seen on the command line; ``value`` is None for bare flags."""

    field: Field
    value: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ScanResult:
    matches: tuple[Match, ...]
    leftovers: tuple[str, ...]


# decimal literals only; "-inf" and "-nan" stay flag-shaped
_NEGATIVE_NUMBER = re.compile(r"-(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _looks_like_flag(token: str) -> bool:
    return (
        token.startswith("-")
        and token != "-"
        and _NEGATIVE_NUMBER.fullmatch(token) is None
    )


class _Scanner:
    def __init__(self, argv: Sequence[str], registry: FlagRegistry) -> None:
        self.tokens = list(argv)
        self.registry = registry
        self.pos = 0
        self.matches: list[Match] = []
        self.leftovers: list[str] = []

    def run(self) -> ScanResult:
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1

            if token == "--":
                rest = self.tokens[self.pos :]
                logger.debug("End of flags marker, %d leftover tokens follow", len(rest))
                self.leftovers.extend(rest)
                self.pos = len(self.tokens)
            elif token.startswith("--"):
                self._scan_long(token)
            elif token.startswith("-") and token != "-":
                self._scan_short(token)
            else:
                logger.debug("Leftover token %r", token)
                self.leftovers.append(token)

        return ScanResult(tuple(self.matches), tuple(self.leftovers))

    def _emit(self, field: Field, value: Optional[str]) -> None:
        if field.kind is Kind.COLLECTOR:
            # an explicitly named collector keeps its value in leftover order
            self.leftovers.append(value)
        else:
            self.matches.append(Match(field, value))
        logger.debug("Matched field %r with value %r", field.name, value)

    def _take_value(self, flag: str) -> str:
        if self.pos >= len(self.tokens):
            raise MissingValue(flag)
        value = self.tokens[self.pos]
        if _looks_like_flag(value):
            raise MissingValue(flag)
        self.pos += 1
        return value

    def _scan_long(self, token: str) -> None:
        name, sep, value = token[2:].partition("=")
        field = self.registry.resolve_long(name)
        if field is None:
            raise UnknownFlag(token)

        flag = f"--{name}"
        if self.registry.needs_value(field):
            self._emit(field, value if sep else self._take_value(flag))
        elif sep:
            raise UnexpectedValue(flag, value)
        else:
            self._emit(field, None)

    def _scan_short(self, token: str) -> None:
        chars = token[1:]
        for idx, char in enumerate(chars):
            field = self.registry.resolve_short(char)
            if field is None:
                raise UnknownFlag(f"-{char}")

            if not self.registry.needs_value(field):
                self._emit(field, None)
                continue

            rest = chars[idx + 1 :]
            if not rest:
                self._emit(field, self._take_value(f"-{char}"))
            elif idx > 0 or self.registry.is_short(rest[0]):
                raise MalformedCluster(token)
            else:
                self._emit(field, rest)
            return


def scan(argv: Sequence[str], registry: FlagRegistry) -> ScanResult:
    """
    Classify ``argv`` left to right against ``registry``.

    Args:
        argv: The argument tokens, without the program name.
        registry: Flag lookup tables for the target Schema.

    Returns:
        ScanResult: Field matches in argv order plus the leftover tokens.

    Raises:
        UnknownFlag: A dash-prefixed token names no declared flag.
        MissingValue: A value-bearing flag is last or followed by another flag.
        UnexpectedValue: A boolean flag was given ``--flag=value``.
        MalformedCluster: A value-bearing short flag is not last in its cluster.
    """
    return _Scanner(argv, registry).run()
