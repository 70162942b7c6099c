"""
Exception hierarchy for flaghammer.

Errors fall into three disjoint families:

* ``SchemaError`` - raised while a Schema is being built.
* ``ScanError`` - raised while classifying argv tokens.
* ``DecodeError`` - raised while coercing matches into a Record.

Every error keeps the offending field name or token as attributes so callers
can build their own messages; ``str(error)`` gives a ready-made one.
"""

from typing import Any, Sequence


class HammerError(Exception):
    """Base class for every error raised by flaghammer."""


class SchemaError(HammerError, ValueError):
    """The field description cannot form a valid Schema."""


class DuplicateLongFlag(SchemaError):
    def __init__(self, flag: str) -> None:
        self.flag = flag
        super().__init__(f"Long flag '--{flag}' is bound to more than one field")


class DuplicateShortFlag(SchemaError):
    def __init__(self, flag: str) -> None:
        self.flag = flag
        super().__init__(f"Short flag '-{flag}' is bound to more than one field")


class MultipleCollectors(SchemaError):
    def __init__(self, names: Sequence[str]) -> None:
        self.names = tuple(names)
        super().__init__(
            f"Only one field may collect leftover arguments, got: {', '.join(self.names)}"
        )


class DuplicateFieldName(SchemaError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Field '{name}' is declared more than once")


class UnknownField(SchemaError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No field named '{name}' to configure")


class UnsupportedType(SchemaError):
    def __init__(self, name: str, type_hint: Any) -> None:
        self.name = name
        self.type_hint = type_hint
        type_name = getattr(type_hint, "__name__", repr(type_hint))
        super().__init__(f"Field '{name}' has unsupported type {type_name}")


class ScanError(HammerError):
    """The argv tokens do not fit the flag syntax of the Schema."""


class UnknownFlag(ScanError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Unknown flag: {token}")


class MissingValue(ScanError):
    def __init__(self, flag: str) -> None:
        self.flag = flag
        super().__init__(f"{flag} is missing a following value")


class UnexpectedValue(ScanError):
    def __init__(self, flag: str, value: str) -> None:
        self.flag = flag
        self.value = value
        super().__init__(f"{flag} does not take a value, got {value!r}")


class MalformedCluster(ScanError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(
            f"Malformed short flag cluster '{token}': "
            "a flag that takes a value must come last"
        )


class DecodeError(HammerError):
    """A matched value could not be turned into a Record."""


class InvalidNumber(DecodeError):
    def __init__(self, field: str, raw: str) -> None:
        self.field = field
        self.raw = raw
        super().__init__(f"Field '{field}' expects a number, got {raw!r}")


class MissingRequired(DecodeError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Field '{field}' is required")


class UnexpectedPositionalArguments(DecodeError):
    def __init__(self, arguments: Sequence[str]) -> None:
        self.arguments = tuple(arguments)
        super().__init__(
            f"Unexpected positional arguments: {' '.join(self.arguments)}"
        )
