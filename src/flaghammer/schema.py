"""
Schema description for flaghammer.

A Schema is an ordered, immutable list of Fields plus a record-level
description. It can be written out by hand with ``SchemaBuilder``, reflected
from a dataclass with ``SchemaBuilder.from_dataclass`` / ``schema_for``, or
loaded from a JSON or YAML descriptor file with ``load_schema_file``.
"""

import collections.abc
import dataclasses
import enum
import functools
import json
import logging
import os
import types
import typing
from typing import Any, Iterator, Mapping, Optional, Type, Union

from .errors import (
    DuplicateFieldName,
    DuplicateLongFlag,
    DuplicateShortFlag,
    MultipleCollectors,
    SchemaError,
    UnknownField,
    UnsupportedType,
)

try:
    import yaml

    HAS_YAML = True
except ImportError:
    HAS_YAML = False

logger = logging.getLogger(__name__)


class _Missing:
    """Marks a field without a default value."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class Kind(enum.Enum):
    """The value kind of a field."""

    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    FLAG = "flag"
    COLLECTOR = "collector"


_SCALAR_KINDS = (Kind.INTEGER, Kind.FLOAT, Kind.TEXT)


@dataclasses.dataclass(frozen=True)
class OptionalArgument:
    """A value-bearing kind whose absence decodes to ``None``."""

    inner: Kind

    def __post_init__(self) -> None:
        if self.inner not in _SCALAR_KINDS:
            raise SchemaError(
                f"OptionalArgument wraps integer, float or text, got {self.inner.value}"
            )


FieldKind = Union[Kind, OptionalArgument]


def takes_value(kind: FieldKind) -> bool:
    """Return True if a flag of this kind must be followed by a value."""
    return isinstance(kind, OptionalArgument) or kind in _SCALAR_KINDS


def scalar_kind(kind: FieldKind) -> Kind:
    """Unwrap OptionalArgument to the kind its value is coerced with."""
    if isinstance(kind, OptionalArgument):
        return kind.inner
    return kind


@dataclasses.dataclass(frozen=True)
class Field:
    """One declared slot in a target record."""

    name: str
    kind: FieldKind
    long_flag: str = ""
    short_flag: Optional[str] = None
    description: Optional[str] = None
    default: Any = MISSING

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SchemaError(
                f"Field name must be a non-empty string, got {self.name!r}"
            )
        for attr in ("long_flag", "short_flag", "description"):
            value = getattr(self, attr)
            if value is not None and not isinstance(value, str):
                raise SchemaError(
                    f"Field '{self.name}' has non-text {attr} {value!r}"
                )
        if not isinstance(self.kind, (Kind, OptionalArgument)):
            raise SchemaError(f"Field '{self.name}' has invalid kind {self.kind!r}")
        if not self.long_flag:
            object.__setattr__(self, "long_flag", self.name)
        if self.long_flag.startswith("-") or "=" in self.long_flag:
            raise SchemaError(
                f"Field '{self.name}' has invalid long flag {self.long_flag!r}"
            )
        if self.short_flag is not None and (
            len(self.short_flag) != 1 or self.short_flag in "-="
        ):
            raise SchemaError(
                f"Field '{self.name}' has invalid short flag {self.short_flag!r}"
            )

        # flags always default to False, collectors to empty
        if self.kind is Kind.FLAG and self.default is not MISSING:
            if self.default is not False:
                raise SchemaError(f"Flag field '{self.name}' must default to False")
            object.__setattr__(self, "default", MISSING)
        if self.kind is Kind.COLLECTOR and self.default is not MISSING:
            if self.default:
                raise SchemaError(
                    f"Collector field '{self.name}' must default to an empty sequence"
                )
            object.__setattr__(self, "default", MISSING)

    @property
    def required(self) -> bool:
        return self.kind in _SCALAR_KINDS and self.default is MISSING

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING


@dataclasses.dataclass(frozen=True)
class Schema:
    """
    Ordered, immutable description of a record's fields.

    Validation happens on construction, so an existing Schema always has
    unique names, injective long and short flag namespaces, and at most one
    collector.

    Args:
        fields: The record's fields in declaration order.
        description: Record-level text shown by the usage renderer.
        record_type: The dataclass this Schema was reflected from, if any.
    """

    fields: tuple[Field, ...]
    description: Optional[str] = None
    record_type: Optional[Type[Any]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

        names: set[str] = set()
        long_flags: set[str] = set()
        short_flags: set[str] = set()
        collectors = []
        for f in self.fields:
            if f.name in names:
                raise DuplicateFieldName(f.name)
            names.add(f.name)
            if f.long_flag in long_flags:
                raise DuplicateLongFlag(f.long_flag)
            long_flags.add(f.long_flag)
            if f.short_flag is not None:
                if f.short_flag in short_flags:
                    raise DuplicateShortFlag(f.short_flag)
                short_flags.add(f.short_flag)
            if f.kind is Kind.COLLECTOR:
                collectors.append(f.name)

        if len(collectors) > 1:
            raise MultipleCollectors(collectors)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def field(self, name: str) -> Field:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    @property
    def collector(self) -> Optional[Field]:
        for f in self.fields:
            if f.kind is Kind.COLLECTOR:
                return f
        return None


def _get_optional_inner_type(type_hint: Any) -> Optional[Any]:
    """
    If type_hint is Optional[T] (i.e., Union[T, None]), return T.
    Otherwise, return None.
    """
    origin = typing.get_origin(type_hint)
    if origin is Union or origin is getattr(types, "UnionType", None):
        args = typing.get_args(type_hint)
        non_none_args = [a for a in args if a is not type(None)]
        if len(non_none_args) == 1 and type(None) in args:
            return non_none_args[0]
    return None


def _is_text_sequence(type_hint: Any) -> bool:
    if type_hint in (list, tuple):
        return True
    origin = typing.get_origin(type_hint)
    if origin not in (list, tuple, collections.abc.Sequence):
        return False
    args = typing.get_args(type_hint)
    if origin is tuple:
        return args == (str, Ellipsis)
    return args in ((), (str,))


_BASIC_KINDS = {
    int: Kind.INTEGER,
    float: Kind.FLOAT,
    str: Kind.TEXT,
    bool: Kind.FLAG,
}


def _kind_for(name: str, type_hint: Any) -> FieldKind:
    """Map a dataclass field annotation onto a field kind."""
    if type_hint in _BASIC_KINDS:
        return _BASIC_KINDS[type_hint]

    inner = _get_optional_inner_type(type_hint)
    if inner is not None:
        inner_kind = _BASIC_KINDS.get(inner)
        if inner_kind not in _SCALAR_KINDS:
            raise UnsupportedType(name, type_hint)
        return OptionalArgument(inner_kind)

    if _is_text_sequence(type_hint):
        return Kind.COLLECTOR

    raise UnsupportedType(name, type_hint)


def _dataclass_description(cls: Type[Any]) -> Optional[str]:
    doc = cls.__doc__
    # dataclass() fills in a signature when the class has no docstring
    if not doc or doc.startswith(f"{cls.__name__}("):
        return None
    return " ".join(doc.split())


def _kind_from_descriptor(entry: Mapping[str, Any]) -> FieldKind:
    raw = entry.get("kind")
    if raw == "optional":
        try:
            return OptionalArgument(Kind(entry.get("inner", "text")))
        except ValueError:
            raise SchemaError(
                f"Field '{entry.get('name')}' has unknown inner kind {entry.get('inner')!r}"
            )
    try:
        return Kind(raw)
    except ValueError:
        raise SchemaError(f"Field '{entry.get('name')}' has unknown kind {raw!r}")


class SchemaBuilder:
    """
    Chainable configuration object that produces a Schema.

    Example:
        schema = (
            SchemaBuilder("Greets people")
            .add("verbose", Kind.FLAG, short="v")
            .add("name", Kind.TEXT, description="Who to greet")
            .add("extra", Kind.COLLECTOR)
            .build()
        )
    """

    def __init__(self, description: Optional[str] = None) -> None:
        self._fields: list[Field] = []
        self._description = description
        self._record_type: Optional[Type[Any]] = None

    @classmethod
    def from_dataclass(cls, dataclass_type: Type[Any]) -> "SchemaBuilder":
        """
        Reflect a dataclass into a builder.

        Field metadata keys ``help``, ``short`` and ``long`` set the description
        and flag names. If the dataclass defines a ``flag_config(builder)``
        classmethod it is applied last and may further customize the builder.

        Args:
            dataclass_type: The dataclass type to reflect.

        Returns:
            SchemaBuilder: A builder ready for more customization or ``build()``.

        Raises:
            TypeError: If ``dataclass_type`` is not a dataclass type.
            UnsupportedType: If a field annotation has no matching kind.
        """
        if not (isinstance(dataclass_type, type) and dataclasses.is_dataclass(dataclass_type)):
            raise TypeError(f"{dataclass_type!r} is not a dataclass type")

        builder = cls(_dataclass_description(dataclass_type))
        builder._record_type = dataclass_type
        hints = typing.get_type_hints(dataclass_type)

        for f in dataclasses.fields(dataclass_type):
            if not f.init:
                continue
            kind = _kind_for(f.name, hints.get(f.name, str))

            default = MISSING
            if f.default is not dataclasses.MISSING:
                default = f.default
            elif f.default_factory is not dataclasses.MISSING:
                default = f.default_factory()

            builder.add(
                f.name,
                kind,
                short=f.metadata.get("short"),
                long=f.metadata.get("long"),
                description=f.metadata.get("help") or None,
                default=default,
            )

        hook = getattr(dataclass_type, "flag_config", None)
        if callable(hook):
            configured = hook(builder)
            if configured is not None:
                builder = configured
        return builder

    @classmethod
    def from_descriptor(cls, data: Mapping[str, Any]) -> "SchemaBuilder":
        """Build from a ``{"description": ..., "fields": [...]}`` mapping."""
        if not isinstance(data, Mapping):
            raise SchemaError("Schema descriptor must be a mapping")
        entries = data.get("fields", [])
        if not isinstance(entries, list):
            raise SchemaError("Schema descriptor 'fields' must be a list")

        builder = cls(data.get("description"))
        for entry in entries:
            if not isinstance(entry, Mapping) or "name" not in entry:
                raise SchemaError(f"Invalid field descriptor: {entry!r}")
            builder.add(
                entry["name"],
                _kind_from_descriptor(entry),
                short=entry.get("short"),
                long=entry.get("long"),
                description=entry.get("description"),
                default=entry.get("default", MISSING),
            )
        return builder

    def add(
        self,
        name: str,
        kind: FieldKind,
        *,
        short: Optional[str] = None,
        long: Optional[str] = None,
        description: Optional[str] = None,
        default: Any = MISSING,
    ) -> "SchemaBuilder":
        self._fields.append(
            Field(
                name=name,
                kind=kind,
                long_flag=long or name,
                short_flag=short,
                description=description,
                default=default,
            )
        )
        return self

    def _replace(self, name: str, **changes: Any) -> "SchemaBuilder":
        for i, f in enumerate(self._fields):
            if f.name == name:
                self._fields[i] = dataclasses.replace(f, **changes)
                return self
        raise UnknownField(name)

    def set_short(self, name: str, char: str) -> "SchemaBuilder":
        return self._replace(name, short_flag=char)

    def set_long(self, name: str, flag: str) -> "SchemaBuilder":
        return self._replace(name, long_flag=flag)

    def set_collector(self, name: str) -> "SchemaBuilder":
        """Send leftover tokens to ``name`` instead of the default collector."""
        return self._replace(name, kind=Kind.COLLECTOR, default=MISSING)

    def set_description(self, description: Optional[str]) -> "SchemaBuilder":
        self._description = description
        return self

    def build(self) -> Schema:
        schema = Schema(
            tuple(self._fields),
            description=self._description,
            record_type=self._record_type,
        )
        logger.debug(
            "Built schema with %d fields: %s",
            len(schema),
            ", ".join(f.name for f in schema),
        )
        return schema


@functools.lru_cache(maxsize=None)
def schema_for(dataclass_type: Type[Any]) -> Schema:
    """Return the Schema of a dataclass, built once and shared afterwards."""
    return SchemaBuilder.from_dataclass(dataclass_type).build()


def load_schema_file(path: str) -> Schema:
    """
    Load a Schema from a YAML or JSON descriptor file.

    Args:
        path (str): Path to the descriptor file.

    Returns:
        Schema: The validated Schema.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file format is not supported or invalid.
        SchemaError: If the descriptor does not form a valid Schema.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Schema file not found: {path}")

    file_ext = os.path.splitext(path)[1].lower()

    with open(path, "r") as f:
        if file_ext in [".yaml", ".yml"]:
            if not HAS_YAML:
                raise ValueError(
                    "YAML support not available. Please install PyYAML: pip install PyYAML"
                )
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML file: {e}")
        elif file_ext == ".json":
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON file: {e}")
        else:
            raise ValueError(
                f"Unsupported file format: {file_ext}. "
                "Supported formats are: .yaml, .yml, .json"
            )

    logger.debug("Loaded schema descriptor from %s", path)
    return SchemaBuilder.from_descriptor(data or {}).build()
