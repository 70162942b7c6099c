"""
FlagParser - decode command-line arguments straight into a dataclass.

This module ties the pipeline together: it builds (or reuses) a Schema for the
target, scans argv against the Schema's flag registry, decodes the matches into
a Record and, when the target is a dataclass, instantiates it. It also exposes
the usage text for the same Schema.
"""

import dataclasses
import logging
import sys
import typing
from typing import Any, Callable, Optional, TextIO, Type, Union

from result import Err, Ok, Result

from .decoder import Record, decode
from .errors import HammerError
from .registry import FlagRegistry
from .scanner import scan
from .schema import Schema, SchemaBuilder, load_schema_file, schema_for
from .usage import render_usage

logger = logging.getLogger(__name__)


class FlagParser:
    """
    A command-line decoder for a single flat record.

    The target may be a dataclass type, a ready-made Schema, or the path of a
    JSON/YAML schema descriptor file.

    Example:
        @dataclass
        class Config:
            verbose: bool = field(metadata={"short": "v", "help": "Talk more"})
            name: str = field(metadata={"help": "Who to greet"})
            rest: list[str] = field(default_factory=list)

        parser = FlagParser(Config)
        config = parser.parse(["-v", "--name", "Alice", "extra"])
        # Config(verbose=True, name='Alice', rest=['extra'])
    """

    def __init__(
        self,
        target: Union[Type[Any], Schema, str],
        *,
        configure: Optional[Callable[[SchemaBuilder], Any]] = None,
    ) -> None:
        """
        Initialize the FlagParser.

        Args:
            target: A dataclass type, a Schema, or a schema descriptor path.
            configure: Optional customization applied to the dataclass builder,
                e.g. ``lambda c: c.set_short("verbose", "v")``.
        """
        self.schema: Schema = self._resolve_schema(target, configure)
        self.registry: FlagRegistry = FlagRegistry(self.schema)

    @staticmethod
    def _resolve_schema(
        target: Union[Type[Any], Schema, str],
        configure: Optional[Callable[[SchemaBuilder], Any]],
    ) -> Schema:
        if isinstance(target, Schema):
            if configure is not None:
                raise TypeError("configure only applies to dataclass targets")
            return target
        if isinstance(target, str):
            if configure is not None:
                raise TypeError("configure only applies to dataclass targets")
            return load_schema_file(target)
        if configure is None:
            return schema_for(target)

        builder = SchemaBuilder.from_dataclass(target)
        configured = configure(builder)
        if configured is not None:
            builder = configured
        return builder.build()

    def _decode(self, args: Optional[list[str]]) -> tuple[Record, list[str]]:
        if args is None:
            args = sys.argv[1:]
        logger.debug("Decoding %d arguments", len(args))

        result = scan(args, self.registry)
        record = decode(result.matches, result.leftovers, self.schema)
        return record, list(result.leftovers)

    def decode(self, args: Optional[list[str]] = None) -> Record:
        """
        Scan and decode arguments into a Record without instantiating a dataclass.

        Args:
            args (Optional[list[str]]): Arguments to decode. If None, uses sys.argv[1:].
        """
        return self._decode(args)[0]

    def parse_with_remaining(
        self, args: Optional[list[str]] = None
    ) -> tuple[Any, list[str]]:
        """Parse like ``parse`` and also return the leftover tokens in argv order."""
        record, leftovers = self._decode(args)
        return self._finish(record), leftovers

    def parse(self, args: Optional[list[str]] = None) -> Any:
        """
        Parse command-line arguments into the target record.

        Args:
            args (Optional[list[str]]): Optional list of arguments to parse. If None, uses sys.argv[1:].

        Returns:
            Any: An instance of the target dataclass, or a Record when the
                Schema was not reflected from a dataclass.

        Raises:
            ScanError: If the arguments do not fit the flag syntax.
            DecodeError: If a value cannot be coerced or a required field is missing.
        """
        return self._finish(self.decode(args))

    def safe_parse(self, args: Optional[list[str]] = None) -> Result[Any, str]:
        """
        Parse command-line arguments without raising.

        Args:
            args (Optional[list[str]]): Optional list of arguments to parse. If None, uses sys.argv[1:].
        Returns:
            Result[Any, str]:
                - Ok with the parsed record,
                - Err with the error message if parsing fails.
        """
        try:
            return Ok(self.parse(args))
        except HammerError as e:
            return Err(str(e))

    def parse_or_exit(
        self, args: Optional[list[str]] = None, file: Optional[TextIO] = None
    ) -> Any:
        """Parse, or print the error and usage to stderr and exit with status 2."""
        try:
            return self.parse(args)
        except HammerError as e:
            out = file if file is not None else sys.stderr
            out.write(f"error: {e}\n\n")
            out.write(self.format_usage())
            raise SystemExit(2)

    def format_usage(self, show_description: bool = True) -> str:
        return render_usage(self.schema, show_description)

    def print_usage(self, file: Optional[TextIO] = None) -> None:
        (file if file is not None else sys.stdout).write(self.format_usage())

    def _finish(self, record: Record) -> Any:
        if self.schema.record_type is None:
            return record
        return self._instantiate(record)

    def _instantiate(self, record: Record) -> Any:
        """Build the target dataclass, giving collectors the container type it declares."""
        cls = self.schema.record_type
        values = dict(record)
        collector = self.schema.collector
        if collector is not None:
            hint = typing.get_type_hints(cls).get(collector.name)
            if hint is tuple or typing.get_origin(hint) is tuple:
                values[collector.name] = tuple(values[collector.name])
            else:
                values[collector.name] = list(values[collector.name])
        init_names = {f.name for f in dataclasses.fields(cls) if f.init}
        return cls(**{k: v for k, v in values.items() if k in init_names})
