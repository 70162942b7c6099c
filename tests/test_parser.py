#!/usr/bin/env python3
"""
Tests for the FlagParser facade.

This module covers decoding straight into dataclasses, customization,
Result-returning parsing and the exit-with-usage helper.
"""

import json
import os
import tempfile
from dataclasses import dataclass, field
from io import StringIO
from typing import Optional
from unittest.mock import patch

import pytest
from result import Err, Ok

from flaghammer import (
    FlagParser,
    InvalidNumber,
    Kind,
    MalformedCluster,
    MissingRequired,
    Record,
    SchemaBuilder,
    UnexpectedPositionalArguments,
    UnknownFlag,
)


@dataclass
class GreetConfig:
    """Greets people."""

    name: str = field(metadata={"help": "Who to greet"})
    verbose: bool = field(default=False, metadata={"short": "v"})
    extra: list[str] = field(default_factory=list)


@dataclass
class CountConfig:
    count: int = field(metadata={"short": "c", "help": "How many"})


@dataclass
class AllKindsConfig:
    """Configuration with one field of every kind."""

    count: int
    ratio: float
    name: str
    verbose: bool = False
    level: Optional[int] = None
    label: Optional[str] = None
    scale: Optional[float] = None


@dataclass
class TupleCollectorConfig:
    files: tuple[str, ...] = ()


class TestFlagParser:
    """Test suite for FlagParser."""

    def test_parse_into_dataclass(self):
        """Test that parse returns an instance of the target dataclass."""
        parser = FlagParser(GreetConfig)
        config = parser.parse(["-v", "--name", "Alice", "foo", "bar"])
        assert config == GreetConfig(name="Alice", verbose=True, extra=["foo", "bar"])
        assert isinstance(config.extra, list)

    def test_equals_form_and_defaults(self):
        """Test the equals form with every optional field absent."""
        config = FlagParser(GreetConfig).parse(["--name=Bob"])
        assert config == GreetConfig(name="Bob", verbose=False, extra=[])

    def test_missing_required(self):
        """Test that a missing required field raises MissingRequired."""
        with pytest.raises(MissingRequired) as exc:
            FlagParser(GreetConfig).parse(["-v", "foo"])
        assert exc.value.field == "name"

    def test_invalid_number(self):
        """Test that malformed numbers raise InvalidNumber."""
        with pytest.raises(InvalidNumber) as exc:
            FlagParser(CountConfig).parse(["--count", "abc"])
        assert (exc.value.field, exc.value.raw) == ("count", "abc")

    def test_unexpected_positional(self):
        """Test that stray tokens fail without a collector."""
        with pytest.raises(UnexpectedPositionalArguments):
            FlagParser(CountConfig).parse(["-c", "1", "stray"])

    def test_parse_with_remaining(self):
        """Test that leftovers are returned alongside the record."""
        parser = FlagParser(GreetConfig)
        config, remaining = parser.parse_with_remaining(["--name", "x", "a", "--", "-b"])
        assert config.extra == ["a", "-b"]
        assert remaining == ["a", "-b"]

    def test_parser_keeps_no_state_between_calls(self):
        """Test that one parser can decode several argvs independently."""
        parser = FlagParser(GreetConfig)
        first, first_rest = parser.parse_with_remaining(["--name", "x", "a"])
        second, second_rest = parser.parse_with_remaining(["--name", "y"])
        assert first_rest == ["a"]
        assert second_rest == []
        assert first == GreetConfig(name="x", extra=["a"])
        assert second == GreetConfig(name="y")
        assert not hasattr(parser, "remaining")

    def test_tuple_collector(self):
        """Test that a tuple-annotated collector receives a tuple."""
        config = FlagParser(TupleCollectorConfig).parse(["a", "b"])
        assert config.files == ("a", "b")

    def test_configure_callback(self):
        """Test customizing a reflected schema at construction."""
        parser = FlagParser(GreetConfig, configure=lambda c: c.set_short("name", "n"))
        config = parser.parse(["-vn", "Carol"])
        assert config.name == "Carol"
        assert config.verbose

    def test_short_cluster_with_trailing_value(self):
        """Test a boolean followed by a value-bearing flag in one cluster."""

        @dataclass
        class ClusterConfig:
            count: int = field(metadata={"short": "c"})
            verbose: bool = field(default=False, metadata={"short": "v"})

        parser = FlagParser(ClusterConfig)
        assert parser.parse(["-vc", "5"]) == ClusterConfig(count=5, verbose=True)
        with pytest.raises(MalformedCluster):
            parser.parse(["-cv", "5"])

    def test_explicit_schema_returns_record(self):
        """Test that a hand-built Schema decodes to a Record."""
        schema = (
            SchemaBuilder()
            .add("verbose", Kind.FLAG, short="v")
            .add("name", Kind.TEXT)
            .add("extra", Kind.COLLECTOR)
            .build()
        )
        record = FlagParser(schema).parse(["-v", "--name", "Alice", "foo", "bar"])
        assert isinstance(record, Record)
        assert record == {"verbose": True, "name": "Alice", "extra": ("foo", "bar")}

    def test_configure_rejected_for_schema_target(self):
        """Test that configure is only accepted with dataclass targets."""
        schema = SchemaBuilder().build()
        with pytest.raises(TypeError):
            FlagParser(schema, configure=lambda c: c)

    def test_schema_file_target(self):
        """Test constructing a parser from a descriptor file path."""
        descriptor = {
            "fields": [
                {"name": "count", "kind": "integer", "short": "c"},
                {"name": "rest", "kind": "collector"},
            ]
        }
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump(descriptor, f)
            path = f.name

        try:
            record = FlagParser(path).parse(["-c7", "x"])
            assert record == {"count": 7, "rest": ("x",)}
        finally:
            os.unlink(path)

    def test_parse_defaults_to_sys_argv(self):
        """Test that parse(None) reads sys.argv without the program name."""
        with patch("sys.argv", ["prog", "--name", "Dana", "-v"]):
            config = FlagParser(GreetConfig).parse()
        assert config == GreetConfig(name="Dana", verbose=True)

    def test_round_trip_every_kind(self):
        """Test that formatting a record back into flags decodes to the same record."""
        original = AllKindsConfig(
            count=-3,
            ratio=2.5,
            name="some name",
            verbose=True,
            level=7,
            label="",
            scale=0.125,
        )
        argv = [
            "--count",
            str(original.count),
            "--ratio",
            str(original.ratio),
            "--name",
            original.name,
            "--verbose",
            "--level",
            str(original.level),
            f"--label={original.label}",
            "--scale",
            str(original.scale),
        ]
        assert FlagParser(AllKindsConfig).parse(argv) == original

    def test_round_trip_absent_optionals(self):
        """Test the round trip when optional fields are absent."""
        original = AllKindsConfig(count=1, ratio=0.0, name="n")
        argv = ["--count", "1", "--ratio", "0.0", "--name", "n"]
        assert FlagParser(AllKindsConfig).parse(argv) == original


class TestSafeParse:
    """Test suite for Result-returning parsing."""

    def test_ok(self):
        """Test that a successful parse is wrapped in Ok."""
        result = FlagParser(CountConfig).safe_parse(["--count", "3"])
        assert isinstance(result, Ok)
        assert result.ok_value == CountConfig(count=3)

    def test_err(self):
        """Test that a failed parse is reported as Err with the message."""
        result = FlagParser(CountConfig).safe_parse(["--bogus"])
        assert isinstance(result, Err)
        assert result.err_value == "Unknown flag: --bogus"

    def test_err_for_missing_required(self):
        """Test that decode errors are also converted."""
        result = FlagParser(CountConfig).safe_parse([])
        assert isinstance(result, Err)
        assert "count" in result.err_value


class TestParseOrExit:
    """Test suite for the exit-with-usage helper."""

    def test_success_returns_record(self):
        """Test that valid arguments are returned normally."""
        assert FlagParser(CountConfig).parse_or_exit(["-c", "2"]) == CountConfig(2)

    def test_failure_prints_usage_and_exits(self):
        """Test that errors print a message and usage, then exit with status 2."""
        out = StringIO()
        with pytest.raises(SystemExit) as exc:
            FlagParser(CountConfig).parse_or_exit(["-x"], file=out)
        assert exc.value.code == 2
        text = out.getvalue()
        assert text.startswith("error: Unknown flag: -x\n")
        assert "--count, -c <INT>    How many" in text

    def test_failure_writes_to_stderr_by_default(self):
        """Test that stderr is used when no file is given."""
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            with pytest.raises(SystemExit):
                FlagParser(CountConfig).parse_or_exit([])
        assert "Field 'count' is required" in mock_stderr.getvalue()

    def test_print_usage(self):
        """Test that print_usage writes to stdout."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            FlagParser(GreetConfig).print_usage()
        output = mock_stdout.getvalue()
        assert "--name <STRING>    Who to greet" in output
        assert "Greets people." in output

    def test_unknown_flag_propagates_from_parse(self):
        """Test that parse itself raises instead of exiting."""
        with pytest.raises(UnknownFlag):
            FlagParser(GreetConfig).parse(["--nope"])
