"""CLI parser and entrypoint tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from constgen.cli import _build_parser, main
from constgen.logging import configure_logging
from tests._fixtures.source_builder import SourceTreeBuilder

PROVIDER = """
package com.example;

import org.apache.camel.spi.annotations.ConstantProvider;

@ConstantProvider("com.example.FooConstants")
public class Foo {
    public static final String BAR = "baz";
}
"""


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["list", "--verbose"])
    assert args.verbose is True
    assert args.command == "list"


def test_cli_generate_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "proj", "--output", "out", "--dry-run"])
    assert args.path == "proj"
    assert args.output == Path("out")
    assert args.dry_run is True


def test_cli_generate_writes_sources(
    source_tree: SourceTreeBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source_tree.write({"com/example/Foo.java": PROVIDER})
    output = tmp_path / "out"

    main(["generate", str(source_tree.root), "--output", str(output)])

    assert "Generated com.example.FooConstants" in capsys.readouterr().out
    assert (output / "com" / "example" / "FooConstants.java").exists()


def test_cli_generate_dry_run_prints_sources(
    source_tree: SourceTreeBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_tree.write({"com/example/Foo.java": PROVIDER})

    main(["generate", str(source_tree.root), "--dry-run"])

    out = capsys.readouterr().out
    assert "// com.example.FooConstants" in out
    assert 'map.put("BAR", "baz");' in out


def test_cli_generate_exits_on_errors(source_tree: SourceTreeBuilder) -> None:
    source_tree.write({"com/example/Foo.java": PROVIDER.replace("com.example.FooConstants", "com.1bad")})

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(source_tree.root)])

    assert excinfo.value.code == 1


def test_cli_list(source_tree: SourceTreeBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write({"com/example/Foo.java": PROVIDER})

    main(["list", str(source_tree.root)])

    assert "com.example.Foo -> com.example.FooConstants (1 constants)" in capsys.readouterr().out


def test_cli_reports_missing_project(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["list", str(tmp_path / "missing")])

    assert excinfo.value.code == 1


def test_cli_accepts_log_file_before_or_after_command() -> None:
    parser = _build_parser()

    assert parser.parse_args(["--log-file", "a.log", "list"]).log_file == Path("a.log")
    assert parser.parse_args(["generate", "--log-file", "b.log"]).log_file == Path("b.log")
    assert parser.parse_args(["list"]).log_file is None


def test_cli_log_file_records_the_run(source_tree: SourceTreeBuilder, tmp_path: Path) -> None:
    source_tree.write({"com/example/Foo.java": PROVIDER})
    log_file = tmp_path / "constgen.log"

    try:
        main(["generate", str(source_tree.root), "--dry-run", "--log-file", str(log_file)])
    finally:
        configure_logging()

    text = log_file.read_text(encoding="utf-8")
    assert "constgen.orchestrator: Starting generate run" in text
    assert "Generated com.example.FooConstants" in text
