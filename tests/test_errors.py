# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for the error taxonomy and its console rendering."""

import pytest

from asicsmith.errors import (
    ConfigError,
    ExecutionError,
    ExportError,
    ExportIOError,
    GenerationError,
    ParseError,
    SessionStateError,
    UnresolvedReferenceError,
)


@pytest.mark.parametrize("error,stage", [
    (ParseError("bad"), "parse"),
    (UnresolvedReferenceError(["adder"]), "resolve"),
    (GenerationError("bad"), "concretize"),
    (ExportIOError("bad"), "emit"),
    (ConfigError("bad"), "config"),
    (ExecutionError("bad", exit_code=2), "flow"),
    (SessionStateError("bad"), "session"),
])
def test_every_error_names_its_stage(error, stage):
    assert isinstance(error, ExportError)
    assert error.stage == stage


def test_unresolved_reference_names_every_reference():
    error = UnresolvedReferenceError(["adder", "fifo"])
    assert str(error) == "No generator rule matches external module(s) 'adder', 'fifo'"


def test_format_for_console():
    error = ParseError("Could not parse [x]", details=["line 1", "see [b]"])

    assert error.format_for_console(include_details=False) == (
        "[red]Error \\[parse]:[/red] Could not parse \\[x]"
    )
    assert error.format_for_console().splitlines()[1:] == [
        "  • line 1",
        "  • see \\[b]",
    ]
