# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""asicsmith: export hardware designs to ASIC-ready RTL and backend scripts."""

from asicsmith.errors import (
    ConfigError,
    ExecutionError,
    ExportError,
    ExportIOError,
    GenerationError,
    ParseError,
    UnresolvedReferenceError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ExecutionError",
    "ExportError",
    "ExportIOError",
    "GenerationError",
    "ParseError",
    "UnresolvedReferenceError",
]
