# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Export session: resolve external modules, emit the design and backend scripts."""

from .concretizer import Concretizer, Match
from .pipeline import ExportResult, export_design
from .session import ExportSession, SessionState

__all__ = [
    "Concretizer",
    "ExportResult",
    "ExportSession",
    "Match",
    "SessionState",
    "export_design",
]
