# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Design graph handed over by the IR collaborator."""

from .loader import load_design
from .models import Design, ModuleReference, Port, TopModule

__all__ = [
    "Design",
    "ModuleReference",
    "Port",
    "TopModule",
    "load_design",
]
