# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Generator rules loaded from RTL configuration files, and reference matching."""

from .loader import GeneratorLibrary
from .matcher import candidates, match
from .models import GeneratorRule, ParameterSpec

__all__ = [
    "GeneratorLibrary",
    "GeneratorRule",
    "ParameterSpec",
    "candidates",
    "match",
]
