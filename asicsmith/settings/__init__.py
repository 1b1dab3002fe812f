# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""asicsmith configuration module.

Provides type-safe configuration management with Pydantic Settings.
"""

from .loader import get_default_settings, load_settings
from .schema import ExportSettings

__all__ = [
    "ExportSettings",
    "load_settings",
    "get_default_settings",
]
