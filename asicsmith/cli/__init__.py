# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Command line interface for the ASIC export tool."""

from .cli import export_asic, main

__all__ = ["export_asic", "main"]
