# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Backend script generation and the external physical-design flow."""

from .flow import launcher_path, run_backend_flow, write_launcher
from .scripts import ScriptContext, backend_config, synthesis_script

__all__ = [
    "ScriptContext",
    "backend_config",
    "launcher_path",
    "run_backend_flow",
    "synthesis_script",
    "write_launcher",
]
