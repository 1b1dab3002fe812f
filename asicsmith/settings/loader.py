# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Settings loading for asicsmith."""

import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import yaml
from pydantic import ValidationError
from rich.console import Console

from asicsmith.errors import ConfigError

from .schema import ExportSettings

console = Console(stderr=True)


def load_settings(settings_file: Path | None = None, **cli_overrides: Any) -> ExportSettings:
    """Load settings with hierarchical priority.

    Overrides whose value is None are dropped so that unset CLI options fall
    through to the environment, the project file and the defaults.

    Raises:
        ConfigError: If any source holds an invalid value or the project
            file cannot be read
    """
    overrides = {k: v for k, v in cli_overrides.items() if v is not None}
    if settings_file is not None:
        overrides["settings_file"] = settings_file

    try:
        return ExportSettings(**overrides)
    except ValidationError as e:
        console.print("[bold red]Configuration validation failed:[/bold red]")
        for error in e.errors():
            field = " → ".join(str(x) for x in error["loc"])
            console.print(f"  [red]{field}: {error['msg']}[/red]")
        raise ConfigError("Invalid settings") from e
    except (OSError, yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"Could not load settings: {e}") from e


def get_default_settings() -> ExportSettings:
    """Settings with only default values (no files or env vars)."""
    filtered_env = {
        k: v for k, v in os.environ.items()
        if not k.upper().startswith("ASICSMITH_")
    }

    with patch.dict(os.environ, filtered_env, clear=True):
        return load_settings(settings_file=Path(os.devnull))
