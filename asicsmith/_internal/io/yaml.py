# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""YAML utilities for asicsmith.

Provides basic YAML operations:
- load_yaml(): Load a YAML (or JSON) document with no processing
- expand_env_vars(): Recursively expand ${VAR} syntax

None of these mutate os.environ.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml


def load_yaml(file_path: str | Path) -> Any:
    """Load YAML with no processing (for env var expansion, see expand_env_vars()).

    JSON documents are valid YAML and load the same way. An empty file
    loads as an empty dict.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the document is invalid
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"YAML file not found: {file_path}")

    with open(file_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return {} if data is None else data


def describe_yaml_error(error: yaml.YAMLError) -> str:
    """Render a YAML error as 'line L, column C: problem'."""
    mark = getattr(error, "problem_mark", None)
    problem = getattr(error, "problem", None) or str(error)
    if mark is None:
        return problem
    return f"line {mark.line + 1}, column {mark.column + 1}: {problem}"


def expand_env_vars(data: Any, extra: dict[str, str] | None = None) -> Any:
    """Recursively expand environment variables (supports ${VAR} and $VAR).

    ``extra`` variables take precedence over os.environ. Undefined variables
    are left unchanged (e.g. "${UNDEFINED_VAR}" stays as-is).
    """
    if isinstance(data, str):
        return _expand(data, extra or {})
    elif isinstance(data, dict):
        return {k: expand_env_vars(v, extra) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item, extra) for item in data]
    else:
        return data


_VAR_PATTERN = re.compile(r"\$\{(\w+)\}|\$(\w+)")


def _expand(text: str, extra: dict[str, str]) -> str:
    if extra:
        def replace(m: re.Match) -> str:
            name = m.group(1) or m.group(2)
            return extra.get(name, m.group(0))
        text = _VAR_PATTERN.sub(replace, text)
    return os.path.expandvars(text)
