# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Global pytest configuration and fixtures."""

import logging
import os
from pathlib import Path

import pytest
import yaml
from rich.logging import RichHandler

from tests.fixtures.builders import ADDER_TEMPLATE


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test from an empty directory with no ASICSMITH_* variables."""
    for key in list(os.environ):
        if key.upper().startswith("ASICSMITH_"):
            monkeypatch.delenv(key)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.setenv("ASICSMITH_PROJECT_DIR", str(workdir))
    yield workdir


@pytest.fixture
def reset_logging():
    """Remove Rich handlers installed by setup_logging between tests."""
    root = logging.getLogger()

    def _clear():
        for handler in root.handlers[:]:
            if isinstance(handler, RichHandler):
                root.removeHandler(handler)
        root.setLevel(logging.WARNING)

    _clear()
    yield
    _clear()


@pytest.fixture
def write_yaml(tmp_path):
    """Factory writing a YAML document under tmp_path and returning its path."""

    def _write(name: str, data) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path

    return _write


@pytest.fixture
def adder_design(write_yaml) -> Path:
    return write_yaml("design.yaml", {
        "modules": [
            {
                "name": "add_numbers",
                "ports": [
                    {"name": "clock", "direction": "input"},
                    {"name": "result", "direction": "output", "width": 32},
                ],
            },
        ],
        "extern_modules": [
            {"name": "adder", "parameters": {"width": 32}},
        ],
    })


@pytest.fixture
def adder_config(write_yaml) -> Path:
    return write_yaml("adder.yaml", [
        {
            "name": "adder",
            "module-name": "adder_{{ width }}",
            "template": ADDER_TEMPLATE,
        },
    ])


@pytest.fixture
def other_config(write_yaml) -> Path:
    """A configuration with no rule for ``adder``."""
    return write_yaml("other.yaml", [
        {"name": "multiplier", "template": "module {{ module_name }}(); endmodule"},
    ])


@pytest.fixture
def output_dir(tmp_path) -> Path:
    return tmp_path / "out"
