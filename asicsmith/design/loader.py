# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Design file loading.

A design file is a YAML (or JSON) document produced by the upstream IR
lowering. Only two things are consumed from it: the names (and optionally
ports) of the top-level modules and the list of external module references::

    modules:
      - name: add_numbers
        ports:
          - {name: clock, direction: input}
          - {name: result, direction: output, width: 32}
    extern_modules:
      - name: adder
        symbol: adder_0
        parameters: {width: 32}
"""

import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from asicsmith._internal.io.yaml import describe_yaml_error, load_yaml
from asicsmith.errors import ParseError

from .models import Design, ModuleReference, Port, TopModule

logger = logging.getLogger(__name__)


class _PortEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    direction: Literal["input", "output", "inout"] = "input"
    width: int = Field(default=1, ge=1)


class _ModuleEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    ports: list[_PortEntry] = Field(default_factory=list)


class _ExternEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    symbol: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class _DesignFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    modules: list[_ModuleEntry] = Field(default_factory=list)
    extern_modules: list[_ExternEntry] = Field(default_factory=list)


def load_design(path: str | Path) -> Design:
    """Load a design file.

    Raises:
        ParseError: If the file is unreadable, not YAML/JSON, does not match
            the design schema, or declares one symbol twice with different
            contents.
    """
    path = Path(path)
    try:
        data = load_yaml(path)
    except FileNotFoundError as e:
        raise ParseError(f"Could not open input file '{path}'", source=path) from e
    except OSError as e:
        raise ParseError(f"Could not open input file '{path}': {e.strerror}", source=path) from e
    except yaml.YAMLError as e:
        raise ParseError(
            f"Could not parse the input file '{path}' ({describe_yaml_error(e)})", source=path
        ) from e
    except UnicodeDecodeError as e:
        raise ParseError(f"Input file '{path}' is not valid UTF-8", source=path) from e

    if not isinstance(data, dict):
        raise ParseError(f"Input file '{path}' must contain a mapping", source=path)

    try:
        parsed = _DesignFile.model_validate(data)
    except ValidationError as e:
        details = [
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ParseError(f"Invalid design in '{path}'", source=path, details=details) from e

    design = Design(source=path)
    for entry in parsed.modules:
        ports = tuple(Port(p.name, p.direction, p.width) for p in entry.ports)
        design.modules.append(TopModule(entry.name, ports))

    by_symbol: dict[str, ModuleReference] = {}
    for entry in parsed.extern_modules:
        symbol = entry.symbol or _fresh_symbol(entry.name, by_symbol)
        reference = ModuleReference(entry.name, entry.parameters, symbol)
        previous = by_symbol.get(reference.symbol)
        if previous is None:
            by_symbol[reference.symbol] = reference
            design.extern_modules.append(reference)
        elif previous != reference:
            raise ParseError(
                f"External module symbol '{reference.symbol}' is declared twice "
                f"with different contents in '{path}'",
                source=path,
                details=[previous.describe(), reference.describe()],
            )

    logger.debug(
        "Loaded design %s: %d module(s), %d external reference(s)",
        path, len(design.modules), len(design.extern_modules)
    )
    return design


def _fresh_symbol(name: str, taken: dict[str, ModuleReference]) -> str:
    """First unused symbol among ``name``, ``name_1``, ``name_2``..."""
    symbol, index = name, 0
    while symbol in taken:
        index += 1
        symbol = f"{name}_{index}"
    return symbol
