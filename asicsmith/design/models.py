# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Read-only view of a hardware design: top-level modules and external references."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Mapping


@dataclass(frozen=True)
class ModuleReference:
    """An external (black-box) module as it appears in the design graph.

    ``symbol`` is the reference's identity within the design. Two references
    sharing a ``name`` but not a ``symbol`` are distinct, whatever their
    parameters. Parameters are kept sorted by name so that equality and
    hashing do not depend on the order they were written in.
    """

    name: str
    parameters: tuple[tuple[str, Any], ...] = ()
    symbol: str = ""

    def __post_init__(self):
        if isinstance(self.parameters, Mapping):
            items = self.parameters.items()
        else:
            items = self.parameters
        object.__setattr__(self, "parameters", tuple(sorted(items, key=lambda kv: kv[0])))
        if not self.symbol:
            object.__setattr__(self, "symbol", self.name)

    @property
    def parameter_map(self) -> dict[str, Any]:
        return dict(self.parameters)

    def describe(self) -> str:
        """Short human readable form, e.g. ``adder(width=32)``."""
        params = ", ".join(f"{k}={v}" for k, v in self.parameters)
        return f"{self.name}({params})"


@dataclass(frozen=True)
class Port:
    name: str
    direction: str = "input"
    width: int = 1


@dataclass(frozen=True)
class TopModule:
    """A module defined by the design itself (not an external reference)."""

    name: str
    ports: tuple[Port, ...] = ()


@dataclass
class Design:
    """Top-level modules and external references, in enumeration order."""

    modules: list[TopModule] = field(default_factory=list)
    extern_modules: list[ModuleReference] = field(default_factory=list)
    source: Path | None = None

    def external_references(self) -> Iterator[ModuleReference]:
        """Yield every distinct external reference in design order."""
        seen = set()
        for reference in self.extern_modules:
            if reference.symbol in seen:
                continue
            seen.add(reference.symbol)
            yield reference
