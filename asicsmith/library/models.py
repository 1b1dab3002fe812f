# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Generator rule schema.

A generator rule binds an external module name, plus optional constraints on
its parameters, to one way of producing module source: inline template text,
a template file, or an external generator command. Rules are immutable once
loaded.
"""

import re
from pathlib import Path
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

HDL_EXTENSIONS = {
    "verilog": "v",
    "systemverilog": "sv",
    "vhdl": "vhd",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ParameterSpec(BaseModel):
    """Constraints a rule places on one parameter of a reference.

    The parameter must be present on the reference. When ``type`` is set the
    value (and the constraint operands) are coerced to it first; a value that
    cannot be coerced is rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    type: Literal["unsigned", "string", "boolean", "float"] | None = None
    eq: Any = None
    ne: Any = None
    lb: float | None = None
    ub: float | None = None
    range: tuple[float, float] | None = None
    one_of: tuple[Any, ...] | None = None
    pattern: str | None = None

    @model_validator(mode="after")
    def _check_pattern(self) -> "ParameterSpec":
        if self.pattern is not None:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise ValueError(f"invalid pattern {self.pattern!r}: {e}") from e
        return self

    def coerce(self, value: Any) -> Any:
        """Convert ``value`` to this parameter's type; raise ValueError if impossible."""
        if self.type is None:
            return value
        if self.type == "string":
            return str(value)
        if self.type == "float":
            if isinstance(value, bool):
                raise ValueError(f"{value!r} is not a float")
            return float(value)
        if self.type == "boolean":
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError(f"{value!r} is not a boolean")
        # unsigned
        if isinstance(value, bool):
            raise ValueError(f"{value!r} is not an unsigned integer")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value!r} is not an unsigned integer")
        number = int(str(value).strip(), 0) if isinstance(value, str) else int(value)
        if number < 0:
            raise ValueError(f"{value!r} is negative")
        return number

    def accepts(self, value: Any) -> bool:
        try:
            value = self.coerce(value)
        except (TypeError, ValueError):
            return False

        if self.eq is not None and not self._equal(value, self.eq):
            return False
        if self.ne is not None and self._equal(value, self.ne):
            return False
        if self.one_of is not None and not any(self._equal(value, c) for c in self.one_of):
            return False

        bounds = [self.lb, self.ub]
        if self.range is not None:
            bounds = [self.range[0], self.range[1]]
        if bounds != [None, None]:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                try:
                    value = float(value)
                except (TypeError, ValueError):
                    return False
            if bounds[0] is not None and value < bounds[0]:
                return False
            if bounds[1] is not None and value > bounds[1]:
                return False

        if self.pattern is not None and re.fullmatch(self.pattern, str(value)) is None:
            return False
        return True

    def _equal(self, value: Any, expected: Any) -> bool:
        try:
            expected = self.coerce(expected)
        except (TypeError, ValueError):
            return False
        return value == expected or str(value) == str(expected)


class GeneratorRule(BaseModel):
    """One entry of the generator library.

    Exactly one of ``template``, ``generic`` and ``generator`` is set.
    ``source`` and ``index`` record where the rule was loaded from; they are
    what makes two otherwise identical rules distinguishable.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    parameters: tuple[ParameterSpec, ...] = ()
    template: str | None = None
    generic: Path | None = None
    generator: str | None = None
    module_name: str | None = None
    hdl: Literal["verilog", "systemverilog", "vhdl"] = "verilog"
    source: Path | None = None
    index: int = 0

    @model_validator(mode="after")
    def _check_procedure(self) -> "GeneratorRule":
        given = [k for k in ("template", "generic", "generator") if getattr(self, k) is not None]
        if len(given) != 1:
            raise ValueError(
                "exactly one of 'template', 'generic' or 'generator' must be set"
                + (f" (got {', '.join(given)})" if given else "")
            )
        return self

    @property
    def extension(self) -> str:
        return HDL_EXTENSIONS[self.hdl]

    @property
    def procedure(self) -> str:
        if self.template is not None:
            return "template"
        if self.generic is not None:
            return "generic"
        return "generator"

    def accepts(self, name: str, parameters: Mapping[str, Any]) -> bool:
        """Matching predicate over a reference's name and parameters."""
        if name != self.name:
            return False
        for spec in self.parameters:
            if spec.name not in parameters:
                return False
            if not spec.accepts(parameters[spec.name]):
                return False
        return True

    def describe(self) -> str:
        location = f"{self.source}#{self.index}" if self.source else f"#{self.index}"
        return f"'{self.name}' ({self.procedure}, {location})"
