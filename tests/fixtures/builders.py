# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Small builders shared by the unit tests."""

from pathlib import Path

import yaml

from asicsmith.design.models import ModuleReference
from asicsmith.library.loader import GeneratorLibrary
from asicsmith.library.models import GeneratorRule

ADDER_TEMPLATE = """\
module {{ module_name }}(input [{{ width - 1 }}:0] a, b, output [{{ width - 1 }}:0] s);
  assign s = a + b;
endmodule
"""


def ref(name: str, symbol: str = "", **parameters) -> ModuleReference:
    return ModuleReference(name, parameters, symbol)


def rule(name: str, template: str = "module {{ module_name }}(); endmodule", **fields) -> GeneratorRule:
    if "generic" in fields or "generator" in fields:
        template = None
    return GeneratorRule(name=name, template=template, **fields)


def make_library(directory: Path, *files) -> GeneratorLibrary:
    """Write each list of rule records as its own configuration file and load them in order."""
    paths = []
    for i, records in enumerate(files):
        path = Path(directory) / f"rules_{i}.yaml"
        path.write_text(yaml.safe_dump(records, sort_keys=False))
        paths.append(path)
    return GeneratorLibrary.from_files(paths)
