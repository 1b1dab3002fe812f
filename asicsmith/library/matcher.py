# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Reference matching: first rule in load order whose predicate accepts wins."""

from asicsmith.design.models import ModuleReference

from .loader import GeneratorLibrary
from .models import GeneratorRule


def match(reference: ModuleReference, library: GeneratorLibrary) -> GeneratorRule | None:
    """Return the first rule accepting ``reference``, or None when no rule applies."""
    parameters = reference.parameter_map
    for rule in library:
        if rule.accepts(reference.name, parameters):
            return rule
    return None


def candidates(reference: ModuleReference, library: GeneratorLibrary) -> list[GeneratorRule]:
    """Rules sharing the reference's name, whether or not they accept its parameters."""
    return [rule for rule in library if rule.name == reference.name]
