# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Concretization of external module references.

Applying a matched generator rule to a reference renders the rule's
template (or runs its generator command) with the reference's parameter
values and writes the result under the output directory, one file per
distinct (name, parameters, rule) triple.

File naming is deterministic. The stem is the rule's ``module-name``
template when it has one, else the reference name made identifier-safe.
When that stem already belongs to a different triple in this session a
digest of the parameters is appended. Generated text never contains
timestamps, so identical inputs give byte-identical files.
"""

import hashlib
import json
import logging
import os
import re
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from asicsmith.design.models import ModuleReference
from asicsmith.errors import GenerationError
from asicsmith.library.models import GeneratorRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """Binding of one reference to the rule that concretized it."""

    reference: ModuleReference
    rule: GeneratorRule
    path: Path
    module_name: str
    reused: bool = False


def canonical_parameters(reference: ModuleReference) -> str:
    return json.dumps(reference.parameter_map, sort_keys=True, default=str)


def parameter_digest(reference: ModuleReference) -> str:
    return hashlib.sha1(canonical_parameters(reference).encode("utf-8")).hexdigest()[:8]


def identifier(name: str) -> str:
    """Make ``name`` usable as an HDL identifier and file stem."""
    ident = re.sub(r"\W", "_", name)
    return f"_{ident}" if not ident or ident[0].isdigit() else ident


class Concretizer:
    """Writes concretized module sources into one output directory.

    Keeps track of what it has written so a repeated request for the same
    triple is an explicit no-op and a different triple never overwrites an
    earlier file.
    """

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)
        self._stems: dict[str, tuple] = {}
        self._written: dict[tuple, tuple[Path, str]] = {}
        self._env = Environment(
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )

    @property
    def written(self) -> list[Path]:
        return [path for path, _ in self._written.values()]

    def concretize(self, reference: ModuleReference, rule: GeneratorRule) -> Match:
        """Generate and write the source for ``reference`` using ``rule``.

        Raises:
            GenerationError: If the rule's template is incomplete or invalid,
                its generator fails, or the file cannot be written
        """
        key = (reference.name, canonical_parameters(reference), str(rule.source), rule.index)
        if key in self._written:
            path, module_name = self._written[key]
            logger.debug("Reusing %s for %s", path.name, reference.symbol)
            return Match(reference, rule, path, module_name, reused=True)

        module_name = self._allocate_stem(self._base_name(reference, rule), reference)
        content = self._generate(reference, rule, module_name)
        if not content.endswith("\n"):
            content += "\n"

        path = self.output_dir / f"{module_name}.{rule.extension}"
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise GenerationError(
                f"Could not write '{path}' for external module '{reference.name}': {e.strerror}",
                reference=reference.name,
            ) from e

        self._stems[module_name] = key
        self._written[key] = (path, module_name)
        logger.info("Concretized %s with rule %s -> %s", reference.describe(), rule.describe(), path)
        return Match(reference, rule, path, module_name)

    def _allocate_stem(self, base: str, reference: ModuleReference) -> str:
        if base not in self._stems:
            return base
        stem = f"{base}_{parameter_digest(reference)}"
        suffix = 1
        candidate = stem
        while candidate in self._stems:
            candidate = f"{stem}_{suffix}"
            suffix += 1
        return candidate

    def _context(self, reference: ModuleReference, rule: GeneratorRule,
                 module_name: str | None) -> dict[str, Any]:
        """Template variables; parameters the rule types are passed converted."""
        parameters = reference.parameter_map
        for spec in rule.parameters:
            if spec.name not in parameters:
                continue
            try:
                parameters[spec.name] = spec.coerce(parameters[spec.name])
            except (TypeError, ValueError) as e:
                raise GenerationError(
                    f"Parameter '{spec.name}' of external module '{reference.name}' "
                    f"is not a valid {spec.type}: {e}",
                    reference=reference.name,
                ) from e
        context = dict(parameters)
        context.update(
            name=reference.name,
            symbol=reference.symbol,
            parameters=parameters,
        )
        if module_name is not None:
            context["module_name"] = module_name
        return context

    def _render(self, text: str, context: dict[str, Any], reference: ModuleReference,
                what: str) -> str:
        try:
            return self._env.from_string(text).render(**context)
        except Exception as e:
            reason = str(e) if isinstance(e, TemplateError) else f"{type(e).__name__}: {e}"
            raise GenerationError(
                f"Failed to render {what} for external module '{reference.name}': {reason}",
                reference=reference.name,
            ) from e

    def _base_name(self, reference: ModuleReference, rule: GeneratorRule) -> str:
        if rule.module_name is None:
            return identifier(reference.name)
        rendered = self._render(
            rule.module_name, self._context(reference, rule, None), reference, "module name"
        ).strip()
        if not rendered:
            raise GenerationError(
                f"Module name template of rule {rule.describe()} rendered empty",
                reference=reference.name,
            )
        return identifier(rendered)

    def _generate(self, reference: ModuleReference, rule: GeneratorRule, module_name: str) -> str:
        context = self._context(reference, rule, module_name)

        if rule.template is not None:
            return self._render(rule.template, context, reference, "template")

        if rule.generic is not None:
            try:
                text = rule.generic.read_text(encoding="utf-8")
            except OSError as e:
                raise GenerationError(
                    f"Could not read generic template '{rule.generic}' for external "
                    f"module '{reference.name}': {e.strerror}",
                    reference=reference.name,
                ) from e
            except UnicodeDecodeError as e:
                raise GenerationError(
                    f"Generic template '{rule.generic}' for external module "
                    f"'{reference.name}' is not valid UTF-8",
                    reference=reference.name,
                ) from e
            return self._render(text, context, reference, f"generic '{rule.generic.name}'")

        return self._run_generator(reference, rule, context)

    def _run_generator(self, reference: ModuleReference, rule: GeneratorRule,
                       context: dict[str, Any]) -> str:
        context = dict(context, output_dir=str(self.output_dir))
        command = self._render(rule.generator, context, reference, "generator command")
        try:
            cmd = shlex.split(command)
        except ValueError as e:
            raise GenerationError(
                f"Could not parse generator command of rule {rule.describe()}: {e}",
                reference=reference.name,
            ) from e
        if not cmd:
            raise GenerationError(
                f"Generator command of rule {rule.describe()} is empty",
                reference=reference.name,
            )

        env = dict(os.environ)
        env["ASICSMITH_OUTPUT_DIR"] = str(self.output_dir)
        env["ASICSMITH_MODULE_NAME"] = context["module_name"]

        logger.debug("Running generator for %s: %s", reference.symbol, command)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=env)
        except OSError as e:
            raise GenerationError(
                f"Could not run generator '{cmd[0]}' for external module "
                f"'{reference.name}': {e.strerror}",
                reference=reference.name,
            ) from e
        except UnicodeDecodeError as e:
            raise GenerationError(
                f"Generator for external module '{reference.name}' wrote output "
                f"that is not valid UTF-8",
                reference=reference.name,
            ) from e

        if result.returncode != 0:
            details = result.stderr.strip().splitlines()[-5:]
            raise GenerationError(
                f"Generator for external module '{reference.name}' failed with "
                f"exit code {result.returncode}",
                reference=reference.name,
                details=details,
            )
        if not result.stdout.strip():
            raise GenerationError(
                f"Generator for external module '{reference.name}' produced no output",
                reference=reference.name,
            )
        return result.stdout
