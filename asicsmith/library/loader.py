# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Generator library loading.

A generator configuration file is a YAML (or JSON) list of rule records, or
a mapping holding that list under ``components``. Loading is cumulative:
every file appends its rules after the ones already loaded, in file order,
and nothing is ever replaced or deduplicated. Rule order is what the
matcher's first-match-wins policy runs on.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Iterator

import yaml
from pydantic import ValidationError

from asicsmith._internal.io.yaml import describe_yaml_error, expand_env_vars, load_yaml
from asicsmith.errors import ParseError

from .models import GeneratorRule

logger = logging.getLogger(__name__)

# Fields where $DYNAMATIC and environment variables are expanded
_EXPANDED_FIELDS = ("generic", "generator")


class GeneratorLibrary:
    """Ordered, append-only collection of generator rules."""

    def __init__(self, dynamatic_path: str | Path = "."):
        self.dynamatic_path = Path(dynamatic_path)
        self._rules: list[GeneratorRule] = []
        self._sources: list[Path] = []

    @classmethod
    def from_files(cls, paths: Iterable[str | Path],
                   dynamatic_path: str | Path = ".") -> "GeneratorLibrary":
        library = cls(dynamatic_path)
        for path in paths:
            library.load(path)
        return library

    @property
    def rules(self) -> tuple[GeneratorRule, ...]:
        return tuple(self._rules)

    @property
    def sources(self) -> tuple[Path, ...]:
        return tuple(self._sources)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[GeneratorRule]:
        return iter(self._rules)

    def load(self, source_path: str | Path) -> int:
        """Append the rules of one configuration file.

        The file is parsed and validated completely before any rule is
        appended, so a failed load leaves the library unchanged.

        Returns:
            Number of rules appended

        Raises:
            ParseError: If the file is unreadable, malformed, or holds an
                invalid rule record
        """
        path = Path(source_path)
        try:
            data = load_yaml(path)
        except FileNotFoundError as e:
            raise ParseError(f"Could not open RTL configuration file '{path}'", source=path) from e
        except OSError as e:
            raise ParseError(
                f"Could not read RTL configuration file '{path}': {e.strerror}", source=path
            ) from e
        except yaml.YAMLError as e:
            raise ParseError(
                f"Could not parse RTL configuration file '{path}' ({describe_yaml_error(e)})",
                source=path,
            ) from e
        except UnicodeDecodeError as e:
            raise ParseError(
                f"RTL configuration file '{path}' is not valid UTF-8", source=path
            ) from e

        records = data.get("components") if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise ParseError(
                f"RTL configuration file '{path}' must contain a list of components",
                source=path,
            )

        rules = [self._parse_record(path, index, record) for index, record in enumerate(records)]
        self._rules.extend(rules)
        self._sources.append(path)
        logger.info("Loaded %d generator rule(s) from %s", len(rules), path)
        return len(rules)

    def _parse_record(self, path: Path, index: int, record: Any) -> GeneratorRule:
        if not isinstance(record, dict):
            raise ParseError(
                f"Component #{index} in '{path}' is not a mapping", source=path
            )

        fields = _normalize_keys(record)
        if isinstance(fields.get("parameters"), list):
            fields["parameters"] = [
                _normalize_keys(spec) if isinstance(spec, dict) else spec
                for spec in fields["parameters"]
            ]
        if "source" in fields or "index" in fields:
            raise ParseError(
                f"Component #{index} in '{path}' uses reserved key 'source' or 'index'",
                source=path,
            )

        variables = {"DYNAMATIC": str(self.dynamatic_path)}
        for key in _EXPANDED_FIELDS:
            if isinstance(fields.get(key), str):
                fields[key] = expand_env_vars(fields[key], variables)
        if isinstance(fields.get("generic"), str):
            generic = Path(fields["generic"])
            fields["generic"] = generic if generic.is_absolute() else path.parent / generic

        try:
            return GeneratorRule(**fields, source=path, index=index)
        except ValidationError as e:
            details = [
                f"{'.'.join(str(x) for x in err['loc']) or 'component'}: {err['msg']}"
                for err in e.errors()
            ]
            name = fields.get("name", "?")
            raise ParseError(
                f"Invalid component #{index} ('{name}') in '{path}'",
                source=path,
                details=details,
            ) from e


def _normalize_keys(record: dict) -> dict[str, Any]:
    """Accept ``module-name`` and ``module_name`` alike."""
    return {str(key).replace("-", "_"): value for key, value in record.items()}
