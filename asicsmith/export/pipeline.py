# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""End-to-end export pipeline.

Stages run strictly in order and each one fails fast:

1. parse the design (and the property database, when given)
2. load the generator configuration files
3. create the output directory, resolve and concretize every external reference
4. emit the top-level design file, the synthesis script and the backend config
5. optionally run the backend flow

A requested flow without a flow path is rejected before stage 1.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import yaml

from asicsmith._internal.io.yaml import describe_yaml_error, load_yaml
from asicsmith.backend.flow import launcher_path, run_backend_flow
from asicsmith.design.loader import load_design
from asicsmith.errors import ConfigError, ParseError
from asicsmith.library.loader import GeneratorLibrary
from asicsmith.settings.schema import ExportSettings

from .session import ExportSession

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Paths produced by a successful export."""

    output_dir: Path
    design_file: Path
    synthesis_script: Path
    backend_config: Path
    sources: list[Path] = field(default_factory=list)
    launcher: Path | None = None


def load_property_database(path: str | Path) -> int:
    """Check that the property database is readable; return its property count.

    Raises:
        ParseError: If the file is unreadable or not JSON/YAML
    """
    path = Path(path)
    try:
        data = load_yaml(path)
    except FileNotFoundError as e:
        raise ParseError(f"Could not open property database '{path}'", source=path) from e
    except OSError as e:
        raise ParseError(
            f"Could not read property database '{path}': {e.strerror}", source=path
        ) from e
    except yaml.YAMLError as e:
        raise ParseError(
            f"Could not parse property database '{path}' ({describe_yaml_error(e)})", source=path
        ) from e
    except UnicodeDecodeError as e:
        raise ParseError(
            f"Property database '{path}' is not valid UTF-8", source=path
        ) from e

    properties = data.get("properties", []) if isinstance(data, dict) else data
    return len(properties) if isinstance(properties, list) else 0


def export_design(
    design_path: str | Path,
    output_dir: str | Path,
    config_files: Sequence[str | Path],
    settings: ExportSettings | None = None,
) -> ExportResult:
    """Run the whole export for one design.

    Raises:
        ConfigError: Flow requested without a flow path, or no config file
        ParseError: Malformed design, configuration file or property database
        ExportIOError: Output directory or artifact write failure
        UnresolvedReferenceError: An external reference has no matching rule
        GenerationError: A matched rule failed to generate its module
        ExecutionError: The backend flow failed
    """
    s = settings if settings is not None else ExportSettings()

    if s.run_backend_flow and not s.backend_flow_path:
        raise ConfigError("Backend flow requested but no flow path given (--backend-flow-path)")
    if not config_files:
        raise ConfigError("At least one RTL configuration file is required")

    design = load_design(design_path)
    if s.property_database is not None:
        count = load_property_database(s.property_database)
        logger.info(
            "Property database %s holds %d properties; not used by the ASIC export",
            s.property_database, count
        )

    library = GeneratorLibrary.from_files(config_files, dynamatic_path=s.dynamatic_path)

    with ExportSession(design, library, output_dir, s.pdk, s.library, s.design_name, s) as session:
        matches = session.resolve_external_modules()
        design_file = session.emit_design_file()
        synth, config = session.emit_scripts()
        result = ExportResult(
            output_dir=session.output_dir,
            design_file=design_file,
            synthesis_script=synth,
            backend_config=config,
            sources=list(dict.fromkeys(m.path for m in matches.values())),
        )

    if s.run_backend_flow:
        run_backend_flow(s.backend_flow_path, result.output_dir, s.design_name, settings=s)
        result.launcher = launcher_path(result.output_dir, s)

    return result

