# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Export session.

An ExportSession owns everything produced for one export run: the table of
matches (one per external reference, keyed by the reference's symbol) and
the concretizer that wrote their sources. It moves through

    INITIALIZED -> RESOLVING -> RESOLVED -> EMITTING -> COMPLETE

and drops to FAILED from RESOLVING or EMITTING on the first error. Nothing
referencing an external module is emitted before every reference has a
match. Files written before a failure stay on disk.
"""

import logging
from enum import Enum
from pathlib import Path

from asicsmith.backend.scripts import backend_config, synthesis_script
from asicsmith.backend.templates import render
from asicsmith.design.models import Design
from asicsmith.errors import (
    ExportIOError,
    SessionStateError,
    UnresolvedReferenceError,
)
from asicsmith.library.loader import GeneratorLibrary
from asicsmith.library.matcher import candidates, match
from asicsmith.settings.schema import ExportSettings

from .concretizer import Concretizer, Match

logger = logging.getLogger(__name__)

SYNTHESIS_SCRIPT = "synthesize.tcl"
BACKEND_CONFIG = "config.tcl"


class SessionState(Enum):
    INITIALIZED = "initialized"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    EMITTING = "emitting"
    COMPLETE = "complete"
    FAILED = "failed"


def ensure_output_dir(output_dir: str | Path) -> Path:
    """Create the output directory and its parents; an existing one is fine.

    Raises:
        ExportIOError: If the directory cannot be created
    """
    path = Path(output_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportIOError(
            f"Could not create output directory '{path}': {e.strerror}", path=path
        ) from e
    return path


class ExportSession:
    """Aggregates the design, the generator library and the backend target.

    Use as a context manager so matches are released when the run ends::

        with ExportSession(design, library, "out", "sky130", "sky130_fd_sc_hd", "top") as s:
            s.resolve_external_modules()
            s.emit_design_file()
            s.emit_scripts()
    """

    def __init__(
        self,
        design: Design,
        library: GeneratorLibrary,
        output_dir: str | Path,
        pdk: str,
        cell_library: str,
        design_name: str,
        settings: ExportSettings | None = None,
    ):
        self.design = design
        self.library = library
        self.pdk = pdk
        self.cell_library = cell_library
        self.design_name = design_name
        self.settings = settings if settings is not None else ExportSettings.model_construct()
        self.output_dir = ensure_output_dir(output_dir)

        self.state = SessionState.INITIALIZED
        self.matches: dict[str, Match] = {}
        self.design_file: Path | None = None
        self.scripts: tuple[Path, Path] | None = None
        self._concretizer = Concretizer(self.output_dir)

    def __enter__(self) -> "ExportSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release every match owned by this session."""
        self.matches.clear()

    def _require(self, expected: SessionState, operation: str) -> None:
        if self.state is not expected:
            raise SessionStateError(
                f"Cannot {operation} in state '{self.state.value}' "
                f"(expected '{expected.value}')"
            )

    def resolve_external_modules(self) -> dict[str, Match]:
        """Match and concretize every external reference of the design.

        References are processed in design order. Unmatched references are
        collected so that all of them are reported together; a generation
        failure stops the run immediately.

        Raises:
            UnresolvedReferenceError: If any reference has no matching rule
            GenerationError: If a matched rule fails to produce its source
        """
        self._require(SessionState.INITIALIZED, "resolve external modules")
        self.state = SessionState.RESOLVING

        unresolved: list[str] = []
        details: list[str] = []
        for reference in self.design.external_references():
            rule = match(reference, self.library)
            if rule is None:
                unresolved.append(reference.name)
                named = candidates(reference, self.library)
                if named:
                    details.append(
                        f"{reference.describe()}: {len(named)} rule(s) named '{reference.name}' "
                        f"reject these parameters"
                    )
                else:
                    details.append(f"{reference.describe()}: no rule named '{reference.name}'")
                logger.debug("No generator rule for %s", reference.describe())
                continue

            try:
                self.matches[reference.symbol] = self._concretizer.concretize(reference, rule)
            except Exception:
                self.state = SessionState.FAILED
                raise

        if unresolved:
            self.state = SessionState.FAILED
            raise UnresolvedReferenceError(unresolved, details=details)

        self.state = SessionState.RESOLVED
        logger.info("Resolved %d external reference(s)", len(self.matches))
        return dict(self.matches)

    def emit_design_file(self) -> Path:
        """Write ``<design-name>.v`` with a stub for every top-level module.

        Raises:
            ExportIOError: If the file cannot be written
        """
        self._require(SessionState.RESOLVED, "emit the design file")
        self.state = SessionState.EMITTING

        path = self.output_dir / f"{self.design_name}.v"
        self._write(path, render("design.v", modules=self.design.modules))
        self.design_file = path
        return path

    def emit_scripts(self) -> tuple[Path, Path]:
        """Write the synthesis script and the backend configuration.

        Raises:
            ExportIOError: If either file cannot be written
        """
        self._require(SessionState.EMITTING, "emit backend scripts")

        out = str(self.output_dir)
        sources = []
        for m in self._concretized_sources():
            if m.rule.hdl == "vhdl":
                logger.warning("Not reading VHDL source %s in the synthesis script", m.path.name)
                continue
            sources.append(str(m.path))
        synth = self.output_dir / SYNTHESIS_SCRIPT
        self._write(synth, synthesis_script(
            self.design_name, self.pdk, self.cell_library, out,
            sources=sources, settings=self.settings,
        ))
        config = self.output_dir / BACKEND_CONFIG
        self._write(config, backend_config(
            self.design_name, self.pdk, self.cell_library, out, settings=self.settings,
        ))

        self.scripts = (synth, config)
        self.state = SessionState.COMPLETE
        return self.scripts

    def _concretized_sources(self) -> list[Match]:
        """Matches that wrote a file, in resolution order, one per file."""
        return [m for m in self.matches.values() if not m.reused]

    def _write(self, path: Path, content: str) -> None:
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            self.state = SessionState.FAILED
            raise ExportIOError(f"Could not write '{path}': {e.strerror}", path=path) from e
        logger.debug("Wrote %s", path)
