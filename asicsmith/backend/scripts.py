# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Synthesis script and backend configuration generation.

Both generators are pure: they build a ScriptContext from their arguments
and render an in-memory template. Writing the returned text is the
caller's job. Values are substituted verbatim; an empty design name, PDK or
library shows up empty in the output rather than being replaced by a
default.
"""

from typing import Sequence

from pydantic import BaseModel, ConfigDict

from asicsmith.settings.schema import ExportSettings

from .templates import render


class ScriptContext(BaseModel):
    """Named placeholders available to the backend script templates."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    design_name: str
    pdk: str
    library: str
    output_dir: str
    design_file: str
    netlist_path: str
    liberty_path: str
    sources: tuple[str, ...] = ()
    clock_period: float
    clock_port: str
    clock_net: str
    die_area: str
    place_site: str
    place_density: float
    synth_strategy: str
    synth_max_fanout: int
    routing_strategy: int

    @classmethod
    def build(
        cls,
        design_name: str,
        pdk: str,
        library: str,
        output_dir: str,
        sources: Sequence[str] = (),
        settings: ExportSettings | None = None,
    ) -> "ScriptContext":
        s = settings if settings is not None else ExportSettings.model_construct()
        output_dir = str(output_dir)
        return cls(
            design_name=design_name,
            pdk=pdk,
            library=library,
            output_dir=output_dir,
            design_file=f"{output_dir}/{design_name}.v",
            netlist_path=f"{output_dir}/{design_name}_synthesized.v",
            liberty_path=liberty_path(pdk, library, s.liberty_corner),
            sources=tuple(str(src) for src in sources),
            clock_period=s.clock_period,
            clock_port=s.clock_port,
            clock_net=s.clock_net,
            die_area=s.die_area,
            place_site=s.place_site,
            place_density=s.place_density,
            synth_strategy=s.synth_strategy,
            synth_max_fanout=s.synth_max_fanout,
            routing_strategy=s.routing_strategy,
        )


def liberty_path(pdk: str, library: str, corner: str) -> str:
    return f"$::env(PDK_ROOT)/{pdk}/libs.ref/{library}/liberty/{library}__{corner}.lib"


def synthesis_script(
    design_name: str,
    pdk: str,
    library: str,
    output_dir: str,
    *,
    sources: Sequence[str] = (),
    settings: ExportSettings | None = None,
) -> str:
    """Yosys synthesis script mapping the design onto the standard cells.

    ``sources`` are read before the design file, in the order given.
    """
    context = ScriptContext.build(design_name, pdk, library, output_dir, sources, settings)
    return render("synthesize.tcl", **context.model_dump())


def backend_config(
    design_name: str,
    pdk: str,
    library: str,
    output_dir: str,
    *,
    settings: ExportSettings | None = None,
) -> str:
    """LibreLane configuration for the synthesized netlist."""
    context = ScriptContext.build(design_name, pdk, library, output_dir, settings=settings)
    return render("config.tcl", **context.model_dump())
