# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

import logging
import sys
from pathlib import Path

import click

from asicsmith import __version__
from asicsmith._internal.logging import setup_logging
from asicsmith.errors import ExportError

from .constants import CLI_NAME, ExitCode
from .utils import console, err_console, show_summary, success

logger = logging.getLogger(__name__)


@click.command(name=CLI_NAME, context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("input_file", type=click.Path(path_type=Path))
@click.argument("output_dir", type=click.Path(path_type=Path))
@click.argument("rtl_configs", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--dynamatic-path", type=click.Path(path_type=Path),
              help="Path to Dynamatic, substituted for $DYNAMATIC in RTL configurations [default: .]")
@click.option("--property-database", type=click.Path(path_type=Path),
              help="Formal property database (checked for validity only)")
@click.option("--pdk", type=str, help="Process design kit [default: sky130]")
@click.option("--library", type=str, help="Standard cell library [default: sky130_fd_sc_hd]")
@click.option("--design-name", type=str, help="Design name [default: dynamatic_design]")
@click.option("--run-backend-flow", is_flag=True, help="Run the complete LibreLane flow")
@click.option("--backend-flow-path", type=str, help="Path to the LibreLane installation")
@click.option("-l", "--log-level", type=click.Choice(["error", "warning", "info", "debug"]),
              help="Log verbosity [default: warning]")
@click.option("--settings", "settings_file", type=click.Path(exists=True, path_type=Path),
              help="Project settings file (default: nearest asicsmith.yaml)")
@click.version_option(version=__version__, prog_name=CLI_NAME)
@click.pass_context
def export_asic(
    ctx: click.Context,
    input_file: Path,
    output_dir: Path,
    rtl_configs: tuple[Path, ...],
    dynamatic_path: Path | None,
    property_database: Path | None,
    pdk: str | None,
    library: str | None,
    design_name: str | None,
    run_backend_flow: bool,
    backend_flow_path: str | None,
    log_level: str | None,
    settings_file: Path | None,
) -> None:
    """Export ASIC-ready RTL and backend scripts from a hardware design.

    \b
    INPUT_FILE: Design file (modules and external module references)
    OUTPUT_DIR: Directory receiving every generated artifact
    RTL_CONFIGS: Generator configuration files, searched in the order given
    """
    from asicsmith.export import export_design
    from asicsmith.settings import load_settings

    try:
        settings = load_settings(
            settings_file=settings_file,
            dynamatic_path=dynamatic_path,
            property_database=property_database,
            pdk=pdk,
            library=library,
            design_name=design_name,
            run_backend_flow=True if run_backend_flow else None,
            backend_flow_path=backend_flow_path,
            log_level=log_level,
        )
        setup_logging(settings.log_level)
        logger.debug("Export settings: %s", settings.model_dump())

        result = export_design(input_file, output_dir, list(rtl_configs), settings)
    except ExportError as e:
        err_console.print(e.format_for_console(include_details=False))
        for detail in e.details:
            logger.info(detail)
        logger.debug("Export failed", exc_info=True)
        ctx.exit(ExitCode.FAILURE)

    success("ASIC export completed successfully!")
    rows = [
        ("Output directory", result.output_dir),
        ("Design file", result.design_file),
        ("Yosys script", result.synthesis_script),
        ("LibreLane config", result.backend_config),
    ]
    if result.launcher is not None:
        rows.append(("LibreLane launcher", result.launcher))
    show_summary(rows)


def main() -> None:
    """Console script entry point; maps every failure to exit code 1."""
    try:
        code = export_asic.main(prog_name=CLI_NAME, standalone_mode=False)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(ExitCode.INTERRUPTED)
    except click.exceptions.Abort:
        sys.exit(ExitCode.INTERRUPTED)
    except click.ClickException as e:
        e.show()
        sys.exit(ExitCode.FAILURE)
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/red] {e}", markup=True)
        logging.exception(f"Unexpected error in {CLI_NAME}")
        sys.exit(ExitCode.FAILURE)
    sys.exit(code or ExitCode.SUCCESS)


if __name__ == "__main__":
    main()
