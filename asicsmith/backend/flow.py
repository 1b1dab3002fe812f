# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Backend (LibreLane) flow launcher.

The flow is started through a launcher script written next to the other
artifacts, so a user can rerun it by hand with the same environment. The
run blocks until the child exits; a non-zero exit is final, nothing is
retried.
"""

import logging
import os
import shlex
import stat
import subprocess
from pathlib import Path

from asicsmith.errors import ConfigError, ExecutionError
from asicsmith.settings.schema import ExportSettings

from .templates import render

logger = logging.getLogger(__name__)

SHEBANG = "#!/bin/bash"
_EXECUTABLE = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def launcher_path(output_dir: str | Path, settings: ExportSettings | None = None) -> Path:
    s = settings if settings is not None else ExportSettings.model_construct()
    return Path(output_dir) / f"run_{s.flow_name}.sh"


def flow_environment(flow_path: str, settings: ExportSettings | None = None) -> dict[str, str]:
    """Environment variables the external flow reads."""
    s = settings if settings is not None else ExportSettings.model_construct()
    return {
        "PDK_ROOT": f"{flow_path}/pdks",
        "OPENLANE_ROOT": flow_path,
        "OPENLANE_IMAGE_NAME": s.flow_image,
        "CARAVEL_ROOT": f"{flow_path}/caravel",
        "CARAVEL_LITE": "1",
    }


def write_launcher(
    flow_path: str,
    output_dir: str | Path,
    design_name: str,
    settings: ExportSettings | None = None,
) -> Path:
    """Write the launcher script and mark it executable.

    Raises:
        ExecutionError: If the script cannot be written or made executable
    """
    s = settings if settings is not None else ExportSettings.model_construct()
    script = launcher_path(output_dir, s)
    content = render(
        "launcher.sh",
        shebang=SHEBANG,
        output_dir=str(Path(output_dir).resolve()),
        environment=flow_environment(flow_path, s),
        flow_name=s.flow_name,
        flow_command=shlex.join(
            [f"{flow_path}/flow.tcl", "-design", design_name, "-tag", s.flow_tag]
        ),
    )

    try:
        script.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ExecutionError(f"Cannot create {s.flow_name} run script '{script}': {e}") from e

    try:
        os.chmod(script, script.stat().st_mode | _EXECUTABLE)
    except OSError as e:
        raise ExecutionError(f"Failed to make {s.flow_name} script executable: {e}") from e

    return script


def run_backend_flow(
    flow_path: str,
    output_dir: str | Path,
    design_name: str,
    *,
    settings: ExportSettings | None = None,
) -> None:
    """Write the launcher script and run the backend flow to completion.

    Raises:
        ConfigError: If ``flow_path`` is empty; nothing is written
        ExecutionError: If the launcher cannot be written, made executable
            or started, or if the flow exits non-zero
    """
    if not flow_path:
        raise ConfigError("Backend flow path not specified (use --backend-flow-path)")

    s = settings if settings is not None else ExportSettings.model_construct()
    script = write_launcher(flow_path, output_dir, design_name, s)

    cmd = ["bash", str(script)]
    logger.info("Running %s flow: %s", s.flow_name, " ".join(cmd))

    try:
        result = subprocess.run(cmd)
    except OSError as e:
        raise ExecutionError(f"Could not start {s.flow_name} flow: {e}") from e

    if result.returncode != 0:
        raise ExecutionError(
            f"{s.flow_name} flow failed with exit code {result.returncode}",
            exit_code=result.returncode,
        )

    logger.info("%s flow completed successfully", s.flow_name)
