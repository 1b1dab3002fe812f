# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""asicsmith configuration schema using Pydantic.

Configuration Priority
----------------------
Settings are loaded from multiple sources with the following priority
(highest to lowest):
1. CLI arguments (passed to the ExportSettings constructor)
2. Environment variables (ASICSMITH_* prefix)
3. Project settings file (asicsmith.yaml)
4. Built-in defaults (Field defaults below)

The backend constants (clock, floorplan, placement) are the values written
into the generated synthesis script and LibreLane configuration. They are
never derived from the design.
"""

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from asicsmith._internal.io.yaml import expand_env_vars, load_yaml

_PROJECT_SETTINGS_FILE = "asicsmith.yaml"


def _find_project_settings() -> Path | None:
    """Find the project settings file.

    Search order:
    1. If ASICSMITH_PROJECT_DIR is set, check that directory only
    2. Otherwise, walk up from CWD to find asicsmith.yaml
    """
    if project_dir_override := os.environ.get("ASICSMITH_PROJECT_DIR"):
        candidate = Path(project_dir_override).resolve() / _PROJECT_SETTINGS_FILE
        return candidate if candidate.exists() else None

    current = Path.cwd().resolve()
    while current != current.parent:
        candidate = current / _PROJECT_SETTINGS_FILE
        if candidate.exists():
            return candidate
        current = current.parent
    return None


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Settings source reading the project YAML file."""

    def __init__(self, settings_cls: type[BaseSettings], settings_file: Path | None = None):
        super().__init__(settings_cls)
        self.settings_file = settings_file if settings_file is not None else _find_project_settings()
        self._data: dict[str, Any] = {}

        if self.settings_file is not None and self.settings_file.exists():
            data = load_yaml(self.settings_file)
            if not isinstance(data, dict):
                raise ValueError(f"Settings file {self.settings_file} must contain a mapping")
            self._data = {
                str(k).replace("-", "_"): v for k, v in expand_env_vars(data).items()
            }

    def get_field_value(self, field_name: str, field_info: Any) -> tuple[Any, str, bool]:
        if field_name in self._data:
            return self._data[field_name], field_name, True
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._data.copy()


class ExportSettings(BaseSettings):
    """Settings for one export run.

    Priority order (highest to lowest):
    1. CLI arguments (passed to constructor)
    2. Environment variables (ASICSMITH_* prefix)
    3. Project settings file (asicsmith.yaml)
    4. Built-in defaults
    """

    # Run options (mirrored by the CLI)
    dynamatic_path: Path = Field(
        default=Path("."), description="Dynamatic installation, substituted for $DYNAMATIC"
    )
    property_database: Path | None = Field(
        default=None, description="Formal property database (validated, not consumed)"
    )
    pdk: str = Field(default="sky130", description="Process design kit")
    library: str = Field(default="sky130_fd_sc_hd", description="Standard cell library")
    design_name: str = Field(default="dynamatic_design", description="Top-level design name")
    run_backend_flow: bool = Field(default=False, description="Run the LibreLane flow")
    backend_flow_path: str = Field(default="", description="LibreLane installation path")
    log_level: Literal["error", "warning", "info", "debug"] = Field(
        default="warning", description="Console log level"
    )

    # Synthesis
    liberty_corner: str = Field(
        default="tt_025C_1v80", description="Liberty timing corner suffix"
    )
    synth_strategy: str = Field(default="DELAY 0", description="LibreLane SYNTH_STRATEGY")
    synth_max_fanout: int = Field(default=5, ge=1, description="LibreLane SYNTH_MAX_FANOUT")

    # Clock
    clock_period: float = Field(default=10.0, gt=0, description="Clock period in ns")
    clock_port: str = Field(default="clock", description="Clock port name")
    clock_net: str = Field(default="clock", description="Clock net name")

    # Floorplan and placement
    die_area: str = Field(default="0 0 1000 1000", description="Die area 'x0 y0 x1 y1' in um")
    place_site: str = Field(default="unithd", description="Placement site")
    place_density: float = Field(default=0.6, gt=0, le=1, description="Target placement density")
    routing_strategy: int = Field(default=2, ge=0, description="LibreLane ROUTING_STRATEGY")

    # Backend flow launcher
    flow_name: str = Field(default="librelane", description="Launcher is run_<flow_name>.sh")
    flow_tag: str = Field(default="dynamatic", description="Run tag passed to the flow")
    flow_image: str = Field(
        default="efabless/openlane:current", description="OPENLANE_IMAGE_NAME for the flow"
    )

    settings_file: Path | None = Field(
        default=None, exclude=True, description="Explicit project settings file"
    )

    model_config = SettingsConfigDict(
        env_prefix="ASICSMITH_",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False,
        env_file=None,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Init args, then ASICSMITH_* env vars, then the project YAML file."""
        settings_file = init_settings().get("settings_file")
        if settings_file is not None:
            settings_file = Path(settings_file)

        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls, settings_file=settings_file),
        )
