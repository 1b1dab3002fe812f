# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for the backend flow launcher.

The flow itself is replaced by a small bash script standing in for
``flow.tcl`` so the launcher runs end to end without LibreLane installed.
"""

import os
import shutil

import pytest

from asicsmith.backend import launcher_path, run_backend_flow, write_launcher
from asicsmith.errors import ConfigError, ExecutionError

pytestmark = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")


@pytest.fixture
def fake_flow(tmp_path):
    """Factory for a flow directory whose flow.tcl records its environment and exits."""

    def _make(exit_code: int = 0):
        flow_dir = tmp_path / "librelane"
        flow_dir.mkdir(exist_ok=True)
        script = flow_dir / "flow.tcl"
        script.write_text(
            "#!/bin/bash\n"
            'echo "$PWD $PDK_ROOT $OPENLANE_ROOT $*" > flow.log\n'
            f"exit {exit_code}\n"
        )
        script.chmod(0o755)
        return flow_dir

    return _make


class TestLauncher:

    def test_script_contents(self, tmp_path, output_dir):
        output_dir.mkdir()

        script = write_launcher("/opt/librelane", output_dir, "top")

        assert script == output_dir / "run_librelane.sh"
        text = script.read_text()
        assert text.startswith("#!/bin/bash\nset -e\n")
        assert f"cd {output_dir.resolve()}" in text
        assert "export PDK_ROOT=/opt/librelane/pdks" in text
        assert "export OPENLANE_ROOT=/opt/librelane" in text
        assert "export OPENLANE_IMAGE_NAME=efabless/openlane:current" in text
        assert "export CARAVEL_LITE=1" in text
        assert "/opt/librelane/flow.tcl -design top -tag dynamatic" in text
        assert os.access(script, os.X_OK)

    def test_unwritable_location(self, tmp_path):
        with pytest.raises(ExecutionError, match="Cannot create librelane run script"):
            write_launcher("/opt/librelane", tmp_path / "missing", "top")


class TestRunBackendFlow:

    def test_empty_flow_path_writes_nothing(self, output_dir):
        output_dir.mkdir()

        with pytest.raises(ConfigError) as exc_info:
            run_backend_flow("", output_dir, "top")

        assert exc_info.value.stage == "config"
        assert list(output_dir.iterdir()) == []

    def test_successful_flow(self, fake_flow, output_dir):
        flow_dir = fake_flow(0)
        output_dir.mkdir()

        run_backend_flow(str(flow_dir), output_dir, "add_numbers")

        log = (output_dir / "flow.log").read_text().split()
        assert log == [
            str(output_dir.resolve()),
            f"{flow_dir}/pdks",
            str(flow_dir),
            "-design", "add_numbers", "-tag", "dynamatic",
        ]
        assert launcher_path(output_dir).exists()

    def test_non_zero_exit_is_reported(self, fake_flow, output_dir):
        flow_dir = fake_flow(3)
        output_dir.mkdir()

        with pytest.raises(ExecutionError, match="exit code 3") as exc_info:
            run_backend_flow(str(flow_dir), output_dir, "top")

        assert exc_info.value.exit_code == 3
        assert launcher_path(output_dir).exists()
