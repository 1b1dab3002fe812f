# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from enum import IntEnum

# ============================================================================
# CLI Names
# ============================================================================

CLI_NAME = "export-asic"

# ============================================================================
# Exit Codes
# ============================================================================


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130  # Standard SIGINT exit code
