# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Logging setup for asicsmith using Python's standard logging with Rich.

Usage:
    from asicsmith._internal.logging import setup_logging

    # In CLI setup
    setup_logging(level="info")

    # In library code
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Concretizing %s", name)
"""

import logging

LEVELS = {
    'error': logging.ERROR,
    'warning': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG
}


def setup_logging(level: str = "warning") -> None:
    """Configure the root logger with a Rich handler.

    Unknown level names fall back to WARNING. Calling this again only
    adjusts the level of the Rich handler already installed; handlers
    added by others are left alone.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    log_level = LEVELS.get(level.lower(), logging.WARNING)

    root = logging.getLogger()
    root.setLevel(log_level)

    installed = [h for h in root.handlers if isinstance(h, RichHandler)]
    if not installed:
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=(log_level == logging.DEBUG),
            show_path=False,
            markup=False,
            show_time=False
        )
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)
    else:
        for handler in installed:
            handler.setLevel(log_level)
