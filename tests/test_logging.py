# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Essential tests for logging configuration."""

import logging

from rich.logging import RichHandler

from asicsmith._internal.logging import setup_logging


def test_levels(reset_logging):
    for name, level in [
        ("error", logging.ERROR),
        ("warning", logging.WARNING),
        ("info", logging.INFO),
        ("debug", logging.DEBUG),
    ]:
        setup_logging(level=name)
        assert logging.getLogger().level == level


def test_installs_a_single_rich_handler(reset_logging):
    setup_logging("info")
    setup_logging("debug")

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
    assert len(handlers) == 1
    assert handlers[0].level == logging.DEBUG


def test_unknown_level_falls_back_to_warning(reset_logging):
    setup_logging("chatty")
    assert logging.getLogger().level == logging.WARNING
