"""Root conftest: real-timer tests are opt-in via ``--run-slow``."""

from __future__ import annotations

import os

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run tests marked @pytest.mark.slow (they sleep on real timers).",
    )


def _slow_enabled(config) -> bool:
    return config.getoption("--run-slow") or os.getenv("CONTACTBOT_RUN_SLOW", "") == "1"


def pytest_collection_modifyitems(config, items):
    if _slow_enabled(config):
        return
    skip_slow = pytest.mark.skip(reason="real-timer test; pass --run-slow or set CONTACTBOT_RUN_SLOW=1")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)
