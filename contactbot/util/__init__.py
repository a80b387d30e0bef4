"""Shared utilities."""

from .async_helpers import jitter, run_sync, sleep_with_jitter
from .env_file import EnvFile
from .result import Result
from .singletons import register_singleton, registered, reset_all_singletons

__all__ = [
    "EnvFile",
    "Result",
    "jitter",
    "register_singleton",
    "registered",
    "reset_all_singletons",
    "run_sync",
    "sleep_with_jitter",
]
