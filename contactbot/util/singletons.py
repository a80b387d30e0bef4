"""Reset hooks for module-level singletons (``cfg``, the session store)."""

from __future__ import annotations

from collections.abc import Callable

ResetFn = Callable[[], None]

# keyed by qualified name so a module imported twice registers once
_resetters: dict[str, ResetFn] = {}


def _key(fn: ResetFn) -> str:
    return f"{fn.__module__}.{fn.__qualname__}"


def register_singleton(reset_fn: ResetFn) -> ResetFn:
    _resetters[_key(reset_fn)] = reset_fn
    return reset_fn


def registered() -> list[str]:
    return sorted(_resetters)


def reset_all_singletons() -> None:
    """Rebuild every registered singleton, in registration order."""
    for fn in list(_resetters.values()):
        fn()
