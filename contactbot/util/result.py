"""Outcome of allowlist mutations: a success flag plus the reply text."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Result:
    """Truthy on success; unpacks into ``(success, message)``::

        added = store.add_user("12345")
        if not added:
            await reply(added.message)

        ok, msg = store.remove_user("12345")
    """

    success: bool
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> Result:
        return cls(True, message)

    @classmethod
    def fail(cls, message: str = "") -> Result:
        return cls(False, message)

    def __bool__(self) -> bool:
        return self.success

    def __iter__(self):
        return iter((self.success, self.message))
