"""``.env`` reader/writer used by :mod:`contactbot.config.settings`."""

from __future__ import annotations

from pathlib import Path

from dotenv import dotenv_values, set_key, unset_key


class EnvFile:
    """Key/value view over a ``.env`` file. Missing file reads as empty."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read_all(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        # bare ``KEY`` lines parse to None
        return {k: v for k, v in dotenv_values(self.path, interpolate=False).items() if v is not None}

    def read(self, key: str) -> str:
        return self.read_all().get(key, "")

    def write(self, **kwargs: str) -> None:
        """Merge *kwargs* into the file; an empty value removes the key."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()
        current = self.read_all()
        for key, value in kwargs.items():
            if value:
                set_key(self.path, key, value, quote_mode="auto")
            elif key in current:
                unset_key(self.path, key)
