"""Local storage seam for generated output files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class FileRef:
    """A generated file waiting to be delivered.

    *count* is the number of contacts the file holds, when known.
    """

    path: Path
    count: int | None = None

    @property
    def name(self) -> str:
        return self.path.name


class FileStorage(Protocol):
    def exists(self, path: Path) -> bool: ...

    def delete(self, path: Path) -> None: ...


class LocalFileStorage:
    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def delete(self, path: Path) -> None:
        Path(path).unlink()
