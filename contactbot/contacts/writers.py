"""Output builders -- VCF/TXT content, file naming, and splitting."""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import TypeVar

from ..delivery.storage import FileRef
from .models import Contact

T = TypeVar("T")

_VCF_SPECIAL = re.compile(r"([\\,;])")
_CONTROL_CHARS = re.compile(r"[\u0000-\u001F\u007F-\u009F]")
_UNSAFE_FILENAME = re.compile(r'[<>:"/\\|?*\x00-\x1F]')


def escape_vcf_value(value: str) -> str:
    """Escape vCard specials; emoji and other printable text pass through."""
    value = _VCF_SPECIAL.sub(r"\\\1", value)
    value = value.replace("\n", " ")
    return _CONTROL_CHARS.sub("", value)


def generate_vcf(contacts: Sequence[Contact]) -> str:
    return "".join(
        "BEGIN:VCARD\n"
        "VERSION:3.0\n"
        f"FN:{escape_vcf_value(c.name)}\n"
        f"TEL;TYPE=CELL:{c.phone}\n"
        "END:VCARD\n"
        for c in contacts
    )


def generate_txt(contacts: Sequence[Contact]) -> str:
    return "\n".join(c.digits for c in contacts)


def sanitize_file_name(name: str) -> str:
    return _UNSAFE_FILENAME.sub("", name).strip()


def split_evenly(items: Sequence[T], parts: int) -> list[list[T]]:
    """Split into *parts* chunks; the first ``len % parts`` get one extra item.

    Empty chunks (more parts than items) are dropped.
    """
    if parts < 1:
        raise ValueError(f"parts must be positive, got {parts}")
    base, extra = divmod(len(items), parts)
    chunks: list[list[T]] = []
    start = 0
    for i in range(parts):
        size = base + (1 if i < extra else 0)
        if size > 0:
            chunks.append(list(items[start:start + size]))
            start += size
    return chunks


def number_contacts(contacts: Sequence[Contact], prefix: str) -> list[Contact]:
    """Rename to ``"<prefix> 1"``, ``"<prefix> 2"``, ..."""
    return [c.renamed(f"{prefix} {i}") for i, c in enumerate(contacts, start=1)]


def write_vcf(directory: Path, stem: str, contacts: Sequence[Contact]) -> FileRef:
    path = Path(directory) / f"{sanitize_file_name(stem)}.vcf"
    path.write_text(generate_vcf(contacts), encoding="utf-8")
    return FileRef(path=path, count=len(contacts))


def write_txt(directory: Path, stem: str, contacts: Sequence[Contact]) -> FileRef:
    path = Path(directory) / f"{sanitize_file_name(stem)}.txt"
    path.write_text(generate_txt(contacts), encoding="utf-8")
    return FileRef(path=path, count=len(contacts))
