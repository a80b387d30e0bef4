"""MIME types for the files the bot accepts and sends back."""

from __future__ import annotations

from pathlib import PurePath

EXTENSION_TO_MIME: dict[str, str] = {
    ".vcf": "text/vcard",
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def mime_for(filename: str | PurePath) -> str:
    return EXTENSION_TO_MIME.get(PurePath(filename).suffix.lower(), "application/octet-stream")
