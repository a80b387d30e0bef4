"""Readers for uploaded contact files (TXT, CSV, XLSX, VCF).

Every reader returns contacts in file order. Formats without names number
them ``"<prefix> 1"``, ``"<prefix> 2"``, ... in the order found.
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterable
from pathlib import PurePath

import pandas as pd

from .models import SUPPORTED_EXTENSIONS, Contact, ContactFormatError
from .phone import format_phone_number

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "Contact"

_TEL_RE = re.compile(r"TEL[^:]*:(.*)", re.IGNORECASE)
_FN_RE = re.compile(r"FN:(.*)", re.IGNORECASE)


def _require_text(content: object) -> str:
    if not isinstance(content, str):
        raise ContactFormatError("Invalid content type. Expected string.")
    return content


def _number_values(values: Iterable[object], prefix: str) -> list[Contact]:
    contacts: list[Contact] = []
    for value in values:
        phone = format_phone_number(value)
        if phone:
            contacts.append(Contact(name=f"{prefix} {len(contacts) + 1}", phone=phone))
    return contacts


def parse_txt(content: str, prefix: str = DEFAULT_PREFIX) -> list[Contact]:
    """One number per line; lines without any digit are skipped."""
    lines = (line.strip() for line in _require_text(content).split("\n"))
    return _number_values((line for line in lines if line and re.search(r"\d", line)), prefix)


def parse_csv(content: str, prefix: str = DEFAULT_PREFIX) -> list[Contact]:
    """Every comma-separated cell of every line is a candidate number."""
    cells = (
        value.strip()
        for line in _require_text(content).split("\n")
        if line.strip()
        for value in line.strip().split(",")
    )
    return _number_values(cells, prefix)


def _cell_text(cell: object) -> str | None:
    if cell is None or pd.isna(cell):
        return None
    # numeric cells may still arrive as floats (e.g. 6.28e12 typed as a number)
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell)


def parse_xlsx(data: bytes, prefix: str = DEFAULT_PREFIX) -> list[Contact]:
    """Scan every cell of the first sheet, row by row.

    Text cells stay text so leading zeros survive.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise ContactFormatError("Invalid workbook type. Expected bytes.")
    try:
        frame = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object)
    except Exception as exc:
        raise ContactFormatError(f"Unreadable spreadsheet: {exc}") from exc
    cells = (
        text
        for row in frame.itertuples(index=False)
        for text in map(_cell_text, row)
        if text
    )
    return _number_values(cells, prefix)


def parse_vcf(content: str) -> list[Contact]:
    """Take the first ``TEL`` and ``FN`` of each card; unnamed cards get a number."""
    contacts: list[Contact] = []
    for card in _require_text(content).split("BEGIN:VCARD"):
        if not card.strip():
            continue
        tel = _TEL_RE.search(card)
        if not tel:
            continue
        phone = format_phone_number(tel.group(1))
        if not phone:
            continue
        fn = _FN_RE.search(card)
        name = fn.group(1).strip() if fn else ""
        contacts.append(Contact(name=name or f"{DEFAULT_PREFIX} {len(contacts) + 1}", phone=phone))
    return contacts


def extension_of(filename: str) -> str:
    return PurePath(filename).suffix.lower()


def parse_upload(filename: str, data: bytes, prefix: str = DEFAULT_PREFIX) -> list[Contact]:
    """Dispatch an uploaded file to the reader for its extension."""
    ext = extension_of(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise ContactFormatError(f"Unsupported file type: {ext or filename}")
    logger.debug("Parsing %s (%d bytes) as %s", filename, len(data), ext)
    if ext == ".xlsx":
        return parse_xlsx(data, prefix)
    text = data.decode("utf-8", errors="replace")
    if ext == ".vcf":
        return parse_vcf(text)
    if ext == ".csv":
        return parse_csv(text, prefix)
    return parse_txt(text, prefix)
