"""Uploaded and outgoing document handling."""

from .classify import EXTENSION_TO_MIME, mime_for
from .incoming import AttachmentTooLarge, download_attachment

__all__ = [
    "EXTENSION_TO_MIME",
    "AttachmentTooLarge",
    "download_attachment",
    "mime_for",
]
