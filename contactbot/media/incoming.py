"""Download uploaded documents from the channel's attachment URL."""

from __future__ import annotations

import logging

import aiohttp
from botbuilder.schema import Attachment

from ..config.settings import cfg

logger = logging.getLogger(__name__)

_TIMEOUT = aiohttp.ClientTimeout(total=60)


class AttachmentTooLarge(Exception):
    pass


async def download_attachment(
    attachment: Attachment,
    *,
    max_bytes: int | None = None,
    session: aiohttp.ClientSession | None = None,
) -> bytes:
    """Fetch *attachment* content, refusing anything over *max_bytes*.

    Raises ``ValueError`` when the attachment carries no URL,
    :class:`AttachmentTooLarge` over the cap, and ``aiohttp.ClientError``
    on transport failures.
    """
    url = attachment.content_url
    if not url:
        raise ValueError(f"Attachment {attachment.name!r} has no content URL")
    limit = max_bytes if max_bytes is not None else cfg.max_upload_bytes

    owns_session = session is None
    if session is None:
        session = aiohttp.ClientSession(timeout=_TIMEOUT)
    try:
        async with session.get(url) as resp:
            resp.raise_for_status()
            if resp.content_length and resp.content_length > limit:
                raise AttachmentTooLarge(f"{attachment.name}: {resp.content_length:,} bytes")
            buf = bytearray()
            async for chunk in resp.content.iter_chunked(64 * 1024):
                buf.extend(chunk)
                if len(buf) > limit:
                    raise AttachmentTooLarge(f"{attachment.name}: over {limit:,} bytes")
            data = bytes(buf)
    finally:
        if owns_session:
            await session.close()

    logger.info("[bot] downloaded %s (%d bytes)", attachment.name, len(data))
    return data
