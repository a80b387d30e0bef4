"""Outbound transport -- text, documents and document batches via proactive sends.

Every send resumes the stored conversation with ``continue_conversation``
so long-running deliveries are not tied to the 15-second webhook window.
The adapter routes callback errors to ``on_turn_error``; they are captured
here and re-raised so the caller's retry logic sees them.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from botbuilder.core import TurnContext
from botbuilder.schema import (
    Activity,
    ActivityTypes,
    Attachment,
    AttachmentLayoutTypes,
    ConversationReference,
)

from ..delivery.group_sender import MediaItem
from ..delivery.storage import FileRef
from ..media.classify import mime_for
from ..util.async_helpers import run_sync

logger = logging.getLogger(__name__)


def _read_attachment(path: Path) -> Attachment:
    mime = mime_for(path)
    payload = base64.b64encode(Path(path).read_bytes()).decode("ascii")
    return Attachment(
        name=Path(path).name,
        content_type=mime,
        content_url=f"data:{mime};base64,{payload}",
    )


async def build_attachments(paths: Sequence[Path]) -> list[Attachment]:
    return [await run_sync(_read_attachment, p) for p in paths]


class BotTransport:
    def __init__(self, adapter: Any, app_id: str = "") -> None:
        self._adapter = adapter
        self._app_id = app_id

    async def _send(self, ref: ConversationReference, activity: Activity) -> None:
        errors: list[Exception] = []

        async def _callback(turn_context: TurnContext) -> None:
            try:
                await turn_context.send_activity(activity)
            except Exception as exc:
                errors.append(exc)

        bot_id = self._app_id or (ref.bot.id if ref.bot else None) or ""
        await self._adapter.continue_conversation(ref, _callback, bot_id=bot_id)
        if errors:
            raise errors[0]

    async def send_text(self, ref: ConversationReference, text: str) -> None:
        await self._send(ref, Activity(type=ActivityTypes.message, text=text, text_format="plain"))

    async def send_batch(self, ref: ConversationReference, media: Sequence[MediaItem]) -> None:
        """Send all *media* as one activity; any error fails the whole batch."""
        attachments = await build_attachments([m.path for m in media])
        caption = next((m.caption for m in media if m.caption), "")
        activity = Activity(
            type=ActivityTypes.message,
            attachments=attachments,
            attachment_layout=AttachmentLayoutTypes.list,
            text=caption or None,
        )
        logger.debug("[bot] sending batch of %d document(s)", len(attachments))
        await self._send(ref, activity)

    async def send_document(self, ref: ConversationReference, file: FileRef, caption: str = "") -> None:
        attachments = await build_attachments([file.path])
        activity = Activity(
            type=ActivityTypes.message,
            attachments=attachments,
            text=caption or None,
            text_format="plain",
        )
        await self._send(ref, activity)
