"""Bot Framework ActivityHandler -- routes uploads and commands to the dispatcher.

Work runs as a background task and replies through proactive messaging so
the Bot Framework webhook returns within the 15-second timeout while a
grouped delivery may take minutes.
"""

from __future__ import annotations

import asyncio
import logging

from botbuilder.core import ActivityHandler, TurnContext
from botbuilder.schema import Activity, ActivityTypes, Attachment, ChannelAccount, ConversationReference

from ..config.settings import cfg
from ..media.incoming import download_attachment
from ..state.chat_session import SessionStore
from ..state.user_store import UserStore
from . import texts
from .commands import CommandContext, CommandDispatcher
from .transport import BotTransport

logger = logging.getLogger(__name__)

_ALWAYS_ALLOWED = ("/id", "/start")


class Bot(ActivityHandler):
    def __init__(
        self,
        dispatcher: CommandDispatcher,
        sessions: SessionStore,
        users: UserStore,
        transport: BotTransport,
    ) -> None:
        self._dispatcher = dispatcher
        self._sessions = sessions
        self._users = users
        self._transport = transport
        self._tasks: set[asyncio.Task] = set()

    async def on_message_activity(self, turn_context: TurnContext) -> None:
        activity = turn_context.activity
        user_id = activity.from_property.id if activity.from_property else ""
        text = (activity.text or "").strip()

        if not _is_authorized(user_id, text, self._users):
            await _reply(turn_context, texts.NOT_AUTHORIZED)
            return

        documents = [
            a for a in activity.attachments or []
            if a.content_url and not (a.content_type or "").startswith("application/vnd.microsoft")
        ]
        if not text and not documents:
            return

        ref = TurnContext.get_conversation_reference(activity)
        task = asyncio.create_task(self.process(ref, user_id, text, documents))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def process(
        self,
        ref: ConversationReference,
        user_id: str,
        text: str,
        documents: list[Attachment],
    ) -> None:
        async def reply_fn(message: str) -> None:
            await self._transport.send_text(ref, message)

        ctx = CommandContext(
            text=text,
            user_id=user_id,
            reply=reply_fn,
            ref=ref,
            session=self._sessions.get(user_id),
        )
        try:
            for attachment in documents:
                data = await download_attachment(attachment)
                await self._dispatcher.handle_document(ctx, attachment.name or "", data)
            if text:
                await self._dispatcher.handle_text(ctx)
        except Exception as exc:
            logger.error("[bot] error handling message from %s: %s", user_id, exc, exc_info=True)
            try:
                await reply_fn(texts.GENERIC_ERROR)
            except Exception as send_exc:
                logger.warning("[bot] could not report error to %s: %s", user_id, send_exc)

    async def on_members_added_activity(
        self,
        members_added: list[ChannelAccount],
        turn_context: TurnContext,
    ) -> None:
        for member in members_added:
            if member.id != turn_context.activity.recipient.id:
                await _reply(turn_context, texts.WELCOME)

    async def drain(self) -> None:
        """Wait for in-flight background work (used on shutdown)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


async def _reply(ctx: TurnContext, text: str) -> None:
    await ctx.send_activity(
        Activity(type=ActivityTypes.message, text=text, text_format="plain")
    )


def _is_authorized(user_id: str, text: str, users: UserStore) -> bool:
    if not cfg.restrict_to_users or users.is_user(user_id):
        return True
    command = text.split(maxsplit=1)[0].lower() if text else ""
    if command in _ALWAYS_ALLOWED:
        return True
    logger.warning("Blocked user %s (not in allowlist)", user_id)
    return False
