"""Tests for the proactive outbound transport."""

from __future__ import annotations

import base64
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from botbuilder.schema import ChannelAccount, ConversationAccount, ConversationReference

from contactbot.delivery.group_sender import MediaItem
from contactbot.delivery.storage import FileRef
from contactbot.messaging.transport import BotTransport, build_attachments


def _ref() -> ConversationReference:
    return ConversationReference(
        bot=ChannelAccount(id="bot-1"),
        conversation=ConversationAccount(id="conv-1"),
        channel_id="telegram",
    )


def _adapter(send_activity: AsyncMock | None = None) -> tuple[MagicMock, AsyncMock]:
    turn_ctx = MagicMock()
    turn_ctx.send_activity = send_activity or AsyncMock()

    async def continue_conversation(ref, callback, bot_id=None):
        await callback(turn_ctx)

    adapter = MagicMock()
    adapter.continue_conversation = AsyncMock(side_effect=continue_conversation)
    return adapter, turn_ctx.send_activity


def _write(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(body)
    return path


class TestBuildAttachments:
    @pytest.mark.asyncio
    async def test_data_uri(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "a.vcf", "BEGIN:VCARD\nEND:VCARD\n")
        (att,) = await build_attachments([path])
        assert att.name == "a.vcf"
        assert att.content_type == "text/vcard"
        prefix = "data:text/vcard;base64,"
        assert att.content_url.startswith(prefix)
        assert base64.b64decode(att.content_url[len(prefix):]) == b"BEGIN:VCARD\nEND:VCARD\n"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            await build_attachments([tmp_path / "gone.txt"])


class TestSend:
    @pytest.mark.asyncio
    async def test_send_text(self) -> None:
        adapter, send_activity = _adapter()
        await BotTransport(adapter, "app-id").send_text(_ref(), "halo")
        activity = send_activity.call_args[0][0]
        assert activity.text == "halo"
        assert activity.text_format == "plain"
        assert adapter.continue_conversation.call_args.kwargs["bot_id"] == "app-id"

    @pytest.mark.asyncio
    async def test_bot_id_falls_back_to_reference(self) -> None:
        adapter, _ = _adapter()
        await BotTransport(adapter).send_text(_ref(), "halo")
        assert adapter.continue_conversation.call_args.kwargs["bot_id"] == "bot-1"

    @pytest.mark.asyncio
    async def test_send_batch_is_one_activity(self, tmp_path: Path) -> None:
        adapter, send_activity = _adapter()
        media = [
            MediaItem(_write(tmp_path, "g 1.vcf", "one"), caption="Grup 1"),
            MediaItem(_write(tmp_path, "g 2.txt", "two")),
        ]
        await BotTransport(adapter, "app-id").send_batch(_ref(), media)

        send_activity.assert_awaited_once()
        activity = send_activity.call_args[0][0]
        assert [a.name for a in activity.attachments] == ["g 1.vcf", "g 2.txt"]
        assert [a.content_type for a in activity.attachments] == ["text/vcard", "text/plain"]
        assert activity.attachment_layout == "list"
        assert activity.text == "Grup 1"

    @pytest.mark.asyncio
    async def test_send_batch_without_caption(self, tmp_path: Path) -> None:
        adapter, send_activity = _adapter()
        await BotTransport(adapter).send_batch(_ref(), [MediaItem(_write(tmp_path, "a.vcf", "x"))])
        assert send_activity.call_args[0][0].text is None

    @pytest.mark.asyncio
    async def test_callback_error_is_raised(self, tmp_path: Path) -> None:
        adapter, _ = _adapter(AsyncMock(side_effect=ConnectionError("429 Too Many Requests")))
        with pytest.raises(ConnectionError, match="429"):
            await BotTransport(adapter).send_batch(_ref(), [MediaItem(_write(tmp_path, "a.vcf", "x"))])

    @pytest.mark.asyncio
    async def test_unreadable_file_fails_before_sending(self, tmp_path: Path) -> None:
        adapter, send_activity = _adapter()
        with pytest.raises(FileNotFoundError):
            await BotTransport(adapter).send_batch(_ref(), [MediaItem(tmp_path / "gone.vcf")])
        adapter.continue_conversation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_document(self, tmp_path: Path) -> None:
        adapter, send_activity = _adapter()
        file = FileRef(path=_write(tmp_path, "semua.txt", "08123456789"), count=1)
        await BotTransport(adapter).send_document(_ref(), file, "📁 semua.txt (1 nomor)")
        activity = send_activity.call_args[0][0]
        assert activity.text == "📁 semua.txt (1 nomor)"
        (att,) = activity.attachments
        assert att.name == "semua.txt"
