"""Tests for grouped file delivery."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from contactbot.config.settings import DeliveryConfig, RateLimitConfig
from contactbot.delivery.group_sender import (
    DeliveryOutcome,
    GroupSender,
    MediaItem,
    build_media_batch,
    partition,
    summary_text,
)
from contactbot.delivery.rate_limiter import RateLimiter
from contactbot.delivery.storage import FileRef

DEST = "chat-42"


def _sender(sleep, send_batch, storage=None) -> GroupSender:
    limiter = RateLimiter(RateLimitConfig(), sleep=sleep, clock=lambda: 0.0, rand=lambda: 0.0)
    return GroupSender(
        limiter,
        send_batch,
        storage=storage,
        config=DeliveryConfig(),
        sleep=sleep,
        rand=lambda: 0.0,
    )


def _texts(notify: AsyncMock) -> list[str]:
    return [c.args[0] for c in notify.await_args_list]


def _failing_for(files: list[FileRef], bad_paths: set[Path]):
    async def send_batch(destination, media: list[MediaItem]) -> None:
        if media[0].path in bad_paths:
            raise ConnectionError("429 Too Many Requests")

    return AsyncMock(side_effect=send_batch)


class TestPartition:
    def test_sizes(self, make_files) -> None:
        groups = partition(make_files(25), 10)
        assert [len(g) for g in groups] == [10, 10, 5]

    def test_keeps_order(self, make_files) -> None:
        files = make_files(12)
        assert [f for g in partition(files, 5) for f in g] == files

    def test_empty(self) -> None:
        assert partition([], 10) == []

    def test_rejects_zero(self) -> None:
        with pytest.raises(ValueError):
            partition([], 0)


class TestBuildMediaBatch:
    def test_one_document_per_file(self, make_files) -> None:
        files = make_files(3)
        media = build_media_batch(files)
        assert [m.path for m in media] == [f.path for f in files]
        assert all(m.type == "document" for m in media)

    def test_caption_on_first_entry_only(self, make_files) -> None:
        media = build_media_batch(make_files(3), caption="Group A")
        assert [m.caption for m in media] == ["Group A", "", ""]


class TestDeliverAllSucceed:
    @pytest.mark.asyncio
    async def test_twenty_five_files(self, frozen_sleep, make_files) -> None:
        files = make_files(25)
        send_batch = AsyncMock()
        notify = AsyncMock()

        outcome = await _sender(frozen_sleep, send_batch).deliver(DEST, files, notify)

        assert outcome.success_count == 25
        assert outcome.failed_files == []
        assert outcome.group_count == 3
        assert [len(c.args[1]) for c in send_batch.await_args_list] == [10, 10, 5]
        assert all(c.args[0] == DEST for c in send_batch.await_args_list)
        texts = _texts(notify)
        assert texts[0] == "📤 Progress: 25/25 file terkirim..."
        assert not any("ke-" in t for t in texts)
        assert "📦 Total Grup: 3" in texts[-1]
        assert "Silakan coba kembali" not in texts[-1]
        assert not any(f.path.exists() for f in files)

    @pytest.mark.asyncio
    async def test_progress_every_thirty(self, frozen_sleep, make_files) -> None:
        notify = AsyncMock()
        await _sender(frozen_sleep, AsyncMock()).deliver(DEST, make_files(40), notify)
        progress = [t for t in _texts(notify) if t.startswith("📤")]
        assert progress == [
            "📤 Progress: 30/40 file terkirim...",
            "📤 Progress: 40/40 file terkirim...",
        ]

    @pytest.mark.asyncio
    async def test_outcome_unpacks(self, frozen_sleep, make_files) -> None:
        success, failed = await _sender(frozen_sleep, AsyncMock()).deliver(DEST, make_files(2), AsyncMock())
        assert success == 2
        assert failed == []

    @pytest.mark.asyncio
    async def test_caption_forwarded(self, frozen_sleep, make_files) -> None:
        send_batch = AsyncMock()
        await _sender(frozen_sleep, send_batch).deliver(DEST, make_files(2), AsyncMock(), caption="hi")
        media = send_batch.await_args.args[1]
        assert media[0].caption == "hi"

    @pytest.mark.asyncio
    async def test_timing(self, frozen_sleep, make_files) -> None:
        await _sender(frozen_sleep, AsyncMock()).deliver(DEST, make_files(3), AsyncMock())
        # warm-up, pre-send delay, limiter throttle, inter-group delay
        assert frozen_sleep.delays == [1.0, 0.5, 3.0, 3.0]


class TestDeliverPartialFailure:
    @pytest.mark.asyncio
    async def test_middle_group_fails(self, frozen_sleep, make_files) -> None:
        files = make_files(25)
        send_batch = _failing_for(files, {files[10].path})
        notify = AsyncMock()

        outcome = await _sender(frozen_sleep, send_batch).deliver(DEST, files, notify)

        assert outcome.success_count == 15
        assert outcome.failed_files == files[10:20]
        texts = _texts(notify)
        assert "⚠️ Gagal mengirim grup file ke-2. Mencoba melanjutkan..." in texts
        assert not any("ke-1" in t or "ke-3" in t for t in texts)
        assert "❌ Gagal: 10 file" in texts[-1]
        assert "Silakan coba kembali untuk file yang gagal." in texts[-1]
        assert not any(f.path.exists() for f in files)

    @pytest.mark.asyncio
    async def test_failed_group_retried_at_both_layers(self, frozen_sleep, make_files) -> None:
        files = make_files(25)
        send_batch = _failing_for(files, {files[10].path})
        await _sender(frozen_sleep, send_batch).deliver(DEST, files, AsyncMock())
        # 1 + (5 outer x 5 queue attempts) + 1
        assert send_batch.await_count == 27

    @pytest.mark.asyncio
    async def test_outer_backoff_grows(self, frozen_sleep, make_files) -> None:
        files = make_files(1)
        await _sender(frozen_sleep, _failing_for(files, {files[0].path})).deliver(DEST, files, AsyncMock())
        for expected in (4.5, 6.75, 10.125, 15.1875, 22.78125):
            assert expected in frozen_sleep.delays

    @pytest.mark.asyncio
    async def test_batch_construction_error(self, frozen_sleep, make_files) -> None:
        good = make_files(1)[0]
        broken = FileRef(path=None)  # type: ignore[arg-type]
        send_batch = AsyncMock()
        notify = AsyncMock()

        outcome = await _sender(frozen_sleep, send_batch).deliver(DEST, [good, broken], notify)

        assert outcome.success_count == 0
        assert outcome.failed_files == [good, broken]
        send_batch.assert_not_awaited()
        assert not good.path.exists()
        assert "❌ Gagal: 2 file" in _texts(notify)[-1]

    @pytest.mark.asyncio
    async def test_progress_notification_failure_keeps_success(self, frozen_sleep, make_files) -> None:
        sent: list[str] = []

        async def notify(text: str) -> None:
            sent.append(text)
            if text.startswith("📤"):
                raise RuntimeError("chat unavailable")

        files = make_files(3)
        outcome = await _sender(frozen_sleep, AsyncMock()).deliver(DEST, files, notify)
        assert outcome.success_count == 3
        assert outcome.failed_files == []
        assert sent[-1].startswith("📊")

    @pytest.mark.parametrize("count", [1, 9, 10, 11, 25, 37])
    @pytest.mark.asyncio
    async def test_every_file_accounted_for(self, frozen_sleep, make_files, count: int) -> None:
        files = make_files(count)
        groups = partition(files, 10)
        bad = {g[0].path for i, g in enumerate(groups, start=1) if i % 2 == 0}

        outcome = await _sender(frozen_sleep, _failing_for(files, bad)).deliver(DEST, files, AsyncMock())

        assert outcome.success_count + outcome.failed_count == count
        assert outcome.failed_files == [f for i, g in enumerate(groups, start=1) if i % 2 == 0 for f in g]
        assert not any(f.path.exists() for f in files)


class TestCleanup:
    @pytest.mark.asyncio
    async def test_missing_file_is_not_an_error(self, frozen_sleep, make_files) -> None:
        files = make_files(2)
        files[0].path.unlink()
        outcome = await _sender(frozen_sleep, AsyncMock()).deliver(DEST, files, AsyncMock())
        assert outcome.success_count == 2
        assert not files[1].path.exists()

    @pytest.mark.asyncio
    async def test_delete_error_is_swallowed(self, frozen_sleep, make_files) -> None:
        storage = MagicMock()
        storage.exists.return_value = True
        storage.delete.side_effect = PermissionError("read-only")
        files = make_files(3)

        outcome = await _sender(frozen_sleep, AsyncMock(), storage=storage).deliver(DEST, files, AsyncMock())

        assert outcome.success_count == 3
        assert storage.delete.call_count == 3

    @pytest.mark.asyncio
    async def test_each_file_deleted_once(self, frozen_sleep, make_files) -> None:
        storage = MagicMock()
        storage.exists.return_value = True
        files = make_files(12)
        await _sender(frozen_sleep, AsyncMock(), storage=storage).deliver(DEST, files, AsyncMock())
        assert [c.args[0] for c in storage.delete.call_args_list] == [f.path for f in files]


class TestStructuralFailure:
    @pytest.mark.asyncio
    async def test_empty_list(self, frozen_sleep) -> None:
        send_batch = AsyncMock()
        notify = AsyncMock()
        outcome = await _sender(frozen_sleep, send_batch).deliver(DEST, [], notify)
        assert (outcome.success_count, outcome.failed_files) == (0, [])
        assert outcome.group_count == 0
        send_batch.assert_not_awaited()
        notify.assert_awaited_once()
        assert "📦 Total Grup: 0" in notify.await_args.args[0]

    @pytest.mark.asyncio
    async def test_warmup_error_propagates(self, make_files) -> None:
        async def broken_sleep(delay: float) -> None:
            raise RuntimeError("event loop closing")

        send_batch = AsyncMock()
        with pytest.raises(RuntimeError, match="closing"):
            await _sender(broken_sleep, send_batch).deliver(DEST, make_files(2), AsyncMock())
        send_batch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_summary_error_propagates_after_cleanup(self, frozen_sleep, make_files) -> None:
        async def notify(text: str) -> None:
            if text.startswith("📊"):
                raise ConnectionError("reply failed")

        files = make_files(2)
        with pytest.raises(ConnectionError):
            await _sender(frozen_sleep, AsyncMock()).deliver(DEST, files, notify)
        assert not any(f.path.exists() for f in files)


class TestSummaryText:
    def test_with_failures(self, make_files) -> None:
        outcome = DeliveryOutcome(success_count=10, failed_files=make_files(5), group_count=2)
        text = summary_text(outcome)
        assert "✅ Berhasil: 10 file" in text
        assert "❌ Gagal: 5 file" in text
        assert text.endswith("Silakan coba kembali untuk file yang gagal.")
