"""Grouped file delivery -- send generated files back in bounded batches.

Files are split into groups of at most ``group_size``. Each group is sent
as one media batch through the shared :class:`RateLimiter`, with a second
retry loop around the submission. A group that still fails is recorded and
reported, and the pipeline moves on. Every file is deleted after its group
settles, whatever the outcome.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import math
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..config.settings import DeliveryConfig
from ..util.async_helpers import SleepFn, sleep_with_jitter
from .rate_limiter import RateLimiter
from .storage import FileRef, FileStorage, LocalFileStorage

logger = logging.getLogger(__name__)

NotifyFn = Callable[[str], Awaitable[Any]]
SendBatchFn = Callable[[Any, "list[MediaItem]"], Awaitable[Any]]


@dataclass(frozen=True)
class MediaItem:
    """One entry of a media batch, as the transport's group send expects it."""

    path: Path
    type: str = "document"
    caption: str = ""


@dataclass
class DeliveryOutcome:
    success_count: int = 0
    failed_files: list[FileRef] = field(default_factory=list)
    group_count: int = 0

    @property
    def failed_count(self) -> int:
        return len(self.failed_files)

    def __iter__(self):
        yield self.success_count
        yield self.failed_files


def partition(files: Sequence[FileRef], size: int) -> list[list[FileRef]]:
    """Split *files* into consecutive groups of at most *size*, keeping order."""
    if size < 1:
        raise ValueError(f"group size must be positive, got {size}")
    return [list(files[i:i + size]) for i in range(0, len(files), size)]


def build_media_batch(group: Sequence[FileRef], caption: str = "") -> list[MediaItem]:
    """Caption, if any, goes on the first entry as chat clients show one per album."""
    return [
        MediaItem(path=Path(ref.path), caption=caption if i == 0 else "")
        for i, ref in enumerate(group)
    ]


def progress_text(sent: int, total: int) -> str:
    return f"📤 Progress: {sent}/{total} file terkirim..."


def group_failed_text(ordinal: int) -> str:
    return f"⚠️ Gagal mengirim grup file ke-{ordinal}. Mencoba melanjutkan..."


def summary_text(outcome: DeliveryOutcome) -> str:
    text = (
        "📊 Ringkasan Pengiriman:\n"
        f"✅ Berhasil: {outcome.success_count} file\n"
        f"❌ Gagal: {outcome.failed_count} file\n"
        f"📦 Total Grup: {outcome.group_count}\n"
    )
    if outcome.failed_files:
        text += "\nSilakan coba kembali untuk file yang gagal."
    return text


class GroupSender:
    def __init__(
        self,
        limiter: RateLimiter,
        send_batch: SendBatchFn,
        *,
        storage: FileStorage | None = None,
        config: DeliveryConfig | None = None,
        sleep: SleepFn = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        self._limiter = limiter
        self._send_batch = send_batch
        self._storage = storage or LocalFileStorage()
        self.config = config or DeliveryConfig()
        self._sleep = sleep
        self._rand = rand

    async def deliver(
        self,
        destination: Any,
        files: Sequence[FileRef],
        notify: NotifyFn,
        caption: str = "",
    ) -> DeliveryOutcome:
        c = self.config
        files = list(files)
        groups = partition(files, c.group_size)
        outcome = DeliveryOutcome(group_count=math.ceil(len(files) / c.group_size))
        logger.info("[delivery] sending %d file(s) in %d group(s)", len(files), len(groups))

        try:
            await self._sleep(c.warmup_delay)

            for index, group in enumerate(groups):
                ordinal = index + 1
                accounted = False
                try:
                    media = build_media_batch(group, caption)
                    if await self._send_group(destination, media, ordinal):
                        outcome.success_count += len(group)
                        accounted = True
                        if outcome.success_count % c.progress_every == 0 or ordinal == len(groups):
                            await notify(progress_text(outcome.success_count, len(files)))
                    else:
                        outcome.failed_files.extend(group)
                        accounted = True
                        await notify(group_failed_text(ordinal))
                except Exception as exc:
                    logger.error("[delivery] group %d error: %s", ordinal, exc, exc_info=True)
                    if not accounted:
                        outcome.failed_files.extend(group)
                finally:
                    self._cleanup(group)

                await self._sleep(c.inter_group_delay)

            await notify(summary_text(outcome))
        except Exception as exc:
            logger.error("[delivery] send files error: %s", exc)
            raise

        logger.info(
            "[delivery] done: %d sent, %d failed, %d group(s)",
            outcome.success_count, outcome.failed_count, outcome.group_count,
        )
        return outcome

    async def _send_group(self, destination: Any, media: list[MediaItem], ordinal: int) -> bool:
        c = self.config
        backoff = c.initial_backoff
        for attempt in range(1, c.max_attempts + 1):
            try:
                await self._limiter.submit(functools.partial(self._send_once, destination, media))
                return True
            except Exception as exc:
                logger.error(
                    "[delivery] group %d retry %d/%d: %s", ordinal, attempt, c.max_attempts, exc,
                )
                backoff *= c.backoff_multiplier
                await sleep_with_jitter(backoff, c.max_jitter, sleep=self._sleep, rand=self._rand)
        return False

    async def _send_once(self, destination: Any, media: list[MediaItem]) -> None:
        await self._sleep(self.config.send_delay)
        await self._send_batch(destination, media)

    def _cleanup(self, group: Sequence[FileRef]) -> None:
        for ref in group:
            try:
                if self._storage.exists(ref.path):
                    self._storage.delete(ref.path)
            except Exception as exc:
                logger.error("[delivery] file cleanup error: %s", exc)
