"""Outbound file delivery -- rate-limited queue and grouped sender."""

from .group_sender import DeliveryOutcome, GroupSender, MediaItem, build_media_batch, partition
from .rate_limiter import QueuedTask, RateLimiter
from .storage import FileRef, FileStorage, LocalFileStorage

__all__ = [
    "DeliveryOutcome",
    "FileRef",
    "FileStorage",
    "GroupSender",
    "LocalFileStorage",
    "MediaItem",
    "QueuedTask",
    "RateLimiter",
    "build_media_batch",
    "partition",
]
