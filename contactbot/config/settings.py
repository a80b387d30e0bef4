"""Application settings -- reads from environment and ``.env`` file.

Delivery and rate-limit tunables live in grouped dataclasses so the
pipeline can be constructed from ``cfg`` in the server and from literal
values in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from ..util.env_file import EnvFile
from ..util.singletons import register_singleton

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class RateLimitConfig:
    """Timing for :class:`~contactbot.delivery.rate_limiter.RateLimiter` (seconds)."""

    interval: float = 3.0
    max_retries: int = 5
    backoff_multiplier: float = 1.5
    timeout: float = 30.0
    max_jitter: float = 1.0


@dataclass(frozen=True)
class DeliveryConfig:
    """Timing and batching for :class:`~contactbot.delivery.group_sender.GroupSender`."""

    group_size: int = 10
    warmup_delay: float = 1.0
    send_delay: float = 0.5
    inter_group_delay: float = 3.0
    max_attempts: int = 5
    initial_backoff: float = 3.0
    backoff_multiplier: float = 1.5
    max_jitter: float = 1.0
    progress_every: int = 30


class Settings:
    """Runtime configuration sourced from environment variables and ``.env``."""

    _DATA_DIR_ENV: ClassVar[str] = "CONTACTBOT_DATA_DIR"

    def __init__(self) -> None:
        # .env path: explicit DOTENV_PATH > data_dir/.env > CWD/.env
        dotenv = os.getenv("DOTENV_PATH")
        if not dotenv:
            data_dir = os.getenv(self._DATA_DIR_ENV)
            dotenv = str(Path(data_dir) / ".env") if data_dir else ".env"
        self.env = EnvFile(dotenv)
        self.reload()

    def reload(self) -> None:
        """Re-read the ``.env`` file and environment variables."""
        e = self._read

        self.bot_app_id: str = e("BOT_APP_ID")
        self.bot_app_password: str = e("BOT_APP_PASSWORD")
        self.bot_app_tenant_id: str = e("BOT_APP_TENANT_ID")
        self.bot_port: int = int(e("BOT_PORT") or "3978")

        raw_admins = e("ADMIN_IDS")
        self.admin_ids: frozenset[str] = frozenset(
            uid.strip() for uid in raw_admins.split(",") if uid.strip()
        ) if raw_admins else frozenset()
        self.restrict_to_users: bool = e("RESTRICT_TO_USERS").lower() in _TRUTHY

        self.max_upload_bytes: int = int(e("MAX_UPLOAD_BYTES") or str(20 * 1024 * 1024))

        self.rate_limit = RateLimitConfig(
            interval=float(e("RATE_LIMIT_INTERVAL") or RateLimitConfig.interval),
        )
        self.delivery = DeliveryConfig(
            group_size=int(e("DELIVERY_GROUP_SIZE") or DeliveryConfig.group_size),
        )

    # -- derived paths -----------------------------------------------------

    @property
    def data_dir(self) -> Path:
        return Path(os.getenv(self._DATA_DIR_ENV, str(Path.home() / ".contactbot")))

    @property
    def users_path(self) -> Path:
        return self.data_dir / "users.json"

    @property
    def outgoing_dir(self) -> Path:
        return self.data_dir / "outgoing"

    # -- helpers -----------------------------------------------------------

    def _read(self, key: str) -> str:
        return self.env.read(key) or os.getenv(key, "")

    def ensure_dirs(self) -> None:
        for d in (self.data_dir, self.outgoing_dir):
            d.mkdir(parents=True, exist_ok=True)

    def write_env(self, **kwargs: str) -> None:
        self.env.write(**kwargs)
        self.reload()


# Module-level singleton
cfg = Settings()


def _reset_cfg() -> None:
    global cfg
    cfg = Settings()


register_singleton(_reset_cfg)
