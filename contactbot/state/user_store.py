"""User/admin allowlist persisted to ``users.json``."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ..config.settings import cfg
from ..util.result import Result

logger = logging.getLogger(__name__)


class UserList(BaseModel):
    admins: list[str] = Field(default_factory=list)
    users: list[str] = Field(default_factory=list)


class UserStore:
    """JSON-file-backed allowlist. A missing file is created empty."""

    def __init__(self, path: Path | None = None, seed_admins: frozenset[str] | None = None) -> None:
        self._path = path or cfg.users_path
        self._data = UserList()
        self._load()
        seeds = cfg.admin_ids if seed_admins is None else seed_admins
        for admin_id in sorted(seeds):
            if admin_id not in self._data.admins:
                self._data.admins.append(admin_id)

    def _load(self) -> None:
        if not self._path.exists():
            self._save()
            return
        try:
            self._data = UserList.model_validate(json.loads(self._path.read_text()))
        except (json.JSONDecodeError, ValidationError, OSError) as exc:
            logger.warning("Failed to load user list from %s: %s", self._path, exc)

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self._data.model_dump_json())

    @property
    def admins(self) -> list[str]:
        return list(self._data.admins)

    @property
    def users(self) -> list[str]:
        return list(self._data.users)

    def is_admin(self, user_id: str | int) -> bool:
        return str(user_id) in self._data.admins

    def is_user(self, user_id: str | int) -> bool:
        uid = str(user_id)
        return uid in self._data.users or uid in self._data.admins

    def add_user(self, user_id: str | int) -> Result:
        uid = str(user_id)
        if uid in self._data.users:
            return Result.fail(f"⚠️ User {uid} sudah terdaftar.")
        self._data.users.append(uid)
        self._save()
        logger.info("User %s added to allowlist", uid)
        return Result.ok(f"✅ User {uid} ditambahkan.")

    def remove_user(self, user_id: str | int) -> Result:
        uid = str(user_id)
        if uid not in self._data.users:
            return Result.fail(f"⚠️ User {uid} tidak ditemukan.")
        self._data.users.remove(uid)
        self._save()
        logger.info("User %s removed from allowlist", uid)
        return Result.ok(f"✅ User {uid} dihapus.")
