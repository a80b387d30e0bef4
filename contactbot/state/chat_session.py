"""Per-user conversion state, held in memory for the life of the process."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..contacts.models import Contact
from ..util.singletons import register_singleton


@dataclass
class UploadedFile:
    name: str
    data: bytes


@dataclass
class AdminConvertState:
    """Progress through the three-step ``/anc`` dialogue."""

    step: int = 1
    numbers: list[str] = field(default_factory=list)
    contact_name: str = ""


@dataclass
class ChatSession:
    contacts: list[Contact] = field(default_factory=list)
    file_count: int = 0
    uploaded_vcards: list[UploadedFile] = field(default_factory=list)
    admin_convert: AdminConvertState | None = None

    @property
    def has_contacts(self) -> bool:
        return bool(self.contacts)

    def add_contacts(self, contacts: list[Contact]) -> None:
        self.contacts.extend(contacts)
        self.file_count += 1


class SessionStore:
    def __init__(self) -> None:
        self._sessions: dict[str, ChatSession] = {}

    def get(self, user_id: str) -> ChatSession:
        return self._sessions.setdefault(user_id, ChatSession())

    def reset(self, user_id: str) -> ChatSession:
        self._sessions[user_id] = ChatSession()
        return self._sessions[user_id]

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


_store = SessionStore()


def get_session_store() -> SessionStore:
    return _store


def _reset_store() -> None:
    global _store
    _store = SessionStore()


register_singleton(_reset_store)
