"""Contact record and format errors."""

from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".txt", ".xlsx", ".csv", ".vcf")


class ContactFormatError(ValueError):
    """Input could not be read as a contact list."""


@dataclass(frozen=True)
class Contact:
    name: str
    phone: str

    @property
    def digits(self) -> str:
        """Phone number without the leading ``+``, as written to TXT exports."""
        return self.phone[1:] if self.phone.startswith("+") else self.phone

    def renamed(self, name: str) -> Contact:
        return Contact(name=name, phone=self.phone)
