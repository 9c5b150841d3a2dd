"""Attachment descriptors and the values derived from them."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Intent(str, Enum):
    """What the user wants to do with an attachment."""

    VIEW = "view"
    DOWNLOAD = "download"


class AttachmentDescriptor(BaseModel):
    """
    Raw, inconsistently shaped metadata for one uploaded file.
    The backend has used several field names over time; none is guaranteed.
    """

    fields: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> "AttachmentDescriptor":
        """Accept a dict, a bare path/filename string, or anything else (empty)."""
        if isinstance(raw, AttachmentDescriptor):
            return raw
        if isinstance(raw, dict):
            return cls(fields=dict(raw))
        if isinstance(raw, str) and raw.strip():
            return cls(fields={"path": raw.strip()})
        return cls()

    def get(self, key: str) -> Optional[str]:
        """Top-level field as a non-empty string, else None."""
        return _text(self.fields.get(key))

    def nested(self, key: str) -> Optional[str]:
        """Field of the nested `data` sub-object as a non-empty string, else None."""
        data = self.fields.get("data")
        if not isinstance(data, dict):
            return None
        return _text(data.get(key))

    @property
    def size_bytes(self) -> Optional[int]:
        size = self.fields.get("size")
        if size is None and isinstance(self.fields.get("data"), dict):
            size = self.fields["data"].get("size")
        if isinstance(size, bool):
            return None
        if isinstance(size, (int, float)):
            return int(size)
        if isinstance(size, str) and size.strip().isdigit():
            return int(size.strip())
        return None

    @property
    def mime_type(self) -> Optional[str]:
        return self.get("mimetype") or self.get("mimeType") or self.get("mime_type")


class ResolvedAttachment(BaseModel):
    """Best-guess names for one attachment. Empty storage_name means not retrievable."""

    storage_name: str = ""
    display_name: str = ""

    @property
    def retrievable(self) -> bool:
        return bool(self.storage_name)


class ProbeCandidate(BaseModel):
    """One URL to try for an attachment action."""

    url: str
    intent: Intent
    label: str = ""


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None
