"""Attachment descriptor resolution: which name to request, which to show.

Only the names the upload service generates (file-<timestamp>-<random>.<ext>)
are guaranteed to exist in the file store; original names are for save
dialogs. The two are resolved independently and never conflated.
"""

import re
from typing import Any, Optional
from urllib.parse import unquote, urlparse

from tender_portal.models.attachment import AttachmentDescriptor, ResolvedAttachment

GENERATED_NAME = re.compile(r"^file-\d+-\d+\.(pdf|doc|docx|txt|xls|xlsx)$", re.IGNORECASE)


def looks_generated(name: Optional[str]) -> bool:
    """True for names the upload service generates."""
    return bool(name and GENERATED_NAME.match(name))


def basename(value: Optional[str], *, is_url: bool = False) -> Optional[str]:
    """Last path segment of a path or URL; None when there is none."""
    if not value:
        return None
    if is_url:
        value = unquote(urlparse(value).path)
    segment = value.replace("\\", "/").split("/")[-1].strip()
    return segment or None


def storage_candidates(descriptor: AttachmentDescriptor) -> list[str]:
    """Every name-like value in priority order, original names last."""
    ordered = [
        descriptor.nested("filename"),
        descriptor.nested("file"),
        descriptor.get("filename"),
        descriptor.get("file"),
        descriptor.get("generatedName"),
        descriptor.get("savedAs"),
        basename(descriptor.get("path")),
        basename(descriptor.get("file_path")),
        basename(descriptor.get("url"), is_url=True),
        descriptor.nested("originalName"),
        descriptor.get("name"),
        descriptor.get("originalName"),
        descriptor.get("original_name"),
    ]
    return _unique(ordered)


def original_name_candidates(descriptor: AttachmentDescriptor) -> list[str]:
    """User-facing names in priority order."""
    return _unique(
        [
            descriptor.nested("originalName"),
            descriptor.get("originalName"),
            descriptor.get("original_name"),
            descriptor.get("name"),
        ]
    )


def resolve(descriptor: AttachmentDescriptor | dict | Any) -> ResolvedAttachment:
    """
    Derive storage and display names from a raw descriptor. Never raises;
    an empty storage_name means the attachment cannot be retrieved.
    """
    descriptor = AttachmentDescriptor.from_raw(descriptor)
    candidates = storage_candidates(descriptor)
    storage_name = next((c for c in candidates if looks_generated(c)), None)
    if storage_name is None:
        storage_name = candidates[0] if candidates else ""
    originals = original_name_candidates(descriptor)
    display_name = originals[0] if originals else storage_name
    return ResolvedAttachment(storage_name=storage_name, display_name=display_name)


def _unique(values: list[Optional[str]]) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen
