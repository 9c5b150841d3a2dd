"""Attachment resolution, probing and dispatch."""

from .actions import AttachmentActions, format_file_size
from .dispatcher import ActionDispatcher, BrowserCapabilities, DesktopCapabilities
from .locator import ResourceLocator
from .resolver import looks_generated, resolve

__all__ = [
    "ActionDispatcher",
    "AttachmentActions",
    "BrowserCapabilities",
    "DesktopCapabilities",
    "ResourceLocator",
    "format_file_size",
    "looks_generated",
    "resolve",
]
