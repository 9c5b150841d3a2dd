"""Tender detail page controller."""

import logging
from dataclasses import dataclass
from typing import Optional

from tender_portal.attachments.actions import AttachmentActions, format_file_size
from tender_portal.attachments.resolver import resolve
from tender_portal.errors import AuthExpired, PortalError
from tender_portal.models.attachment import Intent, ResolvedAttachment
from tender_portal.models.record import CanonicalRecord
from tender_portal.sources.fetcher import TenderFetcher

logger = logging.getLogger(__name__)


@dataclass
class AttachmentRow:
    """One line of the attachment listing."""

    index: int
    resolved: ResolvedAttachment
    size: str


class TenderDetailsController:
    """
    State behind a tender detail page.

    A failed load blocks the page: the record stays None and error holds the
    message to show, with can_retry telling whether to offer a retry button.
    Attachment actions never touch that state. After close(), results that
    arrive late are discarded and in-flight attachment actions stop.
    """

    def __init__(
        self,
        fetcher: TenderFetcher,
        actions: AttachmentActions,
        tender_id: str | int,
        role: Optional[str] = None,
    ):
        self._fetcher = fetcher
        self._actions = actions
        self.tender_id = tender_id
        self.role = role
        self.record: Optional[CanonicalRecord] = None
        self.error: Optional[str] = None
        self.can_retry = False
        self.redirect_to: Optional[str] = None
        self.loading = False
        self._closed = False

    def is_active(self) -> bool:
        return not self._closed

    def close(self) -> None:
        self._closed = True

    def load(self) -> Optional[CanonicalRecord]:
        """Fetch the record. Returns it, or None when loading failed or the page closed."""
        if self._closed:
            return None
        self.loading = True
        self.error = None
        try:
            record = self._fetcher.fetch(self.tender_id, role=self.role)
        except AuthExpired as e:
            if self._closed:
                return None
            self.record = None
            self.error = e.user_message
            self.can_retry = False
            self.redirect_to = e.login_url
            return None
        except PortalError as e:
            logger.warning("Loading tender %s failed: %s", self.tender_id, e)
            if self._closed:
                return None
            self.record = None
            self.error = e.user_message
            self.can_retry = e.retryable
            return None
        finally:
            self.loading = False

        if self._closed:
            logger.debug("Discarding tender %s loaded after close", self.tender_id)
            return None
        self.record = record
        self.can_retry = False
        return record

    def retry(self) -> Optional[CanonicalRecord]:
        """User-triggered reload; the only retry there is."""
        return self.load()

    def attachments(self, kind: str = "attachments") -> list[AttachmentRow]:
        if self.record is None:
            return []
        return [
            AttachmentRow(index=i, resolved=resolve(d), size=format_file_size(d.size_bytes))
            for i, d in enumerate(self.record.attachment_list(kind))
        ]

    def view_attachment(self, index: int, kind: str = "attachments") -> bool:
        return self._act(index, Intent.VIEW, kind)

    def download_attachment(self, index: int, kind: str = "attachments") -> bool:
        return self._act(index, Intent.DOWNLOAD, kind)

    def _act(self, index: int, intent: Intent, kind: str) -> bool:
        if self.record is None or self._closed:
            return False
        return self._actions.perform(
            self.record, index, intent, kind=kind, should_continue=self.is_active
        )
