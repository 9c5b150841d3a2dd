"""Attachment actions: resolve -> locate -> dispatch for one user click."""

import logging
from typing import Callable, Optional

import httpx

from tender_portal.attachments.dispatcher import ActionDispatcher
from tender_portal.attachments.locator import ResourceLocator
from tender_portal.attachments.resolver import resolve
from tender_portal.errors import ActionCancelled, ResourceUnavailable
from tender_portal.models.attachment import Intent, ResolvedAttachment
from tender_portal.models.record import CanonicalRecord

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size_bytes: Optional[int]) -> str:
    """Human-readable size, e.g. 1536 -> '1.5 KB'."""
    if not size_bytes or size_bytes < 0:
        return "Unknown size"
    value, i = float(size_bytes), 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[i]}"


def _log_notice(message: str) -> None:
    logger.warning(message)


class AttachmentActions:
    """
    Runs one view or download per call. Every call resolves and probes from
    scratch; nothing is cached between calls and concurrent calls on the same
    attachment are independent. Failures are reported through notify and never
    raised, so one broken attachment cannot affect the rest of the page.
    """

    def __init__(
        self,
        locator: ResourceLocator,
        dispatcher: ActionDispatcher,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self._locator = locator
        self._dispatcher = dispatcher
        self._notify = notify or _log_notice

    def perform(
        self,
        record: CanonicalRecord,
        index: int,
        intent: Intent | str,
        *,
        kind: str = "attachments",
        should_continue: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """Act on record.<kind>[index]. Returns True when the effect happened."""
        descriptors = record.attachment_list(kind)
        if not 0 <= index < len(descriptors):
            raise IndexError(f"{kind} index {index} out of range for tender {record.id}")
        resolved = resolve(descriptors[index])
        # The /files listing mirrors the attachments column only.
        return self.run(
            resolved,
            intent,
            tender_id=record.id,
            attachment_index=index if kind == "attachments" else None,
            should_continue=should_continue,
        )

    def run(
        self,
        resolved: ResolvedAttachment,
        intent: Intent | str,
        *,
        tender_id: Optional[str] = None,
        attachment_index: Optional[int] = None,
        should_continue: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """Locate and dispatch an already-resolved attachment."""
        intent = Intent(intent)
        display_name = resolved.display_name or resolved.storage_name
        try:
            url = self._locator.locate(
                resolved.storage_name,
                intent,
                display_name,
                tender_id=tender_id,
                attachment_index=attachment_index,
                should_continue=should_continue,
            )
            if should_continue is not None and not should_continue():
                raise ActionCancelled(f"Action on {display_name!r} abandoned")
            self._dispatcher.dispatch(url, intent, display_name)
        except ActionCancelled as e:
            logger.debug("%s", e)
            return False
        except ResourceUnavailable as e:
            self._notify(e.user_message)
            return False
        except (httpx.HTTPError, OSError) as e:
            logger.warning("%s of %r failed after probing: %s", intent.value, display_name, e)
            self._notify(ResourceUnavailable(display_name).user_message)
            return False
        return True
