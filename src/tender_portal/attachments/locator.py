"""Resource locator: find a URL the file store will actually serve.

Which of the upload endpoints and static paths serves a given file depends
on when it was uploaded and how the deployment is proxied, so every action
builds an ordered candidate list and probes it with HEAD requests, one at a
time, until something answers 2xx.
"""

import logging
from typing import Callable, Optional
from urllib.parse import quote, urlencode

import httpx

from tender_portal.attachments.resolver import looks_generated
from tender_portal.config import PortalSettings
from tender_portal.credentials import CredentialProvider, auth_headers
from tender_portal.errors import ActionCancelled, ResourceUnavailable
from tender_portal.models.attachment import Intent, ProbeCandidate

logger = logging.getLogger(__name__)


class ResourceLocator:
    """Builds and probes candidate URLs for one storage name at a time."""

    def __init__(
        self,
        client: httpx.Client,
        settings: Optional[PortalSettings] = None,
        credentials: Optional[CredentialProvider] = None,
    ):
        self._client = client
        self._settings = settings or PortalSettings()
        self._credentials = credentials

    def view_url(self, storage_name: str) -> str:
        return f"{self._settings.api_base}/upload/view/{quote(storage_name, safe='')}"

    def download_url(self, storage_name: str, display_name: str = "") -> str:
        query = urlencode({"original": display_name or storage_name}, quote_via=quote)
        return f"{self._settings.api_base}/upload/download/{quote(storage_name, safe='')}?{query}"

    def static_urls(self, storage_name: str) -> list[str]:
        name = quote(storage_name, safe="")
        return [
            f"{self._settings.static_root}/uploads/{name}",
            f"{self._settings.legacy_static_root}/uploads/{name}",
        ]

    def candidates(
        self,
        storage_name: str,
        intent: Intent | str,
        display_name: str = "",
    ) -> list[ProbeCandidate]:
        """
        Ordered candidates for an intent. The preferred endpoint comes first,
        then the other intent's endpoint, then the two static paths.
        Duplicate URLs are dropped so nothing is probed twice.
        """
        intent = Intent(intent)
        view = ("view", self.view_url(storage_name))
        download = ("download", self.download_url(storage_name, display_name))
        primary = [view, download] if intent == Intent.VIEW else [download, view]
        static = [(f"static-{i}", url) for i, url in enumerate(self.static_urls(storage_name), 1)]

        result: list[ProbeCandidate] = []
        seen: set[str] = set()
        for label, url in primary + static:
            if url in seen:
                continue
            seen.add(url)
            result.append(ProbeCandidate(url=url, intent=intent, label=label))
        return result

    def probe(self, candidate: ProbeCandidate) -> bool:
        """HEAD the candidate once. Any transport error or non-2xx is a miss."""
        try:
            resp = self._client.head(candidate.url, headers=auth_headers(self._credentials))
        except httpx.HTTPError as e:
            logger.debug("Probe %s (%s) failed: %s", candidate.label, candidate.url, e)
            return False
        logger.debug("Probe %s (%s) -> HTTP %d", candidate.label, candidate.url, resp.status_code)
        return resp.is_success

    def lookup_storage_name(
        self, tender_id: str | int, attachment_index: int
    ) -> Optional[str]:
        """
        Ask GET <base>/tenders/{id}/files for the stored name of the attachment
        at attachment_index. Returns None on any failure or ambiguity.
        """
        url = f"{self._settings.api_base}/tenders/{quote(str(tender_id), safe='')}/files"
        try:
            resp = self._client.get(url, headers=auth_headers(self._credentials))
            resp.raise_for_status()
            files = resp.json().get("files") or []
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning("Files lookup for tender %s failed: %s", tender_id, e)
            return None
        if not isinstance(files, list) or not 0 <= attachment_index < len(files):
            return None
        entry = files[attachment_index]
        filename = entry.get("filename") if isinstance(entry, dict) else None
        if isinstance(filename, str) and filename.strip():
            return filename.strip()
        return None

    def locate(
        self,
        storage_name: str,
        intent: Intent | str,
        display_name: str = "",
        *,
        tender_id: Optional[str | int] = None,
        attachment_index: Optional[int] = None,
        should_continue: Optional[Callable[[], bool]] = None,
    ) -> str:
        """
        Return the first reachable URL for the file.

        Raises ResourceUnavailable when every candidate misses and
        ActionCancelled when should_continue() turns false between steps.
        """
        display_name = display_name or storage_name
        if not storage_name:
            raise ResourceUnavailable(display_name)

        def _check() -> None:
            if should_continue is not None and not should_continue():
                raise ActionCancelled(f"Action on {display_name!r} abandoned")

        if not looks_generated(storage_name) and tender_id is not None and attachment_index is not None:
            _check()
            stored = self.lookup_storage_name(tender_id, attachment_index)
            if stored:
                logger.info("Files lookup resolved %r to %r", storage_name, stored)
                storage_name = stored

        tried: list[str] = []
        for candidate in self.candidates(storage_name, intent, display_name):
            _check()
            tried.append(candidate.url)
            if self.probe(candidate):
                _check()
                logger.info("Serving %r via %s: %s", display_name, candidate.label, candidate.url)
                return candidate.url

        logger.warning("No reachable URL for %r after %d probes", display_name, len(tried))
        raise ResourceUnavailable(display_name, tried=tried)
