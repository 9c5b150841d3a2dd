"""Record fetch orchestration: privileged endpoint first, standard as fallback."""

import logging
from typing import Callable, Optional

import httpx

from tender_portal.config import PortalSettings, build_client
from tender_portal.credentials import CredentialProvider
from tender_portal.errors import (
    AuthExpired,
    Forbidden,
    MalformedResponse,
    NotFound,
    PortalError,
    RecordFetchFailed,
)
from tender_portal.models.record import CanonicalRecord
from tender_portal.sources.privileged import PrivilegedSource
from tender_portal.sources.standard import StandardSource

logger = logging.getLogger(__name__)


class TenderFetcher:
    """
    Fetches tender records the way the detail page needs them.

    Elevated roles try the privileged endpoint first because only it reports
    bid permissions. Its failures are logged and the standard endpoint is used
    instead; only the standard endpoint's error reaches the caller. A 401 from
    either endpoint clears the credential, calls on_reauthenticate with the
    login URL and raises AuthExpired without trying anything else.
    """

    def __init__(
        self,
        settings: Optional[PortalSettings] = None,
        client: Optional[httpx.Client] = None,
        credentials: Optional[CredentialProvider] = None,
        on_reauthenticate: Optional[Callable[[str], None]] = None,
    ):
        self._settings = settings or PortalSettings()
        self._client = client or build_client(self._settings)
        self._credentials = credentials
        self._on_reauthenticate = on_reauthenticate
        self._privileged = PrivilegedSource(self._client, self._settings, credentials)
        self._standard = StandardSource(self._client, self._settings, credentials)

    @property
    def settings(self) -> PortalSettings:
        return self._settings

    @property
    def client(self) -> httpx.Client:
        return self._client

    @property
    def credentials(self) -> Optional[CredentialProvider]:
        return self._credentials

    def fetch(self, tender_id: str | int, role: Optional[str] = None) -> CanonicalRecord:
        """Fetch one tender; raises a PortalError subclass on failure."""
        if self._settings.is_elevated(role):
            try:
                return self._privileged.fetch(tender_id)
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 401:
                    raise self._expire() from e
                logger.warning(
                    "Privileged fetch of tender %s failed (HTTP %d); using standard endpoint",
                    tender_id,
                    e.response.status_code,
                )
            except httpx.RequestError as e:
                logger.warning(
                    "Privileged fetch of tender %s failed (%s); using standard endpoint",
                    tender_id,
                    e,
                )
            except MalformedResponse as e:
                logger.warning(
                    "Privileged payload for tender %s unusable (%s); using standard endpoint",
                    tender_id,
                    e,
                )

        try:
            return self._standard.fetch(tender_id)
        except httpx.HTTPStatusError as e:
            raise self._map_status(e, f"tender {tender_id}") from e
        except httpx.RequestError as e:
            raise RecordFetchFailed(f"Could not reach the portal for tender {tender_id}: {e}") from e

    def list_tenders(self, search: Optional[str] = None, **filters) -> list[CanonicalRecord]:
        """List tenders from the standard endpoint, optionally filtered."""
        try:
            return self._standard.search(query=search, filters=filters)
        except httpx.HTTPStatusError as e:
            raise self._map_status(e, "tender listing") from e
        except httpx.RequestError as e:
            raise RecordFetchFailed(f"Could not reach the portal: {e}") from e

    def _map_status(self, error: httpx.HTTPStatusError, what: str) -> PortalError:
        status = error.response.status_code
        if status == 401:
            return self._expire()
        if status == 404:
            return NotFound(f"{what} not found")
        if status == 403:
            return Forbidden(f"Access to {what} denied")
        return RecordFetchFailed(f"Fetching {what} failed with HTTP {status}", status_code=status)

    def _expire(self) -> AuthExpired:
        login_url = self._settings.login_url
        logger.info("Credential rejected; clearing it and redirecting to %s", login_url)
        if self._credentials is not None:
            self._credentials.clear()
        if self._on_reauthenticate is not None:
            self._on_reauthenticate(login_url)
        return AuthExpired(login_url=login_url)
