"""Abstract base class for tender record endpoints."""

from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import httpx

from tender_portal.config import PortalSettings
from tender_portal.credentials import CredentialProvider, auth_headers
from tender_portal.errors import MalformedResponse
from tender_portal.models.raw import EndpointSource, RawRecordEnvelope
from tender_portal.models.record import CanonicalRecord
from tender_portal.sources.envelopes import normalize


class BaseTenderSource(ABC):
    """
    One backend endpoint family that can return a tender record.
    Subclasses name their base URL; fetch and normalize are shared.
    """

    source: EndpointSource = EndpointSource.STANDARD

    def __init__(
        self,
        client: httpx.Client,
        settings: PortalSettings,
        credentials: Optional[CredentialProvider] = None,
    ):
        self._client = client
        self._settings = settings
        self._credentials = credentials

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Base URL the /tenders paths hang off."""
        pass

    def record_url(self, tender_id: str | int) -> str:
        return f"{self.base_url}/tenders/{quote(str(tender_id), safe='')}"

    def _get_json(self, url: str, params: Optional[dict] = None):
        """GET with the bearer header. Raises httpx errors and MalformedResponse."""
        resp = self._client.get(url, params=params, headers=auth_headers(self._credentials))
        resp.raise_for_status()
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponse(f"{url} returned a non-JSON body") from e

    def fetch_raw(self, tender_id: str | int) -> RawRecordEnvelope:
        """Fetch the record payload as-is."""
        payload = self._get_json(self.record_url(tender_id))
        return RawRecordEnvelope(source=self.source, payload=payload)

    def normalize(self, raw: RawRecordEnvelope) -> CanonicalRecord:
        """Convert a raw payload from this endpoint to a CanonicalRecord."""
        return normalize(self.source, raw.payload)

    def fetch(self, tender_id: str | int) -> CanonicalRecord:
        """Fetch and normalize one record."""
        return self.normalize(self.fetch_raw(tender_id))
