"""Standard endpoint: available to every authenticated role."""

import logging
from typing import Any, Optional

from tender_portal.errors import MalformedResponse
from tender_portal.models.raw import EndpointSource
from tender_portal.models.record import CanonicalRecord
from tender_portal.sources.base import BaseTenderSource
from tender_portal.sources.envelopes import normalize

logger = logging.getLogger(__name__)


class StandardSource(BaseTenderSource):
    """GET <standard-base>/tenders/{id}. Bid permissions are never supplied here."""

    source = EndpointSource.STANDARD

    @property
    def base_url(self) -> str:
        return self._settings.api_base

    def search(
        self,
        query: Optional[str] = None,
        filters: Optional[dict] = None,
    ) -> list[CanonicalRecord]:
        """
        List tenders, optionally matching a search string.
        Items that cannot be normalized are skipped with a warning.
        """
        params = {k: v for k, v in (filters or {}).items() if v is not None}
        if query:
            params["search"] = query
        payload = self._get_json(f"{self.base_url}/tenders", params=params or None)

        records: list[CanonicalRecord] = []
        for item in _list_items(payload):
            try:
                records.append(normalize(self.source, item))
            except MalformedResponse as e:
                logger.warning("Skipping unrecognised tender in listing: %s", e)
        return records


def _list_items(payload: Any) -> list:
    """Listing shapes: [...], {data: [...]}, {data: {tenders: [...]}}, {tenders: [...]}."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        raise MalformedResponse("Tender listing is not a JSON object or array")
    data = payload.get("data", payload)
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("tenders"), list):
        return data["tenders"]
    raise MalformedResponse("No tender list found in listing payload")
