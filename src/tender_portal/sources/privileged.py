"""Admin endpoint: returns the tender plus the caller's bid permissions."""

from tender_portal.models.raw import EndpointSource
from tender_portal.sources.base import BaseTenderSource


class PrivilegedSource(BaseTenderSource):
    """GET <privileged-base>/tenders/{id}; elevated roles only."""

    source = EndpointSource.PRIVILEGED

    @property
    def base_url(self) -> str:
        return self._settings.privileged_base
