"""Tender record endpoints, envelope normalization and fetch orchestration."""

from tender_portal.sources.base import BaseTenderSource
from tender_portal.sources.envelopes import normalize
from tender_portal.sources.fetcher import TenderFetcher
from tender_portal.sources.privileged import PrivilegedSource
from tender_portal.sources.standard import StandardSource

__all__ = ["BaseTenderSource", "PrivilegedSource", "StandardSource", "TenderFetcher", "normalize"]
