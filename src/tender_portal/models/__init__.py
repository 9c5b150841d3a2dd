"""Data models for tender records and attachments."""

from tender_portal.models.attachment import (
    AttachmentDescriptor,
    Intent,
    ProbeCandidate,
    ResolvedAttachment,
)
from tender_portal.models.raw import EndpointSource, RawRecordEnvelope
from tender_portal.models.record import CanonicalRecord, EnvelopeKind

__all__ = [
    "AttachmentDescriptor",
    "CanonicalRecord",
    "EndpointSource",
    "EnvelopeKind",
    "Intent",
    "ProbeCandidate",
    "RawRecordEnvelope",
    "ResolvedAttachment",
]
