"""Canonical tender record produced by the response normalizer."""

import math
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from tender_portal.models.attachment import AttachmentDescriptor


class EnvelopeKind(str, Enum):
    """The recognised payload shapes, in the order they are tried."""

    PRIVILEGED_WRAPPED = "privileged_wrapped"  # {success, data: {tender, canBid, existingBid}}
    STANDARD = "standard"  # whole payload, or its data field
    DATA_WRAPPED = "data_wrapped"  # {success, data: <record>}
    TENDER_KEYED = "tender_keyed"  # {tender: <record>}
    DIRECT = "direct"  # <record>


class CanonicalRecord(BaseModel):
    """Shape-independent tender record."""

    id: str = Field(..., description="Backend identifier, always present")
    title: str = ""
    description: Optional[str] = None
    requirements: Optional[str] = None
    status: Optional[str] = None
    deadline: Optional[datetime] = None

    budget_min: Optional[Decimal] = None
    budget_max: Optional[Decimal] = None

    categories: list[str] = Field(default_factory=list)
    attachments: list[AttachmentDescriptor] = Field(default_factory=list)
    documents: list[AttachmentDescriptor] = Field(default_factory=list)

    can_bid: bool = False
    existing_bid_id: Optional[str] = None

    envelope: Optional[EnvelopeKind] = None
    raw: dict[str, Any] = Field(default_factory=dict)

    def _deadline_utc(self) -> Optional[datetime]:
        if self.deadline is None:
            return None
        if self.deadline.tzinfo is None:
            return self.deadline.replace(tzinfo=timezone.utc)
        return self.deadline

    def deadline_passed(self, now: Optional[datetime] = None) -> bool:
        """False when there is no deadline."""
        deadline = self._deadline_utc()
        if deadline is None:
            return False
        return deadline < (now or datetime.now(timezone.utc))

    def days_remaining(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole days until the deadline, rounded up; negative once passed."""
        deadline = self._deadline_utc()
        if deadline is None:
            return None
        delta = deadline - (now or datetime.now(timezone.utc))
        return math.ceil(delta.total_seconds() / 86400)

    def is_biddable(self, role: Optional[str], now: Optional[datetime] = None) -> bool:
        """Whether a vendor may submit or update a bid right now."""
        return (
            role == "vendor"
            and (self.status or "").lower() == "open"
            and self.can_bid
            and not self.deadline_passed(now)
        )

    def attachment_list(self, kind: str = "attachments") -> list[AttachmentDescriptor]:
        """The `attachments` or `documents` list by name."""
        if kind == "documents":
            return self.documents
        if kind == "attachments":
            return self.attachments
        raise ValueError(f"Unknown attachment list: {kind}")
