"""Response normalizer: locate the tender inside a backend payload.

The two record endpoints wrap the tender differently, and each has changed
shape over time. Every known shape is an EnvelopeVariant with a structural
predicate and an extractor; variants are tried in a fixed order and the first
one whose extracted object carries an identifier wins.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from tender_portal.errors import MalformedResponse
from tender_portal.models.attachment import AttachmentDescriptor
from tender_portal.models.raw import EndpointSource, RawRecordEnvelope
from tender_portal.models.record import CanonicalRecord, EnvelopeKind

logger = logging.getLogger(__name__)

ID_FIELDS = ("id", "tender_id", "_id")
TITLE_FIELDS = ("title", "name")


@dataclass(frozen=True)
class EnvelopeVariant:
    """One recognised payload shape."""

    kind: EnvelopeKind
    matches: Callable[[EndpointSource, Any], bool]
    # Returns (record, flags) where flags is the dict carrying canBid/existingBid, or None.
    extract: Callable[[Any], tuple[Any, Optional[dict]]]


def _is_dict(value: Any) -> bool:
    return isinstance(value, dict)


def has_identifier(obj: Any) -> bool:
    """A plausible identifying field: non-empty id, tender_id or _id."""
    if not _is_dict(obj):
        return False
    for key in ID_FIELDS:
        value = obj.get(key)
        if value is not None and not isinstance(value, bool) and str(value).strip():
            return True
    return False


def is_record_like(obj: Any) -> bool:
    """Has a title-bearing field."""
    return _is_dict(obj) and any(obj.get(k) for k in TITLE_FIELDS)


def _is_wrapped(payload: Any) -> bool:
    return _is_dict(payload) and "success" in payload and "data" in payload


def _standard_record(payload: Any) -> tuple[Any, Optional[dict]]:
    record = payload["data"] if _is_wrapped(payload) else payload
    # GET /tenders/{id} answers {success, data: {tender: {...}}}
    if _is_dict(record) and not has_identifier(record) and _is_dict(record.get("tender")):
        record = record["tender"]
    return record, None


VARIANTS: tuple[EnvelopeVariant, ...] = (
    EnvelopeVariant(
        kind=EnvelopeKind.PRIVILEGED_WRAPPED,
        matches=lambda source, p: (
            source == EndpointSource.PRIVILEGED
            and _is_dict(p)
            and p.get("success") is True
            and _is_dict(p.get("data"))
            and _is_dict(p["data"].get("tender"))
        ),
        extract=lambda p: (p["data"]["tender"], p["data"]),
    ),
    EnvelopeVariant(
        kind=EnvelopeKind.STANDARD,
        matches=lambda source, p: source == EndpointSource.STANDARD,
        extract=_standard_record,
    ),
    EnvelopeVariant(
        kind=EnvelopeKind.DATA_WRAPPED,
        matches=lambda source, p: _is_wrapped(p) and is_record_like(p["data"]),
        extract=lambda p: (p["data"], p),
    ),
    EnvelopeVariant(
        kind=EnvelopeKind.TENDER_KEYED,
        matches=lambda source, p: _is_dict(p) and _is_dict(p.get("tender")),
        extract=lambda p: (p["tender"], p),
    ),
    EnvelopeVariant(
        kind=EnvelopeKind.DIRECT,
        matches=lambda source, p: _is_dict(p),
        extract=lambda p: (p, None),
    ),
)


def locate_record(
    source: EndpointSource, payload: Any
) -> tuple[EnvelopeKind, dict, Optional[dict]]:
    """
    Find the tender object in a payload.
    Returns (variant kind, record dict, flags dict or None).
    """
    source = EndpointSource(source)
    for variant in VARIANTS:
        if not variant.matches(source, payload):
            continue
        record, flags = variant.extract(payload)
        if has_identifier(record):
            return variant.kind, record, flags
        logger.debug("Envelope %s matched but carried no identifier", variant.kind.value)
    raise MalformedResponse(f"No tender-like object found in {source.value} payload")


def normalize(source: EndpointSource | str, raw: Any) -> CanonicalRecord:
    """
    Convert a raw payload from either record endpoint to a CanonicalRecord.
    Raises MalformedResponse when no variant yields an identified record.
    """
    if isinstance(raw, RawRecordEnvelope):
        raw = raw.payload
    kind, record, flags = locate_record(EndpointSource(source), raw)
    can_bid, existing_bid_id = _bid_flags(flags)

    return CanonicalRecord(
        id=_identifier(record),
        title=_str(record.get("title") or record.get("name")) or "Untitled",
        description=_str(record.get("description")),
        requirements=_str(record.get("requirements")),
        status=_str(record.get("status")),
        deadline=parse_datetime(record.get("deadline") or record.get("submission_deadline")),
        budget_min=parse_decimal(_first(record, "budget_min", "budgetMin")),
        budget_max=parse_decimal(_first(record, "budget_max", "budgetMax")),
        categories=_categories(record),
        attachments=_descriptors(record.get("attachments")),
        documents=_descriptors(record.get("documents")),
        can_bid=can_bid,
        existing_bid_id=existing_bid_id,
        envelope=kind,
        raw=record,
    )


def _identifier(record: dict) -> str:
    for key in ID_FIELDS:
        if has_identifier({key: record.get(key)}):
            return str(record[key]).strip()
    raise MalformedResponse("Record has no identifier")


def _bid_flags(flags: Optional[dict]) -> tuple[bool, Optional[str]]:
    if not flags:
        return False, None
    can_bid = flags.get("canBid") is True
    existing = flags.get("existingBid")
    if _is_dict(existing):
        existing = existing.get("id")
    if existing is None or isinstance(existing, bool) or not str(existing).strip():
        return can_bid, None
    return can_bid, str(existing).strip()


def _first(record: dict, *keys: str) -> Any:
    for key in keys:
        if record.get(key) not in (None, ""):
            return record[key]
    return None


def _str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_datetime(value: Any) -> Optional[datetime]:
    """ISO-8601 string (trailing Z allowed) or datetime; anything else is None."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable deadline %r", value)
        return None


def parse_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).replace(",", "").strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def _categories(record: dict) -> list[str]:
    names: list[str] = []
    raw = record.get("categories")
    if isinstance(raw, str):
        raw = [raw]
    for item in raw if isinstance(raw, list) else []:
        if _is_dict(item):
            item = item.get("name") or item.get("display_name")
        name = _str(item)
        if name:
            names.append(name)
    for key in ("display_category", "category_name", "category"):
        name = record.get(key)
        if isinstance(name, str):
            names.append(name.strip())
    unique: list[str] = []
    for name in names:
        if name and name not in unique:
            unique.append(name)
    return unique


def _descriptors(value: Any) -> list[AttachmentDescriptor]:
    # Some rows store the list as a JSON string column.
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            value = [value]
    if _is_dict(value):
        value = [value]
    if not isinstance(value, list):
        return []
    return [AttachmentDescriptor.from_raw(item) for item in value if item]
