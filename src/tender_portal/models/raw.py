"""Raw record payload before normalization."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class EndpointSource(str, Enum):
    """Which record endpoint a payload came from."""

    PRIVILEGED = "privileged"
    STANDARD = "standard"


class RawRecordEnvelope(BaseModel):
    """
    Untyped payload from a record fetch.
    The shape depends on the endpoint; the normalizer works it out.
    """

    model_config = ConfigDict(extra="allow")

    source: EndpointSource = EndpointSource.STANDARD
    payload: Any = None
