"""Typed views over the records the handlers react to.

Whether a charge or payment source still needs processing is derived from the
fields present on the stored record: an ``id`` means Stripe accepted it, an
``error`` means it was rejected, anything else is still pending.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecordStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def status_of(value: Any) -> Optional[RecordStatus]:
    """Return the processing state of a stored record, ``None`` when absent."""
    if value is None:
        return None
    if isinstance(value, dict):
        if value.get("id"):
            return RecordStatus.SUCCEEDED
        if value.get("error"):
            return RecordStatus.FAILED
    return RecordStatus.PENDING


class ChargeRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    amount: int = Field(..., gt=0)
    source: Optional[str] = None
    id: Optional[str] = None
    error: Optional[str] = None

    @property
    def status(self) -> RecordStatus:
        return status_of(self.model_dump(include={"id", "error"}))


class SourceRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    token: Optional[str] = None
    id: Optional[str] = None
    error: Optional[str] = None

    @property
    def status(self) -> RecordStatus:
        return status_of(self.model_dump(include={"id", "error"}))


class Account(BaseModel):
    uid: str = Field(..., min_length=1)
    email: Optional[str] = None
