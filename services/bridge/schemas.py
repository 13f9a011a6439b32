from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr
from typing import Annotated, Literal, Optional
from datetime import datetime

# =============================================================================
# Enumerated value sets (mirror models.ShelfAction / models.Pulse)
# =============================================================================

ShelfActionValue = Literal["SPLIT", "MERGE", "ARCHIVE", "CREATE", "MOVE"]
PulseValue = Literal["steady", "throb", "drained", "lifted"]

# size_before / size_after / threshold are INTEGER (int32) columns
INT32_MIN = -2**31
INT32_MAX = 2**31 - 1
Int32 = Annotated[StrictInt, Field(ge=INT32_MIN, le=INT32_MAX)]


# =============================================================================
# Write bodies
# =============================================================================

class ShelfMetaCreate(BaseModel):
    """
    Body of POST /shelf-meta.

    Required: actor, action, shelf, receipt_hash.
    Optional fields map to NULL when absent (or null); pulse defaults to steady.
    Unknown keys (including id/ts) are dropped.
    """
    model_config = ConfigDict(extra="ignore")

    actor: StrictStr
    action: ShelfActionValue
    shelf: StrictStr
    receipt_hash: StrictStr
    parent_shelf: Optional[StrictStr] = None
    size_before: Optional[Int32] = None
    size_after: Optional[Int32] = None
    threshold: Optional[Int32] = None
    coherence: Optional[StrictFloat] = None  # ints accepted, strings and booleans are not
    pulse: PulseValue = "steady"

    def to_row(self) -> dict:
        """Normalized record, every column explicitly present"""
        return self.model_dump()


class PulseCreate(BaseModel):
    """Body of POST /pulse. All three fields required, no defaulting."""
    model_config = ConfigDict(extra="ignore")

    actor: StrictStr
    thread_tag: StrictStr
    pulse: PulseValue

    def to_row(self) -> dict:
        return self.model_dump()


# =============================================================================
# Responses
# =============================================================================

class InsertedRow(BaseModel):
    id: int
    ts: datetime


class ShelfChangeRecord(BaseModel):
    id: int
    ts: datetime
    actor: str
    action: str
    shelf: str
    parent_shelf: Optional[str] = None
    size_before: Optional[int] = None
    size_after: Optional[int] = None
    threshold: Optional[int] = None
    coherence: Optional[float] = None
    receipt_hash: str
    pulse: str

    model_config = ConfigDict(from_attributes=True)


class HealthResponse(BaseModel):
    ok: bool
    ts: datetime
    service: str


class ErrorDetail(BaseModel):
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[list[ErrorDetail]] = None
