from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, Float, Identity, Index, Integer, Text
from sqlalchemy.sql import func
import enum
from database import Base


# =============================================================================
# Enumerations
# =============================================================================

class ShelfAction(str, enum.Enum):
    """Shelf lifecycle step recorded by POST /shelf-meta"""
    SPLIT = "SPLIT"
    MERGE = "MERGE"
    ARCHIVE = "ARCHIVE"
    CREATE = "CREATE"
    MOVE = "MOVE"


class Pulse(str, enum.Enum):
    """Liveness/mood indicator on shelf changes and heartbeats"""
    STEADY = "steady"
    THROB = "throb"
    DRAINED = "drained"
    LIFTED = "lifted"


DEFAULT_PULSE = Pulse.STEADY.value


def _in_set(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


# =============================================================================
# Tables (append-only)
# =============================================================================

class ShelfChange(Base):
    __tablename__ = "shelf_change"
    __table_args__ = (
        CheckConstraint(_in_set("action", ShelfAction), name="shelf_change_action_check"),
        CheckConstraint(_in_set("pulse", Pulse), name="shelf_change_pulse_check"),
        Index("ix_shelf_change_receipt_hash", "receipt_hash"),
    )

    id = Column(BigInteger, Identity(always=False), primary_key=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    actor = Column(Text, nullable=False)
    action = Column(Text, nullable=False)
    shelf = Column(Text, nullable=False)
    parent_shelf = Column(Text, nullable=True)
    size_before = Column(Integer, nullable=True)
    size_after = Column(Integer, nullable=True)
    threshold = Column(Integer, nullable=True)
    coherence = Column(Float, nullable=True)
    receipt_hash = Column(Text, nullable=False)  # correlation key, not unique
    pulse = Column(Text, nullable=False, server_default=DEFAULT_PULSE)


# Feed order: newest first, id breaks timestamp ties
Index("ix_shelf_change_ts_id", ShelfChange.ts.desc(), ShelfChange.id.desc())
Index("ix_shelf_change_actor_ts", ShelfChange.actor, ShelfChange.ts.desc())


class ThreadContinuity(Base):
    __tablename__ = "thread_continuity"
    __table_args__ = (
        CheckConstraint(_in_set("pulse", Pulse), name="thread_continuity_pulse_check"),
        Index("ix_thread_continuity_actor_tag", "actor", "thread_tag"),
    )

    id = Column(BigInteger, Identity(always=False), primary_key=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    actor = Column(Text, nullable=False)
    thread_tag = Column(Text, nullable=False)
    pulse = Column(Text, nullable=False)  # no default, caller must supply it


# Columns returned by /feed and /receipt, in response order
SHELF_CHANGE_COLUMNS = (
    ShelfChange.id,
    ShelfChange.ts,
    ShelfChange.actor,
    ShelfChange.action,
    ShelfChange.shelf,
    ShelfChange.parent_shelf,
    ShelfChange.size_before,
    ShelfChange.size_after,
    ShelfChange.threshold,
    ShelfChange.coherence,
    ShelfChange.receipt_hash,
    ShelfChange.pulse,
)
