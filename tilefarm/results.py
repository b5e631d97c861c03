"""Structured outcomes for player-facing operations.

Rule violations (bad placement, insufficient funds, immature crop ...) are
reported through ``ActionResult`` and are never raised. Only programming
errors and persistence failures use exceptions, and the latter are caught at
the save boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class FailureReason(str, Enum):
    TILE_MISSING = "tile_missing"
    NOT_SOIL = "not_soil"
    UNKNOWN_CROP = "unknown_crop"
    CROP_PRESENT = "crop_present"
    CROP_ABSENT = "crop_absent"
    CROP_IMMATURE = "crop_immature"
    ALREADY_WATERED = "already_watered"
    ALREADY_FERTILIZED = "already_fertilized"
    AREA_LOCKED = "area_locked"
    ALREADY_UNLOCKED = "already_unlocked"
    NOT_ADJACENT = "not_adjacent"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    PAYMENT_REJECTED = "payment_rejected"
    NO_CHANGE = "no_change"
    INVALID_STAGES = "invalid_stages"


@dataclass(frozen=True)
class ActionResult:
    """``{success, message, ...details}`` result returned by every action."""

    success: bool
    message: str
    reason: Optional[FailureReason] = None
    cost: Optional[int] = None
    reward: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, message: str, **kwargs: Any) -> "ActionResult":
        return cls(True, message, **kwargs)

    @classmethod
    def fail(cls, reason: FailureReason, message: str, **kwargs: Any) -> "ActionResult":
        return cls(False, message, reason=reason, **kwargs)
