"""
Errors - Exception types raised by the engine.

Operation-level errors (bad slot, closed shop, not enough coins, ...) are
raised synchronously and leave engine state untouched. Problems with a
single target while an effect cascade is resolving are not raised at all;
the engine skips that target and carries on.

CascadeLimitExceeded is the only error that aborts a running battle. It
carries the partial event log so the runaway chain can be inspected.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine_core.event import EventLog


class SAPTestError(Exception):
    """Base class for all engine errors."""

    code = "SAPTEST_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidPosition(SAPTestError):
    """Slot or index outside the valid range, or an occupied destination."""

    code = "INVALID_POSITION"


class InvalidShopState(SAPTestError):
    """Shop operation attempted while the shop is closed (or battle while open)."""

    code = "INVALID_SHOP_STATE"


class InsufficientFunds(SAPTestError):
    """Not enough coins for a purchase or roll."""

    code = "INSUFFICIENT_FUNDS"


class EmptySlot(SAPTestError):
    """Operation needs an entity in a slot that holds nothing."""

    code = "EMPTY_SLOT"


class UnknownEntity(SAPTestError):
    """Entity provider has no definition for the requested name/level."""

    code = "UNKNOWN_ENTITY"

    def __init__(self, name: str, level: int | None = None):
        self.name = name
        self.level = level
        detail = f"{name!r}" if level is None else f"{name!r} at level {level}"
        super().__init__(f"Unknown entity {detail}")


class RosterTooLarge(SAPTestError):
    """More pets than the roster capacity allows."""

    code = "ROSTER_TOO_LARGE"


class InvalidTier(SAPTestError):
    """Shop tier outside the supported range."""

    code = "INVALID_TIER"

    def __init__(self, tier: int, max_tier: int = 6):
        self.tier = tier
        super().__init__(f"Tier {tier} outside range 1-{max_tier}")


class InvalidPetAction(SAPTestError):
    """Pet cannot perform the requested change (e.g. level out of range)."""

    code = "INVALID_PET_ACTION"


class CascadeLimitExceeded(SAPTestError):
    """
    Raised when one drain of the trigger queue processes too many events.

    This indicates effect content that triggers itself forever. It is
    fatal: the battle is abandoned and the partial log is attached.
    """

    code = "CASCADE_LIMIT_EXCEEDED"

    def __init__(self, limit: int, log: EventLog | None = None):
        self.limit = limit
        self.log = log
        super().__init__(f"Event cascade exceeded {limit} processed events")


class InvalidRosterData(SAPTestError):
    """Saved roster data is malformed or not valid JSON."""

    code = "INVALID_ROSTER_DATA"
