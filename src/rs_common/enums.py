"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class LedgerEntryType(str, Enum):
    ADJUSTMENT_CREDIT = "ADJUSTMENT_CREDIT"
    ADJUSTMENT_DEBIT = "ADJUSTMENT_DEBIT"
    RIDE_SETTLEMENT = "RIDE_SETTLEMENT"


class AdjustmentType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class BlockCause(str, Enum):
    """Independent reasons a driver may be blocked from accepting rides."""
    DEBT = "debt"
    MODERATION = "moderation"


class SubjectType(str, Enum):
    DRIVER = "driver"
    PASSENGER = "passenger"


class ModerationAction(str, Enum):
    WARN = "warn"
    SUSPEND = "suspend"
    BAN = "ban"
    REINSTATE = "reinstate"


class ModerationState(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class CaseStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


class PaymentMethod(str, Enum):
    """How the rider paid; decides which side of the split hits the wallet."""
    CARD = "card"   # platform collected the fare: credit the driver's share
    CASH = "cash"   # driver collected the fare: debit platform + maintenance shares


SYSTEM_ACTOR = "system"
