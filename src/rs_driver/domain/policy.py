"""Debt enforcement policy.

A driver is blocked while at least one unexpired block cause exists. Causes
are independent: clearing the debt cause never lifts a moderation ban, and
reinstating after moderation never lifts a debt block.

Blocking on balance alone is off by default. After every committed posting
the configured DebtThresholdPolicy is asked whether the new debt warrants an
automatic block.
"""

from dataclasses import dataclass
from typing import Protocol

from src.rs_wallet.domain.models import DebtStatus


class DebtThresholdPolicy(Protocol):
    def should_block(self, debt: DebtStatus) -> bool: ...


class ManualOnlyPolicy:
    """Never blocks; administrators block and unblock by hand."""

    def should_block(self, debt: DebtStatus) -> bool:
        return False


@dataclass(frozen=True)
class ThresholdPolicy:
    """Block once debt_amount reaches `threshold` (smallest currency unit)."""

    threshold: int

    def __post_init__(self) -> None:
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, int) or self.threshold <= 0:
            raise ValueError(f"threshold must be a positive integer, got {self.threshold!r}")

    def should_block(self, debt: DebtStatus) -> bool:
        return debt.has_debt and debt.debt_amount >= self.threshold


def policy_from_threshold(threshold: int | None) -> DebtThresholdPolicy:
    if threshold is None:
        return ManualOnlyPolicy()
    return ThresholdPolicy(threshold)


def auto_block_reason(debt: DebtStatus) -> str:
    return f"Automatic block: debt of {debt.debt_amount} reached the auto-block threshold"
