"""Fare split with floor division; maintenance absorbs the remainder."""

from dataclasses import dataclass

from src.rs_commission.domain.models import CommissionConfig, validate_commission
from src.rs_common.errors import InvalidInputError


@dataclass(frozen=True)
class CommissionSplit:
    platform: int
    driver: int
    maintenance: int

    @property
    def total(self) -> int:
        return self.platform + self.driver + self.maintenance


def split(fare: int, commission: CommissionConfig) -> CommissionSplit:
    """Split *fare* so that platform + driver + maintenance == fare exactly.

    platform = floor(fare * platform_pct / 100)
    driver   = floor(fare * driver_pct / 100)
    maintenance = fare - platform - driver
    """
    if isinstance(fare, bool) or not isinstance(fare, int):
        raise InvalidInputError(f"fare must be an integer amount, got {fare!r}")
    if fare < 0:
        raise InvalidInputError(f"fare must be >= 0, got {fare}")
    validate_commission(commission.platform_pct, commission.driver_pct, commission.maintenance_pct)

    platform = fare * commission.platform_pct // 100
    driver = fare * commission.driver_pct // 100
    return CommissionSplit(platform=platform, driver=driver, maintenance=fare - platform - driver)
