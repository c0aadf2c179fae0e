"""Commission percentages — platform + driver + maintenance == 100."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from src.rs_common.errors import InvalidConfigurationError

_PCT_FIELDS = ("platform_pct", "driver_pct", "maintenance_pct")


def validate_commission(platform_pct: object, driver_pct: object, maintenance_pct: object) -> None:
    """Raise InvalidConfigurationError unless three integer pcts in [0, 100] sum to 100."""
    values = dict(zip(_PCT_FIELDS, (platform_pct, driver_pct, maintenance_pct)))
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
        if not 0 <= value <= 100:
            raise InvalidConfigurationError(f"{name} must be between 0 and 100, got {value}")
    total = platform_pct + driver_pct + maintenance_pct  # type: ignore[operator]
    if total != 100:
        raise InvalidConfigurationError(
            f"commission percentages must sum to 100, got {total}"
        )


@dataclass(frozen=True)
class CommissionConfig:
    platform_pct: int
    driver_pct: int
    maintenance_pct: int

    def __post_init__(self) -> None:
        validate_commission(self.platform_pct, self.driver_pct, self.maintenance_pct)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CommissionConfig":
        missing = [name for name in _PCT_FIELDS if data.get(name) is None]
        if missing:
            raise InvalidConfigurationError(f"missing field commission.{missing[0]}")
        return cls(
            platform_pct=data["platform_pct"],
            driver_pct=data["driver_pct"],
            maintenance_pct=data["maintenance_pct"],
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "platform_pct": self.platform_pct,
            "driver_pct": self.driver_pct,
            "maintenance_pct": self.maintenance_pct,
        }


DEFAULT_COMMISSION = CommissionConfig(platform_pct=70, driver_pct=20, maintenance_pct=10)
