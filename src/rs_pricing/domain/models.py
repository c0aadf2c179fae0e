"""Pricing configuration — immutable snapshot, replaced wholesale on update."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from typing import Any

from src.rs_common.errors import AppError, InvalidConfigurationError
from src.rs_common.money import to_decimal
from src.rs_pricing.domain.time_window import format_hhmm, parse_hhmm

_MONEY_FIELDS = (
    "base_fare",
    "per_km",
    "min_fare",
    "stop_rate_per_min",
    "pickup_grace_period_m",
    "pickup_waiting_rate_per_min",
)


@dataclass(frozen=True)
class PeakHours:
    enabled: bool
    multiplier: Decimal
    start_time: time
    end_time: time


@dataclass(frozen=True)
class NightWindow:
    """Always evaluated; a multiplier of 1 disables it in effect."""

    multiplier: Decimal
    start_time: time
    end_time: time


@dataclass(frozen=True)
class WeatherModifier:
    """Manual toggle, not time bound."""

    enabled: bool
    multiplier: Decimal


@dataclass(frozen=True)
class PricingConfig:
    base_fare: int                      # smallest currency unit
    per_km: int                         # per kilometre
    min_fare: int
    stop_rate_per_min: int
    pickup_grace_period_m: int          # free minutes after arrival
    pickup_waiting_rate_per_min: int
    peak_hours: PeakHours
    night: NightWindow
    weather: WeatherModifier

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PricingConfig":
        """Build from the wire/storage shape. Raises InvalidConfigurationError."""
        try:
            money = {name: _non_negative_int(data, name) for name in _MONEY_FIELDS}
            peak = _section(data, "peak_hours")
            night = _section(data, "night")
            weather = _section(data, "weather")
            return cls(
                **money,
                peak_hours=PeakHours(
                    enabled=_flag(peak, "peak_hours.enabled"),
                    multiplier=_multiplier(peak, "peak_hours"),
                    start_time=parse_hhmm(_field(peak, "start_time", "peak_hours")),
                    end_time=parse_hhmm(_field(peak, "end_time", "peak_hours")),
                ),
                night=NightWindow(
                    multiplier=_multiplier(night, "night"),
                    start_time=parse_hhmm(_field(night, "start_time", "night")),
                    end_time=parse_hhmm(_field(night, "end_time", "night")),
                ),
                weather=WeatherModifier(
                    enabled=_flag(weather, "weather.enabled"),
                    multiplier=_multiplier(weather, "weather"),
                ),
            )
        except InvalidConfigurationError:
            raise
        except AppError as exc:
            raise InvalidConfigurationError(exc.message) from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_fare": self.base_fare,
            "per_km": self.per_km,
            "min_fare": self.min_fare,
            "stop_rate_per_min": self.stop_rate_per_min,
            "pickup_grace_period_m": self.pickup_grace_period_m,
            "pickup_waiting_rate_per_min": self.pickup_waiting_rate_per_min,
            "peak_hours": {
                "enabled": self.peak_hours.enabled,
                "multiplier": float(self.peak_hours.multiplier),
                "start_time": format_hhmm(self.peak_hours.start_time),
                "end_time": format_hhmm(self.peak_hours.end_time),
            },
            "night": {
                "multiplier": float(self.night.multiplier),
                "start_time": format_hhmm(self.night.start_time),
                "end_time": format_hhmm(self.night.end_time),
            },
            "weather": {
                "enabled": self.weather.enabled,
                "multiplier": float(self.weather.multiplier),
            },
        }


def _field(data: Mapping[str, Any], name: str, where: str | None = None) -> Any:
    if name not in data or data[name] is None:
        label = f"{where}.{name}" if where else name
        raise InvalidConfigurationError(f"missing field {label}")
    return data[name]


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = _field(data, name)
    if not isinstance(section, Mapping):
        raise InvalidConfigurationError(f"{name} must be an object")
    return section


def _non_negative_int(data: Mapping[str, Any], name: str) -> int:
    value = _field(data, name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidConfigurationError(f"{name} must be >= 0, got {value}")
    return value


def _multiplier(section: Mapping[str, Any], where: str) -> Decimal:
    raw = _field(section, "multiplier", where)
    try:
        value = to_decimal(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"{where}.multiplier must be a number, got {raw!r}") from exc
    if not value.is_finite() or value < 0:
        raise InvalidConfigurationError(f"{where}.multiplier must be >= 0, got {raw!r}")
    return value


def _flag(section: Mapping[str, Any], label: str) -> bool:
    name = label.rsplit(".", 1)[-1]
    value = section.get(name, False)
    if not isinstance(value, bool):
        raise InvalidConfigurationError(f"{label} must be a boolean, got {value!r}")
    return value


DEFAULT_PRICING = PricingConfig.from_mapping(
    {
        "base_fare": 500,
        "per_km": 250,
        "min_fare": 1000,
        "stop_rate_per_min": 5,
        "pickup_grace_period_m": 5,
        "pickup_waiting_rate_per_min": 10,
        "peak_hours": {"enabled": False, "multiplier": 1.0, "start_time": "17:00", "end_time": "20:00"},
        "night": {"multiplier": 1.0, "start_time": "22:00", "end_time": "06:00"},
        "weather": {"enabled": False, "multiplier": 1.0},
    }
)
