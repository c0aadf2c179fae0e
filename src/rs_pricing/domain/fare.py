"""Fare calculation.

    raw  = base_fare + per_km * distance + stop_rate * stop_minutes
         + waiting_rate * max(0, pickup_wait - grace)
    fare = max(round_half_up(raw * multiplier), min_fare)

Everything before the rounding step is exact Decimal arithmetic, so the
half-up rounding happens exactly once.
"""

from dataclasses import dataclass
from datetime import time
from decimal import Decimal

from src.rs_common.errors import InvalidInputError
from src.rs_common.money import round_half_up, to_decimal
from src.rs_pricing.domain.models import PricingConfig
from src.rs_pricing.domain.multipliers import compose_multiplier

_RATE_FIELDS = (
    "base_fare",
    "per_km",
    "min_fare",
    "stop_rate_per_min",
    "pickup_grace_period_m",
    "pickup_waiting_rate_per_min",
)


@dataclass(frozen=True)
class FareBreakdown:
    distance_amount: Decimal
    stop_amount: Decimal
    billable_wait_minutes: Decimal
    waiting_amount: Decimal
    raw_amount: Decimal
    multiplier: Decimal
    active_multipliers: dict[str, Decimal]
    min_fare_applied: bool
    fare: int


def compute_fare(
    distance_km: Decimal | int | float,
    stop_minutes: Decimal | int | float,
    pickup_wait_minutes: Decimal | int | float,
    now: time,
    pricing: PricingConfig,
) -> FareBreakdown:
    distance = _non_negative("distance_km", distance_km)
    stops = _non_negative("stop_minutes", stop_minutes)
    wait = _non_negative("pickup_wait_minutes", pickup_wait_minutes)
    rates = {name: _config_rate(pricing, name) for name in _RATE_FIELDS}
    _non_negative("pricing.peak_hours.multiplier", pricing.peak_hours.multiplier)
    _non_negative("pricing.night.multiplier", pricing.night.multiplier)
    _non_negative("pricing.weather.multiplier", pricing.weather.multiplier)

    distance_amount = rates["per_km"] * distance
    stop_amount = rates["stop_rate_per_min"] * stops
    billable_wait = max(Decimal(0), wait - rates["pickup_grace_period_m"])
    waiting_amount = rates["pickup_waiting_rate_per_min"] * billable_wait
    raw = rates["base_fare"] + distance_amount + stop_amount + waiting_amount

    composed = compose_multiplier(pricing, now)
    fare = round_half_up(raw * composed.effective)
    min_fare = int(rates["min_fare"])
    return FareBreakdown(
        distance_amount=distance_amount,
        stop_amount=stop_amount,
        billable_wait_minutes=billable_wait,
        waiting_amount=waiting_amount,
        raw_amount=raw,
        multiplier=composed.effective,
        active_multipliers=composed.active,
        min_fare_applied=fare < min_fare,
        fare=max(fare, min_fare),
    )


def _non_negative(name: str, value: object) -> Decimal:
    try:
        number = to_decimal(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from exc
    if not number.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if number < 0:
        raise InvalidInputError(f"{name} must be >= 0, got {value}")
    return number


def _config_rate(pricing: PricingConfig, name: str) -> Decimal:
    value = getattr(pricing, name, None)
    if value is None:
        raise InvalidInputError(f"pricing config is missing {name}")
    return _non_negative(f"pricing.{name}", value)
