"""Multiplier composition — independent surcharges compound.

effective = peak (if active) x night (if active) x weather (if active);
an inactive modifier contributes exactly 1.
"""

from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal

from src.rs_pricing.domain.models import PricingConfig
from src.rs_pricing.domain.time_window import is_within

ONE = Decimal(1)


@dataclass(frozen=True)
class ComposedMultiplier:
    effective: Decimal
    active: dict[str, Decimal] = field(default_factory=dict)  # name -> multiplier applied


def compose(
    peak_active: bool,
    peak: Decimal,
    night_active: bool,
    night: Decimal,
    weather_active: bool,
    weather: Decimal,
) -> ComposedMultiplier:
    active: dict[str, Decimal] = {}
    if peak_active:
        active["peak_hours"] = peak
    if night_active:
        active["night"] = night
    if weather_active:
        active["weather"] = weather

    effective = ONE
    for value in active.values():
        effective *= value
    return ComposedMultiplier(effective=effective, active=active)


def compose_multiplier(pricing: PricingConfig, now: time) -> ComposedMultiplier:
    """Resolve which modifiers apply at wall-clock *now* and multiply them."""
    peak = pricing.peak_hours
    night = pricing.night
    return compose(
        peak_active=peak.enabled and is_within(now, peak.start_time, peak.end_time),
        peak=peak.multiplier,
        night_active=is_within(now, night.start_time, night.end_time),
        night=night.multiplier,
        weather_active=pricing.weather.enabled,
        weather=pricing.weather.multiplier,
    )
