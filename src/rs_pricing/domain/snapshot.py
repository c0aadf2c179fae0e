"""Versioned settlement configuration snapshot (pricing + commission)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.rs_commission.domain.models import CommissionConfig
from src.rs_pricing.domain.models import PricingConfig


@dataclass(frozen=True)
class SettlementConfig:
    version: int
    pricing: PricingConfig
    commission: CommissionConfig
    updated_by: str | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Console shape: pricing fields at top level, commission nested."""
        return {
            "version": self.version,
            **self.pricing.to_dict(),
            "commission": self.commission.to_dict(),
            "updated_by": self.updated_by,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SettlementConfig":
        updated_at = data.get("updated_at")
        return cls(
            version=int(data["version"]),
            pricing=PricingConfig.from_mapping(data),
            commission=CommissionConfig.from_mapping(data["commission"]),
            updated_by=data.get("updated_by"),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )
