"""Resource usage summaries for pods and nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Optional

from komcp.utils.quantity import Quantity, format_resource

RESOURCE_TYPES = ("cpu", "memory", "ephemeral-storage")


@dataclass
class ResourceUsageFraction:
    """Request and limit as percentages of the allocatable amount."""

    request_fraction: float = 0.0
    limit_fraction: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {"requestFraction": self.request_fraction, "limitFraction": self.limit_fraction}


@dataclass
class ResourceUsageResult:
    """Requests, limits, allocatable amounts and usage ratios by resource name."""

    requests: dict[str, Quantity] = field(default_factory=dict)
    limits: dict[str, Quantity] = field(default_factory=dict)
    allocatable: dict[str, Quantity] = field(default_factory=dict)
    usage_fractions: dict[str, ResourceUsageFraction] = field(default_factory=dict)


@dataclass
class ResourceUsageRow:
    """One formatted table row for a resource type."""

    resource_type: str
    total: str
    request: str
    request_fraction: str
    limit: str
    limit_fraction: str

    def as_dict(self) -> dict[str, str]:
        return {
            "resourceType": self.resource_type,
            "total": self.total,
            "request": self.request,
            "requestFraction": self.request_fraction,
            "limit": self.limit,
            "limitFraction": self.limit_fraction,
        }


_ZERO = Quantity(Fraction(0))


def to_table_data(result: Optional[ResourceUsageResult]) -> list[ResourceUsageRow]:
    """Format a usage result as rows for CPU, memory and ephemeral storage."""
    if result is None:
        raise ValueError("result is nil")
    rows = []
    for resource_type in RESOURCE_TYPES:
        fraction = result.usage_fractions.get(resource_type, ResourceUsageFraction())
        rows.append(
            ResourceUsageRow(
                resource_type=resource_type,
                total=format_resource(result.allocatable.get(resource_type, _ZERO)),
                request=format_resource(result.requests.get(resource_type, _ZERO)),
                request_fraction=f"{fraction.request_fraction:.2f}",
                limit=format_resource(result.limits.get(resource_type, _ZERO)),
                limit_fraction=f"{fraction.limit_fraction:.2f}",
            )
        )
    return rows