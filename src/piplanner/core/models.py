"""Models and core data structures.

Products, sites and operators are plain frozen dataclasses so they can be
shared freely between solves. Configurations and assignments are produced by
the resolver/solver and never mutated afterwards.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class ProductTier(IntEnum):
    """Rank of a product in the manufacturing chain (P0 raw … P4 advanced)."""

    P0 = 0
    P1 = 1
    P2 = 2
    P3 = 3
    P4 = 4

    @classmethod
    def parse(cls, value) -> "ProductTier":
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        token = str(value).strip().upper()
        if token.isdigit():
            return cls(int(token))
        try:
            return cls[token]
        except KeyError:
            raise ValueError(f"Unknown product tier '{value}'") from None

    def __str__(self) -> str:
        return self.name


class SiteType(Enum):
    """Site categories. Declaration order is the order the solver scans them."""

    BARREN = "Barren"
    GAS = "Gas"
    ICE = "Ice"
    LAVA = "Lava"
    OCEANIC = "Oceanic"
    PLASMA = "Plasma"
    STORM = "Storm"
    TEMPERATE = "Temperate"

    @classmethod
    def parse(cls, value) -> "SiteType":
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == token:
                return member
        raise ValueError(f"Unknown site type '{value}'")

    def __str__(self) -> str:
        return self.value


ALL_SITE_TYPES: Tuple[SiteType, ...] = tuple(SiteType)


@dataclass(frozen=True)
class Product:
    """A catalog entry: name, tier and the names of its ingredients."""

    name: str
    tier: ProductTier
    ingredients: Tuple[str, ...] = ()

    @classmethod
    def raw(cls, name: str) -> "Product":
        return cls(name=name, tier=ProductTier.P0, ingredients=())


@dataclass(frozen=True)
class Site:
    """A production site.

    ``resources`` is what the site reports as physically present. It is kept
    for reporting only; mining eligibility comes from the catalog's
    resource-to-site-type table.
    """

    id: str
    site_type: SiteType
    resources: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Operator:
    """Someone who can supervise up to ``capacity`` sites."""

    name: str
    capacity: int
    skills: Mapping[str, int] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class FactoryConfiguration:
    start_tier: ProductTier
    end_tier: ProductTier
    imported_inputs: Tuple[str, ...] = ()
    mined_inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlanetAssignment:
    """One site, run by one operator, producing one product."""

    operator: str
    site: str
    site_type: SiteType
    imported_inputs: Tuple[str, ...]
    mined_inputs: Tuple[str, ...]
    output: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operator": self.operator,
            "site": self.site,
            "site_type": self.site_type.value,
            "imported_inputs": list(self.imported_inputs),
            "mined_inputs": list(self.mined_inputs),
            "output": self.output,
        }


@dataclass
class ProductionPlan:
    assignments: List[PlanetAssignment] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.assignments)

    def __iter__(self):
        return iter(self.assignments)

    def outputs(self) -> List[str]:
        return [a.output for a in self.assignments]

    def sites(self) -> List[str]:
        return [a.site for a in self.assignments]

    def operator_load(self) -> Dict[str, int]:
        return dict(Counter(a.operator for a in self.assignments))

    def assignment_for(self, product: str) -> Optional[PlanetAssignment]:
        return next((a for a in self.assignments if a.output == product), None)

    def to_dict(self) -> Dict[str, Any]:
        return {"assignments": [a.to_dict() for a in self.assignments]}


__all__ = [
    "ProductTier",
    "SiteType",
    "ALL_SITE_TYPES",
    "Product",
    "Site",
    "Operator",
    "FactoryConfiguration",
    "PlanetAssignment",
    "ProductionPlan",
]
