"""Repository access for the resolver and solver.

``Repository`` is the read interface both depend on; ``MemoryRepository``
is the in-memory implementation, backed by a shared ``Catalog`` plus the
sites and operators supplied for a solve.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .catalog import Catalog, default_catalog
from .errors import DataLoadError
from .io import parse_operators, parse_sites
from .models import Operator, Product, Site, SiteType

logger = logging.getLogger(__name__)


class Repository(ABC):
    """Read-only view of products, raw-resource availability, sites and operators."""

    @abstractmethod
    def get_product(self, name: str) -> Optional[Product]:
        ...

    @abstractmethod
    def products_by_tier(self, tier) -> List[Product]:
        ...

    @abstractmethod
    def site_types_for(self, resource: str) -> Optional[Tuple[SiteType, ...]]:
        ...

    @abstractmethod
    def requires_extraction(self, name: str) -> bool:
        ...

    @abstractmethod
    def get_sites(self) -> List[Site]:
        ...

    @abstractmethod
    def get_operators(self) -> List[Operator]:
        ...

    def get_site(self, site_id: str) -> Optional[Site]:
        return next((s for s in self.get_sites() if s.id == site_id), None)

    def get_operator(self, name: str) -> Optional[Operator]:
        return next((o for o in self.get_operators() if o.name == name), None)


class MemoryRepository(Repository):
    """In-memory repository. Sites and operators keep insertion order."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        sites: Iterable[Site] = (),
        operators: Iterable[Operator] = (),
    ):
        self.catalog = catalog if catalog is not None else default_catalog()
        self._sites: Dict[str, Site] = {}
        self._operators: Dict[str, Operator] = {}
        self.add_sites(sites)
        self.add_operators(operators)

    # --- catalog ---------------------------------------------------------
    def get_product(self, name: str) -> Optional[Product]:
        return self.catalog.get_product(name)

    def products_by_tier(self, tier) -> List[Product]:
        return self.catalog.products_by_tier(tier)

    def site_types_for(self, resource: str) -> Optional[Tuple[SiteType, ...]]:
        return self.catalog.site_types_for(resource)

    def requires_extraction(self, name: str) -> bool:
        return self.catalog.requires_extraction(name)

    # --- inventory -------------------------------------------------------
    def get_sites(self) -> List[Site]:
        return list(self._sites.values())

    def get_operators(self) -> List[Operator]:
        return list(self._operators.values())

    def get_site(self, site_id: str) -> Optional[Site]:
        return self._sites.get(site_id)

    def get_operator(self, name: str) -> Optional[Operator]:
        return self._operators.get(name)

    def add_sites(self, sites: Iterable[Site]) -> None:
        for site in sites:
            if site.id in self._sites:
                raise DataLoadError(f"Duplicate site id '{site.id}'")
            self._sites[site.id] = site

    def add_operators(self, operators: Iterable[Operator]) -> None:
        for op in operators:
            if op.name in self._operators:
                raise DataLoadError(f"Duplicate operator '{op.name}'")
            self._operators[op.name] = op

    def load_sites(self, records: Iterable[Mapping[str, Any]]) -> None:
        """Add sites from already-parsed records (e.g. a decoded JSON list)."""
        sites = parse_sites(records)
        self.add_sites(sites)
        logger.debug("Repository now holds %d sites", len(self._sites))

    def load_operators(self, records: Iterable[Mapping[str, Any]]) -> None:
        operators = parse_operators(records)
        self.add_operators(operators)
        logger.debug("Repository now holds %d operators", len(self._operators))


__all__ = ["Repository", "MemoryRepository"]
