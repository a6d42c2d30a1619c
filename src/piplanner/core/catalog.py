"""Product catalog and raw-resource table.

The catalog is loaded once from YAML (``products.yml`` and
``resources.yml``) and is read-only afterwards; it can be shared between any
number of repositories and solves.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .errors import DataLoadError, ProductNotFound
from .io import load_mapping
from .models import Product, ProductTier, SiteType

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "PIPLANNER_DATA_DIR"
PACKAGED_DATA_DIR = Path(__file__).resolve().parents[1] / "data"


class Catalog:
    """Immutable lookup tables for products and raw-resource availability."""

    __slots__ = ("_products", "_resource_sites", "_extraction_required")

    def __init__(
        self,
        products: Iterable[Product],
        resource_sites: Mapping[str, Iterable[SiteType]],
        extraction_required: Iterable[str] = (),
    ):
        table: Dict[str, Product] = {}
        for p in products:
            if p.name in table:
                raise DataLoadError(f"Duplicate product '{p.name}' in catalog")
            table[p.name] = p
        self._products = MappingProxyType(table)
        self._resource_sites = MappingProxyType(
            {str(r): tuple(SiteType.parse(t) for t in types) for r, types in resource_sites.items()}
        )
        self._extraction_required: FrozenSet[str] = frozenset(extraction_required)

    @property
    def products(self) -> Mapping[str, Product]:
        return self._products

    @property
    def resource_sites(self) -> Mapping[str, Tuple[SiteType, ...]]:
        return self._resource_sites

    @property
    def extraction_required(self) -> FrozenSet[str]:
        return self._extraction_required

    def __contains__(self, name: object) -> bool:
        return name in self._products

    def __len__(self) -> int:
        return len(self._products)

    def get_product(self, name: str) -> Optional[Product]:
        return self._products.get(name)

    def require_product(self, name: str) -> Product:
        product = self._products.get(name)
        if product is None:
            raise ProductNotFound(name)
        return product

    def products_by_tier(self, tier) -> List[Product]:
        tier = ProductTier.parse(tier)
        return sorted((p for p in self._products.values() if p.tier == tier), key=lambda p: p.name)

    def site_types_for(self, resource: str) -> Optional[Tuple[SiteType, ...]]:
        return self._resource_sites.get(resource)

    def requires_extraction(self, name: str) -> bool:
        return name in self._extraction_required

    def validate(self) -> None:
        """Check cross-references; raises ``DataLoadError`` on the first problem."""
        for p in self._products.values():
            if p.tier == ProductTier.P0 and p.ingredients:
                raise DataLoadError(f"Raw product '{p.name}' cannot have ingredients")
            for ing in p.ingredients:
                if ing not in self._products:
                    raise DataLoadError(f"Product '{p.name}' references unknown ingredient '{ing}'")
        for resource in self._resource_sites:
            product = self._products.get(resource)
            if product is None:
                logger.warning("Resource table lists '%s' which is not a catalog product", resource)
            elif product.tier != ProductTier.P0:
                raise DataLoadError(f"Resource '{resource}' is tier {product.tier}, expected P0")
        for name in self._extraction_required:
            product = self._products.get(name)
            if product is None:
                raise DataLoadError(f"Extraction-required product '{name}' is not in the catalog")
            if product.tier != ProductTier.P4:
                raise DataLoadError(f"Extraction-required product '{name}' must be P4")


def _parse_products(payload: Mapping) -> List[Product]:
    grouped = payload.get("products")
    if not isinstance(grouped, dict):
        raise DataLoadError("products.yml must contain a 'products' mapping grouped by tier")
    products: List[Product] = []
    for tier_key, entries in grouped.items():
        try:
            tier = ProductTier.parse(tier_key)
        except ValueError as e:
            raise DataLoadError(str(e)) from e
        if not isinstance(entries, dict):
            raise DataLoadError(f"Tier {tier_key} must map product names to ingredient lists")
        for name, ingredients in entries.items():
            if ingredients is None:
                ingredients = []
            if not isinstance(ingredients, list):
                raise DataLoadError(f"Ingredients of '{name}' must be a list")
            products.append(Product(str(name), tier, tuple(str(i) for i in ingredients)))
    return products


def _parse_resources(payload: Mapping) -> Dict[str, Tuple[SiteType, ...]]:
    raw = payload.get("resources")
    if not isinstance(raw, dict):
        raise DataLoadError("resources.yml must contain a 'resources' mapping")
    out: Dict[str, Tuple[SiteType, ...]] = {}
    for resource, types in raw.items():
        if not isinstance(types, list):
            raise DataLoadError(f"Site types for '{resource}' must be a list")
        try:
            out[str(resource)] = tuple(SiteType.parse(t) for t in types)
        except ValueError as e:
            raise DataLoadError(f"Resource '{resource}': {e}") from e
    return out


def resolve_data_dir(data_dir: str | Path | None = None) -> Path:
    if data_dir:
        return Path(data_dir)
    env_dir = os.environ.get(DATA_DIR_ENV, "")
    if env_dir:
        return Path(env_dir)
    return PACKAGED_DATA_DIR


def load_catalog(data_dir: str | Path | None = None) -> Catalog:
    """Load and validate ``products.yml`` + ``resources.yml`` from a data directory."""
    base = resolve_data_dir(data_dir)
    product_payload = load_mapping(base / "products.yml")
    resource_payload = load_mapping(base / "resources.yml")

    catalog = Catalog(
        products=_parse_products(product_payload),
        resource_sites=_parse_resources(resource_payload),
        extraction_required=[str(n) for n in (product_payload.get("extraction_required") or [])],
    )
    catalog.validate()
    logger.debug("Loaded catalog from %s: %d products, %d resources",
                 base, len(catalog), len(catalog.resource_sites))
    return catalog


@lru_cache(maxsize=None)
def default_catalog() -> Catalog:
    """Catalog from the packaged data (or ``PIPLANNER_DATA_DIR``), loaded once."""
    return load_catalog()


__all__ = [
    "Catalog",
    "DATA_DIR_ENV",
    "PACKAGED_DATA_DIR",
    "resolve_data_dir",
    "load_catalog",
    "default_catalog",
]
