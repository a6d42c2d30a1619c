"""Site-compatibility check: can a site type supply a set of raw resources?"""
from __future__ import annotations

from typing import Iterable, List

from .errors import FactoryError, PlanetCannotMine, ProductNotFound
from .models import ALL_SITE_TYPES, SiteType


def check_site_can_mine(repository, site_type: SiteType, resources: Iterable[str]) -> None:
    """Raise unless every resource is listed under ``site_type`` in the resource table."""
    for resource in resources:
        valid_types = repository.site_types_for(resource)
        if valid_types is None:
            raise ProductNotFound(resource)
        if site_type not in valid_types:
            raise PlanetCannotMine(site_type, resource)


def site_can_mine(repository, site_type: SiteType, resources: Iterable[str]) -> bool:
    try:
        check_site_can_mine(repository, site_type, resources)
    except FactoryError:
        return False
    return True


def site_types_for_resources(repository, resources: Iterable[str]) -> List[SiteType]:
    resources = list(resources)
    return [t for t in ALL_SITE_TYPES if site_can_mine(repository, t, resources)]


__all__ = ["check_site_can_mine", "site_can_mine", "site_types_for_resources"]
