import pytest

from piplanner.core.compatibility import check_site_can_mine, site_can_mine, site_types_for_resources
from piplanner.core.errors import PlanetCannotMine, ProductNotFound
from piplanner.core.models import ALL_SITE_TYPES, SiteType


def test_can_mine_matches_resource_table_exactly(catalog_repo, catalog):
    for resource, listed in catalog.resource_sites.items():
        for site_type in ALL_SITE_TYPES:
            assert site_can_mine(catalog_repo, site_type, [resource]) == (site_type in listed), (resource, site_type)


def test_all_resources_must_be_minable(catalog_repo):
    # heavy + base metals: both on Barren, Lava and Plasma
    assert site_types_for_resources(catalog_repo, ["heavy_metals", "base_metals"]) == [
        SiteType.BARREN, SiteType.LAVA, SiteType.PLASMA,
    ]
    assert site_types_for_resources(catalog_repo, ["aqueous_liquids", "ionic_solutions"]) == []


def test_empty_resource_list_is_always_minable(catalog_repo):
    assert site_types_for_resources(catalog_repo, []) == list(ALL_SITE_TYPES)


def test_check_reports_first_failing_resource(catalog_repo):
    with pytest.raises(PlanetCannotMine) as ei:
        check_site_can_mine(catalog_repo, SiteType.OCEANIC, ["aqueous_liquids", "felsic_magma"])
    assert ei.value.resource == "felsic_magma"
    assert ei.value.site_type is SiteType.OCEANIC


def test_unknown_resource(catalog_repo):
    with pytest.raises(ProductNotFound):
        check_site_can_mine(catalog_repo, SiteType.GAS, ["dilithium"])
    assert not site_can_mine(catalog_repo, SiteType.GAS, ["dilithium"])
