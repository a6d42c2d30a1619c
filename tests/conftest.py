from pathlib import Path
import sys
import pytest
import yaml

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if SRC_DIR.exists() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from piplanner.core.catalog import Catalog, default_catalog
from piplanner.core.models import Operator, Product, ProductTier, Site, SiteType
from piplanner.core.repository import MemoryRepository


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(scope="session")
def example_dir(repo_root: Path) -> Path:
    d = repo_root / "datasets" / "example"
    if not d.exists():
        pytest.skip("datasets/example directory not found; skipping data-dependent tests.")
    return d


@pytest.fixture(scope="session")
def yload():
    def _load(p: Path):
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    return _load


@pytest.fixture(scope="session")
def catalog() -> Catalog:
    return default_catalog()


@pytest.fixture
def catalog_repo(catalog) -> MemoryRepository:
    """Full catalog, no sites or operators."""
    return MemoryRepository(catalog=catalog)


@pytest.fixture
def make_repo(catalog):
    """Build a repository from (id, type) site pairs and (name, capacity) operator pairs."""
    def _make(sites, operators, catalog_override=None):
        return MemoryRepository(
            catalog=catalog_override or catalog,
            sites=[Site(site_id, SiteType.parse(t)) for site_id, t in sites],
            operators=[Operator(name, cap) for name, cap in operators],
        )
    return _make


@pytest.fixture(scope="session")
def coolant_catalog() -> Catalog:
    """Just enough of the chain to make coolant."""
    return Catalog(
        products=[
            Product.raw("aqueous_liquids"),
            Product.raw("ionic_solutions"),
            Product("water", ProductTier.P1, ("aqueous_liquids",)),
            Product("electrolytes", ProductTier.P1, ("ionic_solutions",)),
            Product("coolant", ProductTier.P2, ("water", "electrolytes")),
        ],
        resource_sites={
            "aqueous_liquids": [SiteType.OCEANIC, SiteType.TEMPERATE],
            "ionic_solutions": [SiteType.GAS, SiteType.STORM],
        },
    )
