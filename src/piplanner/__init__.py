"""Planetary production planner.

Typical use::

    from piplanner import MemoryRepository, Solver
    from piplanner.core.io import load_sites, load_operators

    repo = MemoryRepository(sites=load_sites("sites.yml"), operators=load_operators("operators.yml"))
    plan = Solver(repo).solve("coolant")
"""

from .core.catalog import Catalog, default_catalog, load_catalog
from .core.errors import DataLoadError, NoSolutionFound, PlannerError, ProductNotFound
from .core.factory import find_valid_factory_configurations
from .core.models import (
    FactoryConfiguration,
    Operator,
    PlanetAssignment,
    Product,
    ProductionPlan,
    ProductTier,
    Site,
    SiteType,
)
from .core.repository import MemoryRepository, Repository
from .core.solver import Solver, solve, validate_plan

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "default_catalog",
    "load_catalog",
    "DataLoadError",
    "NoSolutionFound",
    "PlannerError",
    "ProductNotFound",
    "find_valid_factory_configurations",
    "FactoryConfiguration",
    "Operator",
    "PlanetAssignment",
    "Product",
    "ProductionPlan",
    "ProductTier",
    "Site",
    "SiteType",
    "MemoryRepository",
    "Repository",
    "Solver",
    "solve",
    "validate_plan",
]
