"""
Core package façade.

Submodules:
  - models: data structures (Product, Site, Operator, FactoryConfiguration, ...)
  - errors: resolution, solve and load-time exception types
  - catalog: immutable product / raw-resource tables loaded from YAML
  - repository: read interface used by the resolver and solver
  - compatibility: can a site type supply a set of raw resources
  - factory: per-product, per-site-type strategy enumeration
  - solver: dependency closure + backtracking assignment search
  - io: YAML/JSON loaders for sites and operators
  - report: plan records, DataFrames and text output
"""

from . import models, errors, io, catalog, repository, compatibility  # baseline
from . import factory, solver, report

__all__ = [
    "models",
    "errors",
    "io",
    "catalog",
    "repository",
    "compatibility",
    "factory",
    "solver",
    "report",
]
