"""Production plan solver.

Two phases:

1. Dependency closure. Starting from the target, take the first
   configuration any site type offers for each product and follow its
   imports. Every product reached must be made somewhere in the plan. A
   product with no configuration on any site type stops the solve.

2. Assignment search. Walk the required products in discovery order and
   give each one a (site, configuration, operator) triple, depth-first with
   chronological backtracking. The first complete assignment wins.

All mutable search state lives in one ``_SearchState`` owned by a single
``solve`` call; each tentative assignment is taken through
``_SearchState.claim`` which rolls it back unless the caller keeps it.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from .errors import NoSolutionFound, ProductNotFound
from .factory import find_valid_factory_configurations
from .models import (
    ALL_SITE_TYPES,
    FactoryConfiguration,
    Operator,
    PlanetAssignment,
    ProductionPlan,
    Site,
    SiteType,
)

logger = logging.getLogger(__name__)


class _Claim:
    __slots__ = ("kept",)

    def __init__(self):
        self.kept = False

    def keep(self) -> None:
        self.kept = True


@dataclass
class _SearchState:
    assignments: List[PlanetAssignment] = field(default_factory=list)
    used_sites: Set[str] = field(default_factory=set)
    produced: Set[str] = field(default_factory=set)
    operator_sites: Dict[str, List[str]] = field(default_factory=dict)

    def load(self, operator: Operator) -> int:
        return len(self.operator_sites.get(operator.name, ()))

    @contextmanager
    def claim(self, assignment: PlanetAssignment) -> Iterator[_Claim]:
        """Tentatively add ``assignment``; undone on exit unless kept."""
        self.assignments.append(assignment)
        self.used_sites.add(assignment.site)
        self.produced.add(assignment.output)
        self.operator_sites.setdefault(assignment.operator, []).append(assignment.site)
        token = _Claim()
        try:
            yield token
        finally:
            if not token.kept:
                self.operator_sites[assignment.operator].pop()
                self.produced.discard(assignment.output)
                self.used_sites.discard(assignment.site)
                self.assignments.pop()


class Solver:
    """Finds one feasible production plan for a target product.

    ``max_steps`` caps the number of candidate assignments the search may
    try; the search space is exponential in the number of required
    products, so callers needing bounded latency should set it.
    """

    def __init__(self, repository, max_steps: Optional[int] = None):
        self.repository = repository
        self.max_steps = max_steps
        self._configs: Dict[Tuple[SiteType, str], List[FactoryConfiguration]] = {}
        self._steps = 0

    def configurations(self, site_type: SiteType, product: str) -> List[FactoryConfiguration]:
        key = (site_type, product)
        if key not in self._configs:
            self._configs[key] = find_valid_factory_configurations(self.repository, site_type, product)
        return self._configs[key]

    # ---------------------------------------------------------------
    # Phase 1
    # ---------------------------------------------------------------
    def _first_configuration(self, product: str) -> Optional[FactoryConfiguration]:
        for site_type in ALL_SITE_TYPES:
            configs = self.configurations(site_type, product)
            if configs:
                return configs[0]
        return None

    def required_products(self, target_product: str) -> List[str]:
        """Products the plan must make, target first, in discovery order."""
        required: List[str] = []
        seen: Set[str] = set()

        def visit(product: str) -> None:
            seen.add(product)
            config = self._first_configuration(product)
            if config is None:
                raise NoSolutionFound(product, "no factory configuration on any site type")
            required.append(product)
            for ingredient in config.imported_inputs:
                if ingredient not in seen:
                    visit(ingredient)

        visit(target_product)
        return required

    # ---------------------------------------------------------------
    # Phase 2
    # ---------------------------------------------------------------
    def _tick(self, target_product: str) -> None:
        self._steps += 1
        if self.max_steps is not None and self._steps > self.max_steps:
            raise NoSolutionFound(target_product, f"search step limit ({self.max_steps}) reached")

    @staticmethod
    def _imports_reachable(config: FactoryConfiguration, required: Set[str], state: _SearchState) -> bool:
        return all(i in state.produced or i in required for i in config.imported_inputs)

    def _search(
        self,
        position: int,
        required: Sequence[str],
        required_set: Set[str],
        sites: Sequence[Site],
        operators: Sequence[Operator],
        state: _SearchState,
        target_product: str,
    ) -> bool:
        if position == len(required):
            return True

        product = required[position]
        if product in state.produced:
            return self._search(position + 1, required, required_set, sites, operators, state, target_product)

        for site in sites:
            if site.id in state.used_sites:
                continue
            for config in self.configurations(site.site_type, product):
                if not self._imports_reachable(config, required_set, state):
                    continue
                for operator in operators:
                    if state.load(operator) >= operator.capacity:
                        continue
                    self._tick(target_product)
                    assignment = PlanetAssignment(
                        operator=operator.name,
                        site=site.id,
                        site_type=site.site_type,
                        imported_inputs=config.imported_inputs,
                        mined_inputs=config.mined_inputs,
                        output=product,
                    )
                    with state.claim(assignment) as claim:
                        if self._search(position + 1, required, required_set, sites, operators, state, target_product):
                            claim.keep()
                            return True
                    logger.debug("Backtracking %s from %s/%s", product, site.id, operator.name)
        return False

    def solve(self, target_product: str) -> ProductionPlan:
        if self.repository.get_product(target_product) is None:
            raise ProductNotFound(target_product)

        required = self.required_products(target_product)
        logger.info("Planning %s: %d products required (%s)",
                    target_product, len(required), ", ".join(required))

        sites = self.repository.get_sites()
        operators = self.repository.get_operators()
        state = _SearchState()
        self._steps = 0

        found = self._search(0, required, set(required), sites, operators, state, target_product)
        if not found:
            raise NoSolutionFound(
                target_product,
                f"no assignment of {len(sites)} sites and {len(operators)} operators satisfies the plan",
            )

        logger.info("Plan for %s found after %d candidate assignments: %d sites used",
                    target_product, self._steps, len(state.assignments))
        return ProductionPlan(assignments=list(state.assignments))


def solve(repository, target_product: str, max_steps: Optional[int] = None) -> ProductionPlan:
    return Solver(repository, max_steps=max_steps).solve(target_product)


def validate_plan(plan: ProductionPlan, repository, target_product: Optional[str] = None) -> List[str]:
    """Return every plan invariant violation found (empty list when valid)."""
    problems: List[str] = []

    seen_sites: Set[str] = set()
    for a in plan.assignments:
        if a.site in seen_sites:
            problems.append(f"site {a.site} assigned more than once")
        seen_sites.add(a.site)
        if repository.get_site(a.site) is None:
            problems.append(f"site {a.site} is not in the inventory")

    for name, count in plan.operator_load().items():
        operator = repository.get_operator(name)
        if operator is None:
            problems.append(f"operator {name} is not in the inventory")
        elif count > operator.capacity:
            problems.append(f"operator {name} supervises {count} sites, capacity {operator.capacity}")

    outputs = set(plan.outputs())
    for a in plan.assignments:
        for ingredient in a.imported_inputs:
            if ingredient not in outputs:
                problems.append(f"{a.output} on {a.site} imports {ingredient} which no site produces")

    if target_product is not None and target_product not in outputs:
        problems.append(f"target {target_product} is not produced")
    return problems


__all__ = ["Solver", "solve", "validate_plan"]
