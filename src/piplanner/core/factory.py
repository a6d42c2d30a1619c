"""Factory configuration resolver.

Given a product (and a site type), work out which production strategies can
make it. Each strategy is a small function that either returns a
``FactoryConfiguration`` or raises a ``FactoryError`` explaining why it does
not apply:

  P2→P4        import every (P3) ingredient of a P4 product
  P2→P4 mined  P4 products flagged as extraction-required: mine one basic
               input on-site, import the rest
  P0→P2        mine every raw resource under a P2 product on one site
  P2→P3        import every ingredient of a P3 product
  P1→P2        import the P1 ingredients of a P2 product
  P0→P1        mine one raw resource and refine it

``find_valid_factory_configurations`` runs the strategies that apply to the
product's tier in that order, keeps the ones whose mined inputs the site
type can supply, and swallows every rejection.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from .compatibility import check_site_can_mine
from .errors import (
    DoesNotRequireMining,
    FactoryError,
    InputOutputMismatch,
    InvalidProductTier,
    MissingIngredients,
    NoMinableResource,
    ProductNotFound,
    RequiresMining,
)
from .models import FactoryConfiguration, Product, ProductTier, SiteType

logger = logging.getLogger(__name__)

P0, P1, P2, P3, P4 = ProductTier.P0, ProductTier.P1, ProductTier.P2, ProductTier.P3, ProductTier.P4


def _require(repository, name: str) -> Product:
    product = repository.get_product(name)
    if product is None:
        raise ProductNotFound(name)
    return product


def _expect_tier(product: Product, tier: ProductTier) -> None:
    if product.tier != tier:
        raise InvalidProductTier(product.name, tier, product.tier)


def _unique(items: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(items))


# ===================================================================
#                           Strategies
# ===================================================================
def factory_p2_to_p4_without_mining(repository, output: str) -> FactoryConfiguration:
    """P4 product built entirely from imported P3 products."""
    if repository.requires_extraction(output):
        raise RequiresMining(output)

    p4_product = _require(repository, output)
    _expect_tier(p4_product, P4)

    for ingredient in p4_product.ingredients:
        _expect_tier(_require(repository, ingredient), P3)

    return FactoryConfiguration(
        start_tier=P2,
        end_tier=P4,
        imported_inputs=_unique(p4_product.ingredients),
        mined_inputs=(),
        outputs=(output,),
    )


def _minable(repository, product: Product) -> Optional[Tuple[str, str]]:
    """(resource to mine, chain member it stands in for), or None."""
    if product.tier == P0:
        return (product.name, product.name)
    if product.tier == P1 and len(product.ingredients) == 1:
        source = _require(repository, product.ingredients[0])
        if source.tier == P0:
            return (source.name, product.name)
    return None


def _minable_candidates(repository, ingredients: Sequence[str]) -> List[Tuple[str, str]]:
    """Minable members of the ingredient closure, nearest level first.

    The closure is walked breadth-first from the direct ingredients, each
    product visited once. The first level holding a raw member, or failing
    that a P1 refined from a single raw resource, supplies the candidates.
    """
    seen = set()
    level = list(_unique(ingredients))
    while level:
        seen.update(level)
        products = [_require(repository, name) for name in level]
        raw = [(p.name, p.name) for p in products if p.tier == P0]
        if raw:
            return raw
        refined = [c for c in (_minable(repository, p) for p in products) if c is not None]
        if refined:
            return refined
        level = [i for i in _unique(i for p in products for i in p.ingredients) if i not in seen]
    return []


def factory_p2_to_p4_with_mining(repository, output: str) -> FactoryConfiguration:
    """Extraction-required P4 product: one basic input is mined on the site.

    The mined resource comes from the nearest level of the ingredient chain
    that has one; within that level the smallest resource name wins so
    repeated solves pick the same one. Direct ingredients are imported,
    except the one the mined resource replaces.
    """
    p4_product = _require(repository, output)

    if not repository.requires_extraction(output):
        raise DoesNotRequireMining(output)
    _expect_tier(p4_product, P4)

    for ingredient in p4_product.ingredients:
        product = _require(repository, ingredient)
        if product.tier >= P4:
            raise InvalidProductTier(ingredient, P3, product.tier)

    candidates = _minable_candidates(repository, p4_product.ingredients)
    if not candidates:
        raise NoMinableResource(output)

    mined_input, replaced = min(candidates)
    imported = _unique(i for i in p4_product.ingredients if i != replaced)

    return FactoryConfiguration(
        start_tier=P2,
        end_tier=P4,
        imported_inputs=imported,
        mined_inputs=(mined_input,),
        outputs=(output,),
    )


def factory_p0_to_p2(repository, output: str) -> FactoryConfiguration:
    """Whole P0→P1→P2 chain on one site, nothing imported."""
    p2_product = _require(repository, output)
    _expect_tier(p2_product, P2)

    p1_products = []
    for ingredient in p2_product.ingredients:
        p1_product = _require(repository, ingredient)
        _expect_tier(p1_product, P1)
        p1_products.append(p1_product)

    mined_inputs = []
    for p1_product in p1_products:
        for ingredient in p1_product.ingredients:
            _expect_tier(_require(repository, ingredient), P0)
            mined_inputs.append(ingredient)

    return FactoryConfiguration(
        start_tier=P0,
        end_tier=P2,
        imported_inputs=(),
        mined_inputs=_unique(mined_inputs),
        outputs=(output,),
    )


def factory_p2_to_p3(repository, output: str) -> FactoryConfiguration:
    """P3 product assembled from imported P1/P2 products."""
    p3_product = _require(repository, output)
    _expect_tier(p3_product, P3)

    for ingredient in p3_product.ingredients:
        product = _require(repository, ingredient)
        if product.tier not in (P1, P2):
            raise InvalidProductTier(ingredient, P2, product.tier)

    return FactoryConfiguration(
        start_tier=P2,
        end_tier=P3,
        imported_inputs=_unique(p3_product.ingredients),
        mined_inputs=(),
        outputs=(output,),
    )


def factory_p1_to_p2(repository, imports: Sequence[str], outputs: Sequence[str]) -> FactoryConfiguration:
    """P2 outputs from imported P1 products; imports must cover every recipe."""
    for name in imports:
        _expect_tier(_require(repository, name), P1)

    available = set(imports)
    for name in outputs:
        product = _require(repository, name)
        _expect_tier(product, P2)
        missing = set(product.ingredients) - available
        if missing:
            raise MissingIngredients(name, missing)

    return FactoryConfiguration(
        start_tier=P1,
        end_tier=P2,
        imported_inputs=tuple(imports),
        mined_inputs=(),
        outputs=tuple(outputs),
    )


def factory_p0_to_p1(repository, mined_inputs: Sequence[str], outputs: Sequence[str]) -> FactoryConfiguration:
    """Pairs each mined raw resource with the P1 product refined from it."""
    if len(mined_inputs) != len(outputs):
        raise InputOutputMismatch(len(mined_inputs), len(outputs))

    for mined_input, output in zip(mined_inputs, outputs):
        _expect_tier(_require(repository, mined_input), P0)
        p1_product = _require(repository, output)
        _expect_tier(p1_product, P1)
        if tuple(p1_product.ingredients) != (mined_input,):
            raise MissingIngredients(output, [mined_input])

    return FactoryConfiguration(
        start_tier=P0,
        end_tier=P1,
        imported_inputs=(),
        mined_inputs=tuple(mined_inputs),
        outputs=tuple(outputs),
    )


# ===================================================================
#                         Enumeration
# ===================================================================
class StrategyOutcome(NamedTuple):
    strategy: str
    result: Union[FactoryConfiguration, FactoryError]

    @property
    def ok(self) -> bool:
        return isinstance(self.result, FactoryConfiguration)


def _strategies_for(repository, product: Product) -> List[Tuple[str, Callable[[], FactoryConfiguration]]]:
    name = product.name
    if product.tier == P4:
        return [
            ("P2->P4", partial(factory_p2_to_p4_without_mining, repository, name)),
            ("P2->P4 mined", partial(factory_p2_to_p4_with_mining, repository, name)),
        ]
    if product.tier == P3:
        return [("P2->P3", partial(factory_p2_to_p3, repository, name))]
    if product.tier == P2:
        return [
            ("P0->P2", partial(factory_p0_to_p2, repository, name)),
            ("P1->P2", partial(factory_p1_to_p2, repository, list(product.ingredients), [name])),
        ]
    if product.tier == P1:
        return [("P0->P1", partial(factory_p0_to_p1, repository, list(product.ingredients), [name]))]
    return []


def attempt_strategies(repository, site_type: SiteType, target_product: str) -> Iterator[StrategyOutcome]:
    """Run every strategy for the product's tier, yielding configuration or rejection."""
    product = repository.get_product(target_product)
    if product is None:
        yield StrategyOutcome("lookup", ProductNotFound(target_product))
        return

    for label, strategy in _strategies_for(repository, product):
        try:
            config = strategy()
            if config.mined_inputs:
                check_site_can_mine(repository, site_type, config.mined_inputs)
        except FactoryError as exc:
            yield StrategyOutcome(label, exc)
        else:
            yield StrategyOutcome(label, config)


def find_valid_factory_configurations(
    repository, site_type: SiteType, target_product: str
) -> List[FactoryConfiguration]:
    """All strategies that can make ``target_product`` on ``site_type``.

    An empty list means no known strategy works there; it is not an error.
    """
    configurations: List[FactoryConfiguration] = []
    for outcome in attempt_strategies(repository, site_type, target_product):
        if outcome.ok:
            configurations.append(outcome.result)
        else:
            logger.debug("%s on %s via %s rejected: %s",
                         target_product, site_type, outcome.strategy, outcome.result)
    return configurations


def factory_planet(repository, site_type: SiteType, target_product: str) -> List[FactoryConfiguration]:
    return find_valid_factory_configurations(repository, site_type, target_product)


__all__ = [
    "factory_p2_to_p4_without_mining",
    "factory_p2_to_p4_with_mining",
    "factory_p0_to_p2",
    "factory_p2_to_p3",
    "factory_p1_to_p2",
    "factory_p0_to_p1",
    "StrategyOutcome",
    "attempt_strategies",
    "find_valid_factory_configurations",
    "factory_planet",
]
