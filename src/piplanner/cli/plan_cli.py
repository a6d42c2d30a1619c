"""Command-line front end for the planner.

Examples
  python -m piplanner.cli.plan_cli solve --product coolant \
    --sites datasets/example/sites.yml --operators datasets/example/operators.yml --out results/coolant
  python -m piplanner.cli.plan_cli configs --product nano_factory --explain
  python -m piplanner.cli.plan_cli products --tier P4
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from piplanner.core.catalog import load_catalog
from piplanner.core.errors import DataLoadError, NoSolutionFound, PlannerError, ProductNotFound
from piplanner.core.factory import attempt_strategies
from piplanner.core.io import load_repository
from piplanner.core.models import ALL_SITE_TYPES, ProductTier, SiteType
from piplanner.core.report import format_plan, operator_summary, plan_to_frame, plan_to_records
from piplanner.core.repository import MemoryRepository
from piplanner.core.solver import Solver, validate_plan

logger = logging.getLogger(__name__)

EXIT_LOAD_ERROR = 2
EXIT_UNKNOWN_PRODUCT = 3
EXIT_NO_SOLUTION = 4

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _write_outputs(out_dir: Path, plan, repository, args) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    plan_to_frame(plan).to_csv(out_dir / "plan.csv")
    operator_summary(plan, repository).to_csv(out_dir / "operators.csv")
    manifest = {
        "product": args.product,
        "sites": str(Path(args.sites).resolve()),
        "operators": str(Path(args.operators).resolve()),
        "data": str(Path(args.data).resolve()) if args.data else None,
        "max_steps": args.max_steps,
        "assignments": len(plan),
    }
    (out_dir / "manifest.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")


def _cmd_solve(args) -> int:
    catalog = load_catalog(args.data)
    repository = load_repository(args.sites, args.operators, catalog=catalog)
    plan = Solver(repository, max_steps=args.max_steps).solve(args.product)

    problems = validate_plan(plan, repository, args.product)
    for problem in problems:
        logger.error("Plan check failed: %s", problem)

    if args.json:
        print(json.dumps({"plan": plan_to_records(plan)}, indent=2))
    else:
        print(f"=== Production plan: {args.product} ===")
        print(format_plan(plan))
        print()
        print(operator_summary(plan, repository).to_string())

    if args.out:
        out_dir = Path(args.out)
        _write_outputs(out_dir, plan, repository, args)
        print(f"Wrote outputs to: {out_dir}")
    return 1 if problems else 0


def _cmd_configs(args) -> int:
    catalog = load_catalog(args.data)
    repository = MemoryRepository(catalog=catalog)
    product = catalog.require_product(args.product)
    site_types = [SiteType.parse(args.site_type)] if args.site_type else list(ALL_SITE_TYPES)

    print(f"{product.name} ({product.tier}): {', '.join(product.ingredients) or 'raw resource'}")
    for site_type in site_types:
        outcomes = list(attempt_strategies(repository, site_type, args.product))
        valid = [o for o in outcomes if o.ok]
        print(f"  {site_type.value:10s} {len(valid)} configuration(s)")
        for o in outcomes:
            if o.ok:
                cfg = o.result
                print(f"    [{o.strategy}] import={list(cfg.imported_inputs)} mine={list(cfg.mined_inputs)}")
            elif args.explain:
                print(f"    [{o.strategy}] rejected: {o.result}")
    return 0


def _cmd_products(args) -> int:
    catalog = load_catalog(args.data)
    tiers = [ProductTier.parse(args.tier)] if args.tier else list(ProductTier)
    for tier in tiers:
        for p in catalog.products_by_tier(tier):
            flag = " *" if catalog.requires_extraction(p.name) else ""
            print(f"{tier}  {p.name:32s} {', '.join(p.ingredients)}{flag}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plan site/operator assignments for a target product.")
    parser.add_argument("--data", default=None, help="Catalog directory with products.yml/resources.yml (default: packaged data).")
    parser.add_argument("--log-level", default="WARNING", type=str.upper, choices=LOG_LEVELS,
                        help="Logging level (default: WARNING).")
    subparsers = parser.add_subparsers(dest="command")

    solve_parser = subparsers.add_parser("solve", help="Find a production plan.")
    solve_parser.add_argument("--product", required=True, help="Target product name (e.g. coolant).")
    solve_parser.add_argument("--sites", required=True, help="YAML/JSON list of sites.")
    solve_parser.add_argument("--operators", required=True, help="YAML/JSON list of operators.")
    solve_parser.add_argument("--max-steps", type=int, default=None, help="Give up after this many candidate assignments.")
    solve_parser.add_argument("--json", action="store_true", help="Print the plan as JSON instead of a table.")
    solve_parser.add_argument("--out", default=None, help="Directory for plan.csv, operators.csv and manifest.json.")

    configs_parser = subparsers.add_parser("configs", help="List factory configurations for a product.")
    configs_parser.add_argument("--product", required=True)
    configs_parser.add_argument("--site-type", default=None, help="Restrict to one site type.")
    configs_parser.add_argument("--explain", action="store_true", help="Show why rejected strategies do not apply.")

    products_parser = subparsers.add_parser("products", help="List catalog products.")
    products_parser.add_argument("--tier", default=None, help="Only this tier (P0..P4).")
    return parser


_COMMANDS = {"solve": _cmd_solve, "configs": _cmd_configs, "products": _cmd_products}


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    if args.command not in _COMMANDS:
        parser.print_help()
        return 1
    try:
        return _COMMANDS[args.command](args)
    except DataLoadError as exc:
        print(f"Failed to load data: {exc}", file=sys.stderr)
        return EXIT_LOAD_ERROR
    except ProductNotFound as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_UNKNOWN_PRODUCT
    except NoSolutionFound as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_NO_SOLUTION
    except (PlannerError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
