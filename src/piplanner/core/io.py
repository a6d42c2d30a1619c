"""I/O utilities: YAML/JSON loaders for catalog data, sites and operators.

Loaders here are the only place that touches the filesystem. Anything
malformed is reported as ``DataLoadError`` so that load failures stay
separate from solve failures.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import yaml

from .errors import DataLoadError
from .models import Operator, Site, SiteType

logger = logging.getLogger(__name__)


def _read_document(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise DataLoadError(f"Data file not found: {path}") from None
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DataLoadError(f"Could not parse {path}: {e}") from e


def load_mapping(filepath: str | Path) -> Dict[str, Any]:
    """Load a YAML/JSON mapping, failing loudly on anything else."""
    path = Path(filepath)
    data = _read_document(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DataLoadError(f"Expected mapping in {path}, got {type(data).__name__}")
    return data


def load_records(filepath: str | Path) -> List[Dict[str, Any]]:
    """Load a list of mappings from YAML or JSON.

    A document that is a single-key mapping wrapping the list
    (``{"sites": [...]}``) is unwrapped.
    """
    path = Path(filepath)
    data = _read_document(path)
    if data is None:
        return []
    if isinstance(data, dict) and len(data) == 1:
        data = next(iter(data.values())) or []
    if not isinstance(data, list):
        raise DataLoadError(f"Expected a list of records in {path}, got {type(data).__name__}")
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            raise DataLoadError(f"Record #{idx + 1} in {path} must be a mapping")
    return data


def _string_list(value, what: str) -> tuple:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value.strip(),)
    if not isinstance(value, (list, tuple)):
        raise DataLoadError(f"{what} must be a list, got {type(value).__name__}")
    return tuple(str(v).strip() for v in value)


def parse_site(record: Mapping[str, Any]) -> Site:
    site_id = str(record.get("id") or "").strip()
    if not site_id:
        raise DataLoadError(f"Site record missing 'id': {dict(record)!r}")
    raw_type = record.get("planet_type", record.get("site_type", record.get("type")))
    if raw_type is None:
        raise DataLoadError(f"Site '{site_id}' missing 'planet_type'")
    try:
        site_type = SiteType.parse(raw_type)
    except ValueError as e:
        raise DataLoadError(f"Site '{site_id}': {e}") from e
    resources = _string_list(record.get("resources"), f"Site '{site_id}' resources")
    return Site(id=site_id, site_type=site_type, resources=resources)


def parse_operator(record: Mapping[str, Any]) -> Operator:
    name = str(record.get("name") or "").strip()
    if not name:
        raise DataLoadError(f"Operator record missing 'name': {dict(record)!r}")
    raw_capacity = record.get("planets", record.get("capacity"))
    if raw_capacity is None:
        raise DataLoadError(f"Operator '{name}' missing 'planets'")
    if isinstance(raw_capacity, bool):
        raise DataLoadError(f"Operator '{name}' capacity must be an integer")
    if isinstance(raw_capacity, float) and not raw_capacity.is_integer():
        raise DataLoadError(f"Operator '{name}' capacity must be an integer, got {raw_capacity!r}")
    try:
        capacity = int(raw_capacity)
    except (TypeError, ValueError):
        raise DataLoadError(f"Operator '{name}' capacity must be an integer, got {raw_capacity!r}") from None
    if capacity < 0:
        raise DataLoadError(f"Operator '{name}' capacity cannot be negative")
    skills_raw = record.get("skills") or {}
    if not isinstance(skills_raw, dict):
        raise DataLoadError(f"Operator '{name}' skills must be a mapping")
    skills: Dict[str, int] = {}
    for k, v in skills_raw.items():
        if v is None:
            continue
        try:
            skills[str(k)] = int(v)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-integer skill %s=%r for operator %s", k, v, name)
    return Operator(name=name, capacity=capacity, skills=skills)


def parse_sites(records: Iterable[Mapping[str, Any]]) -> List[Site]:
    return [parse_site(r) for r in records]


def parse_operators(records: Iterable[Mapping[str, Any]]) -> List[Operator]:
    return [parse_operator(r) for r in records]


def load_sites(filepath: str | Path) -> List[Site]:
    sites = parse_sites(load_records(filepath))
    logger.debug("Loaded %d sites from %s", len(sites), filepath)
    return sites


def load_operators(filepath: str | Path) -> List[Operator]:
    operators = parse_operators(load_records(filepath))
    logger.debug("Loaded %d operators from %s", len(operators), filepath)
    return operators


def load_repository(sites_path: str | Path, operators_path: str | Path, catalog=None):
    """Build a ``MemoryRepository`` from site and operator files."""
    from .repository import MemoryRepository

    return MemoryRepository(
        catalog=catalog,
        sites=load_sites(sites_path),
        operators=load_operators(operators_path),
    )


__all__ = [
    "load_mapping",
    "load_records",
    "parse_site",
    "parse_operator",
    "parse_sites",
    "parse_operators",
    "load_sites",
    "load_operators",
    "load_repository",
]
