import json
import logging

import pytest

from piplanner.core.errors import DataLoadError
from piplanner.core.io import (
    load_mapping,
    load_operators,
    load_records,
    load_repository,
    load_sites,
    parse_operator,
    parse_site,
)
from piplanner.core.models import SiteType
from piplanner.core.repository import MemoryRepository


def test_load_example_dataset(example_dir):
    sites = load_sites(example_dir / "sites.yml")
    operators = load_operators(example_dir / "operators.yml")
    assert [s.id for s in sites] == ["Barren1", "Oceanic1", "Gas1", "Lava1", "Storm1"]
    assert sites[1].site_type is SiteType.OCEANIC
    assert sites[1].resources == ("aqueous_liquids", "planktic_colonies")
    assert [(o.name, o.capacity) for o in operators] == [("Character1", 2), ("Character2", 3)]
    assert operators[1].skills["interplanetary_consolidation"] == 3


def test_load_records_accepts_bare_json_list(tmp_path):
    p = tmp_path / "sites.json"
    p.write_text(json.dumps([{"id": "X", "planet_type": "Lava"}]), encoding="utf-8")
    assert load_records(p) == [{"id": "X", "planet_type": "Lava"}]
    assert load_sites(p)[0].site_type is SiteType.LAVA


def test_load_records_rejects_non_mappings(tmp_path):
    p = tmp_path / "sites.yml"
    p.write_text("sites:\n  - Barren1\n", encoding="utf-8")
    with pytest.raises(DataLoadError, match="must be a mapping"):
        load_records(p)


def test_load_mapping_rejects_list(tmp_path):
    p = tmp_path / "x.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(DataLoadError, match="Expected mapping"):
        load_mapping(p)


def test_unparseable_file(tmp_path):
    p = tmp_path / "x.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError, match="Could not parse"):
        load_records(p)


def test_empty_file_loads_nothing(tmp_path):
    p = tmp_path / "empty.yml"
    p.write_text("", encoding="utf-8")
    assert load_records(p) == []
    assert load_mapping(p) == {}


def test_parse_site_accepts_type_aliases():
    assert parse_site({"id": "a", "site_type": "gas"}).site_type is SiteType.GAS
    assert parse_site({"id": "b", "type": "Ice", "resources": "noble_gas"}).resources == ("noble_gas",)


@pytest.mark.parametrize("record,match", [
    ({"planet_type": "Gas"}, "missing 'id'"),
    ({"id": "a"}, "missing 'planet_type'"),
    ({"id": "a", "planet_type": "Swamp"}, "Unknown site type"),
    ({"id": "a", "planet_type": "Gas", "resources": 5}, "must be a list"),
])
def test_parse_site_errors(record, match):
    with pytest.raises(DataLoadError, match=match):
        parse_site(record)


@pytest.mark.parametrize("record,match", [
    ({"planets": 2}, "missing 'name'"),
    ({"name": "A"}, "missing 'planets'"),
    ({"name": "A", "planets": True}, "must be an integer"),
    ({"name": "A", "planets": "lots"}, "must be an integer"),
    ({"name": "A", "planets": 2.7}, "must be an integer"),
    ({"name": "A", "planets": -1}, "cannot be negative"),
    ({"name": "A", "planets": 1, "skills": ["x"]}, "skills must be a mapping"),
])
def test_parse_operator_errors(record, match):
    with pytest.raises(DataLoadError, match=match):
        parse_operator(record)


def test_parse_operator_capacity_alias_and_bad_skill(caplog):
    with caplog.at_level(logging.WARNING, logger="piplanner.core.io"):
        op = parse_operator({"name": "A", "capacity": "4", "skills": {"good": 3, "bad": "high"}})
    assert op.capacity == 4
    assert dict(op.skills) == {"good": 3}
    assert "Ignoring non-integer skill" in caplog.text


def test_load_repository(example_dir, catalog):
    repo = load_repository(example_dir / "sites.yml", example_dir / "operators.yml", catalog=catalog)
    assert isinstance(repo, MemoryRepository)
    assert repo.get_site("Gas1").site_type is SiteType.GAS
    assert repo.get_operator("Character2").capacity == 3
    assert repo.get_site("Nope") is None


def test_repository_rejects_duplicates(catalog):
    repo = MemoryRepository(catalog=catalog)
    repo.load_sites([{"id": "a", "planet_type": "Gas"}])
    with pytest.raises(DataLoadError, match="Duplicate site"):
        repo.load_sites([{"id": "a", "planet_type": "Ice"}])
    repo.load_operators([{"name": "A", "planets": 1}])
    with pytest.raises(DataLoadError, match="Duplicate operator"):
        repo.load_operators([{"name": "A", "planets": 2}])


def test_parse_operator_accepts_whole_float_capacity():
    assert parse_operator({"name": "A", "planets": 3.0}).capacity == 3
