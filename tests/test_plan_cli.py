import json

import pytest

from piplanner.cli.plan_cli import EXIT_LOAD_ERROR, EXIT_NO_SOLUTION, EXIT_UNKNOWN_PRODUCT, main


def _args(example_dir, product, *extra):
    return [
        "solve",
        "--product", product,
        "--sites", str(example_dir / "sites.yml"),
        "--operators", str(example_dir / "operators.yml"),
        *extra,
    ]


def test_solve_writes_outputs(tmp_path, example_dir, capsys):
    out = tmp_path / "coolant"
    rc = main(_args(example_dir, "coolant", "--out", str(out)))
    assert rc == 0
    printed = capsys.readouterr().out
    assert "Production plan: coolant" in printed

    for name in ("plan.csv", "operators.csv", "manifest.json"):
        assert (out / name).is_file(), name
    manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["product"] == "coolant"
    assert manifest["assignments"] == 3
    assert (out / "plan.csv").read_text(encoding="utf-8").splitlines()[0].startswith("step,operator,site")


def test_solve_json(example_dir, capsys):
    assert main(_args(example_dir, "water", "--json")) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["plan"] == [{
        "character": "Character1",
        "planet": "Oceanic1",
        "type": "Oceanic",
        "output": "water",
        "import": [],
        "mine": ["aqueous_liquids"],
    }]


def test_unknown_product_exit_code(example_dir, capsys):
    assert main(_args(example_dir, "unobtainium")) == EXIT_UNKNOWN_PRODUCT
    assert "unobtainium" in capsys.readouterr().err


def test_no_solution_exit_code(tmp_path, capsys):
    sites = tmp_path / "sites.yml"
    sites.write_text("sites:\n  - id: Barren1\n    planet_type: Barren\n", encoding="utf-8")
    operators = tmp_path / "operators.yml"
    operators.write_text("operators:\n  - name: A\n    planets: 1\n", encoding="utf-8")
    rc = main(["solve", "--product", "water", "--sites", str(sites), "--operators", str(operators)])
    assert rc == EXIT_NO_SOLUTION
    assert "No solution found for water" in capsys.readouterr().err


def test_bad_input_exit_code(tmp_path, example_dir, capsys):
    rc = main(["solve", "--product", "water",
               "--sites", str(tmp_path / "missing.yml"),
               "--operators", str(example_dir / "operators.yml")])
    assert rc == EXIT_LOAD_ERROR
    assert "Failed to load data" in capsys.readouterr().err


def test_configs_explain(capsys):
    assert main(["configs", "--product", "nano_factory", "--site-type", "oceanic", "--explain"]) == 0
    out = capsys.readouterr().out
    assert "Oceanic" in out and "0 configuration(s)" in out
    assert "rejected" in out


def test_configs_lists_valid_strategy(capsys):
    assert main(["configs", "--product", "nano_factory", "--site-type", "Barren"]) == 0
    out = capsys.readouterr().out
    assert "[P2->P4 mined]" in out and "base_metals" in out


def test_products_listing(capsys):
    assert main(["products", "--tier", "P4"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 8
    assert any(line.startswith("P4  nano_factory") and line.endswith("*") for line in lines)


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_log_level_is_validated(capsys):
    with pytest.raises(SystemExit) as ei:
        main(["--log-level", "LOUD", "products"])
    assert ei.value.code == 2
    assert "invalid choice" in capsys.readouterr().err


def test_log_level_is_case_insensitive(capsys):
    assert main(["--log-level", "debug", "products", "--tier", "P0"]) == 0
    assert len(capsys.readouterr().out.splitlines()) == 15
