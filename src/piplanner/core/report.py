"""Plan presentation helpers: records, DataFrames and a text table."""
from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from .models import ProductionPlan

PLAN_COLUMNS = ["operator", "site", "site_type", "output", "imported", "mined"]


def plan_to_records(plan: ProductionPlan) -> List[Dict[str, Any]]:
    """Simplified per-assignment records, one dict per site."""
    return [
        {
            "character": a.operator,
            "planet": a.site,
            "type": a.site_type.value,
            "output": a.output,
            "import": list(a.imported_inputs),
            "mine": list(a.mined_inputs),
        }
        for a in plan.assignments
    ]


def plan_to_frame(plan: ProductionPlan) -> pd.DataFrame:
    rows = [
        [
            a.operator,
            a.site,
            a.site_type.value,
            a.output,
            ", ".join(a.imported_inputs),
            ", ".join(a.mined_inputs),
        ]
        for a in plan.assignments
    ]
    df = pd.DataFrame(rows, columns=PLAN_COLUMNS)
    df.index = pd.RangeIndex(1, len(df) + 1, name="step")
    return df


def operator_summary(plan: ProductionPlan, repository) -> pd.DataFrame:
    """Sites used vs capacity for every operator in the inventory."""
    load = plan.operator_load()
    rows = []
    for op in repository.get_operators():
        used = load.get(op.name, 0)
        rows.append({"operator": op.name, "used": used, "capacity": op.capacity, "free": op.capacity - used})
    return pd.DataFrame(rows, columns=["operator", "used", "capacity", "free"]).set_index("operator")


def format_plan(plan: ProductionPlan) -> str:
    if not plan.assignments:
        return "(empty plan)"
    df = plan_to_frame(plan).replace("", "-")
    return df.to_string()


__all__ = ["PLAN_COLUMNS", "plan_to_records", "plan_to_frame", "operator_summary", "format_plan"]
