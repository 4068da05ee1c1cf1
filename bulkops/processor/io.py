"""
Reading inputs and writing fetched data.
"""

import csv
import json
import os
from typing import Any, Dict, List

from .models import TranslatableResource


def read_csv_rows(path: str) -> List[Dict[str, str]]:
    """Read a CSV with a header row, skipping blank lines."""
    with open(path, "r", encoding="utf-8-sig", newline="") as fh:
        reader = csv.DictReader(fh)
        return [
            {k: v for k, v in row.items() if k is not None}
            for row in reader
            if any((v or "").strip() for v in row.values() if isinstance(v, str))
        ]


def read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def write_json(path: str, data: Any) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, ensure_ascii=False)


def load_resources(path: str) -> Dict[str, TranslatableResource]:
    """Load a resource lookup JSON array keyed by resource id."""
    resources = [TranslatableResource.model_validate(r) for r in read_json(path)]
    return {r.resource_id: r for r in resources}
