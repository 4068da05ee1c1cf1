"""
Translation progress across locales.
"""

import logging
import os
from dataclasses import dataclass
from typing import List

from .io import read_csv_rows
from .ledger import ProgressLedger
from .models import ProgressStatus

logger = logging.getLogger(__name__)


@dataclass
class LocaleProgress:
    """Rows in a locale's input file vs. resources with a success in its ledger."""
    locale: str
    input_rows: int
    translated: int

    @property
    def percent(self) -> float:
        if self.input_rows == 0:
            return 0.0
        return self.translated / self.input_rows * 100


def collect_progress(input_dir: str, output_dir: str) -> List[LocaleProgress]:
    """
    Compare every `<locale>.csv` in input_dir with `<output_dir>/<locale>/translated.json`.

    A resource counts as translated once it has a success entry; resources
    with only failures are left out.
    """
    results = []
    for name in sorted(os.listdir(input_dir)):
        if not name.endswith(".csv"):
            continue
        locale = name[:-len(".csv")]
        rows = read_csv_rows(os.path.join(input_dir, name))
        ledger = ProgressLedger.load(os.path.join(output_dir, locale, "translated.json"))
        results.append(LocaleProgress(
            locale=locale,
            input_rows=len(rows),
            translated=len(ledger.resource_ids(ProgressStatus.SUCCESS)),
        ))
    return results


def format_progress(results: List[LocaleProgress]) -> List[str]:
    """Render one line per locale plus a total line."""
    lines = [
        f"{r.locale:<6} {r.translated:>6} / {r.input_rows:>6}  ({r.percent:5.1f}%)"
        for r in results
    ]
    total = LocaleProgress(
        locale="TOTAL",
        input_rows=sum(r.input_rows for r in results),
        translated=sum(r.translated for r in results),
    )
    lines.append("-" * 40)
    lines.append(
        f"{total.locale:<6} {total.translated:>6} / {total.input_rows:>6}  ({total.percent:5.1f}%)"
    )
    return lines
