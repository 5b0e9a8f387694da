"""Fixtures shared across the zepbound test suite."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

CSV_TEXT = """date,weight_lbs,injection_date,dose
2024-01-08,198,2024-01-08,5 mg
2024-01-01,200,2024-01-01,2.5 mg
2024-01-04,,,
"""


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
	"""Return a small CSV log with one skipped weigh-in and two injections."""

	path = tmp_path / "zepbound-weight.csv"
	path.write_text(CSV_TEXT, encoding="utf-8")
	return path


@pytest.fixture
def rows() -> list[dict]:
	"""Return rows in the shape produced by the data generator."""

	return [
		{"date": date(2024, 1, 1), "weight_lbs": 200.0, "injection_date": date(2024, 1, 1), "dose": "2.5 mg"},
		{"date": date(2024, 1, 4), "weight_lbs": None, "injection_date": None, "dose": None},
		{"date": date(2024, 1, 8), "weight_lbs": 198.0, "injection_date": date(2024, 1, 8), "dose": "5 mg"},
	]
