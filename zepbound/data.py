from __future__ import annotations

import csv
import json
import math
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, NamedTuple

from zepbound.config import CSV_PATH, GENERATED_DATA_PATH

ROW_FIELDS = ("date", "weight_lbs", "injection_date", "dose")
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y")

Row = dict[str, Any]


class DataError(RuntimeError):
	pass


class GeneratedData(NamedTuple):
	count: int
	path: Path


def _parse_date(value: str | None) -> date | None:
	value = (value or "").strip()
	if not value:
		return None
	for fmt in DATE_FORMATS:
		try:
			return datetime.strptime(value, fmt).date()
		except ValueError:
			continue
	return None


def _parse_float(value: str | None) -> float | None:
	try:
		return float(value)
	except (TypeError, ValueError):
		return None


def _parse_weight(value: str | None) -> float | None:
	weight = _parse_float((value or "").strip())
	if weight is None or not math.isfinite(weight) or weight <= 0:
		return None
	return weight


def _normalize_header(row: dict[str | None, Any]) -> dict[str, str]:
	normalized: dict[str, str] = {}
	for key, value in row.items():
		if key is None:
			continue
		normalized[key.strip().lower()] = value if isinstance(value, str) else ""
	return normalized


def read_rows(csv_path: Path) -> list[Row]:
	if not csv_path.exists():
		raise DataError(f"CSV not found: {csv_path}")

	with csv_path.open(newline="", encoding="utf-8-sig") as handle:
		reader = csv.DictReader(handle)
		raw_rows = [_normalize_header(row) for row in reader]

	rows: list[Row] = []
	for raw in raw_rows:
		row_date = _parse_date(raw.get("date"))
		if row_date is None:
			continue
		dose = raw.get("dose", "").strip()
		rows.append(
			{
				"date": row_date,
				"weight_lbs": _parse_weight(raw.get("weight_lbs")),
				"injection_date": _parse_date(raw.get("injection_date")),
				"dose": dose or None,
			}
		)
	return sorted(rows, key=lambda row: row["date"])


def _serialize_row(row: Row) -> dict[str, Any]:
	injection_date = row["injection_date"]
	return {
		"date": row["date"].isoformat(),
		"weight_lbs": row["weight_lbs"],
		"injection_date": injection_date.isoformat() if injection_date else None,
		"dose": row["dose"],
	}


def _write_json_atomic(path: Path, payload: Any) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
	try:
		with os.fdopen(fd, "w", encoding="utf-8") as handle:
			json.dump(payload, handle, indent=2, allow_nan=False)
			handle.write("\n")
		os.replace(tmp_name, path)
	except BaseException:
		Path(tmp_name).unlink(missing_ok=True)
		raise


def generate_data(
	csv_path: Path = CSV_PATH,
	out_path: Path = GENERATED_DATA_PATH,
) -> GeneratedData:
	rows = read_rows(csv_path)
	_write_json_atomic(out_path, [_serialize_row(row) for row in rows])
	return GeneratedData(count=len(rows), path=out_path)


def load_generated(path: Path) -> list[Row]:
	"""Read the generated asset back into rows with real dates."""
	try:
		with path.open(encoding="utf-8") as handle:
			records = json.load(handle)
	except FileNotFoundError as exc:
		raise DataError(f"generated data not found: {path}") from exc
	except json.JSONDecodeError as exc:
		raise DataError(f"generated data is not valid JSON: {path}") from exc

	rows: list[Row] = []
	for record in records:
		row_date = _parse_date(record.get("date"))
		if row_date is None:
			continue
		weight = record.get("weight_lbs")
		rows.append(
			{
				"date": row_date,
				"weight_lbs": None if weight is None else _parse_weight(str(weight)),
				"injection_date": _parse_date(record.get("injection_date")),
				"dose": record.get("dose") or None,
			}
		)
	return rows
