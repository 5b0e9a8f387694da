from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Iterable

E10 = math.sqrt(50)
E5 = math.sqrt(10)
E2 = math.sqrt(2)
WEIGHT_PADDING = 1.2


def _round_half_up(value: float) -> int:
	return math.floor(value + 0.5)


def _tick_spec(start: float, stop: float, count: float) -> tuple[int, int, float]:
	step = (stop - start) / max(0, count)
	power = math.floor(math.log10(step))
	error = step / (10 ** power)
	factor = 10 if error >= E10 else 5 if error >= E5 else 2 if error >= E2 else 1

	if power < 0:
		inc = (10 ** -power) / factor
		i1 = _round_half_up(start * inc)
		i2 = _round_half_up(stop * inc)
		if i1 / inc < start:
			i1 += 1
		if i2 / inc > stop:
			i2 -= 1
		inc = -inc
	else:
		inc = (10 ** power) * factor
		i1 = _round_half_up(start / inc)
		i2 = _round_half_up(stop / inc)
		if i1 * inc < start:
			i1 += 1
		if i2 * inc > stop:
			i2 -= 1

	if i2 < i1 and 0.5 <= count < 2:
		return _tick_spec(start, stop, count * 2)
	return i1, i2, inc


def tick_increment(start: float, stop: float, count: float) -> float:
	"""Tick step for ``[start, stop]``; negative values mean ``1 / -step``."""
	return _tick_spec(start, stop, count)[2]


def nice_domain(lo: float, hi: float, count: int = 10) -> tuple[float, float]:
	if not hi > lo or count <= 0:
		return lo, hi

	previous_step: float | None = None
	for _ in range(10):
		step = tick_increment(lo, hi, count)
		if step == previous_step:
			break
		if step > 0:
			lo = math.floor(lo / step) * step
			hi = math.ceil(hi / step) * step
		elif step < 0:
			lo = math.ceil(lo * step) / step
			hi = math.floor(hi * step) / step
		else:
			break
		previous_step = step
	return lo, hi


def ticks(lo: float, hi: float, count: int) -> list[float]:
	if count <= 0:
		return []
	if lo == hi:
		return [lo]
	if hi < lo:
		return list(reversed(ticks(hi, lo, count)))

	i1, i2, inc = _tick_spec(lo, hi, count)
	if i2 < i1:
		return []
	if inc < 0:
		return [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
	return [(i1 + i) * inc for i in range(i2 - i1 + 1)]


def weight_domain(
	weights: Iterable[float],
	pad: float = WEIGHT_PADDING,
) -> tuple[float, float]:
	values = [value for value in weights if math.isfinite(value)]
	if not values:
		return 0.0, 1.0
	return nice_domain(min(values) - pad, max(values) + pad)


def date_extent(dates: Iterable[date]) -> tuple[date, date] | None:
	values = list(dates)
	if not values:
		return None
	return min(values), max(values)


def week_ticks(start: date, end: date) -> list[date]:
	first_sunday = start + timedelta(days=(6 - start.weekday()) % 7)
	result: list[date] = []
	current = first_sunday
	while current <= end:
		result.append(current)
		current += timedelta(days=7)
	return result
