from __future__ import annotations

import html
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable

from bokeh.models import (
	ColumnDataSource,
	CustomJS,
	DatetimeTickFormatter,
	FixedTicker,
	HoverTool,
	Label,
	Range1d,
	Span,
)
from bokeh.plotting import figure

from zepbound.data import Row
from zepbound.scales import date_extent, ticks, week_ticks, weight_domain

WIDTH = 1000
HEIGHT = 520
MARGIN = {"top": 64, "right": 32, "bottom": 56, "left": 70}
Y_TICK_COUNT = 6
TOOLTIP_OFFSET = 12
TOOLTIP_PADDING = 8
DOT_SIZE = 5.4
HOVER_TARGET_SIZE = 20
LINE_COLOR = "#2563eb"
INJECTION_COLOR = "#a855f7"
DATE_TICK_FORMAT = "%b %d"

TOOLTIP_JS = """
const card = document.querySelector(".card");
const tooltip = document.querySelector("#chart-tooltip");
const chart = document.querySelector("#chart");
if (!card || !tooltip || !chart) {
	throw new Error("zepbound chart mount points not found");
}

const hide = () => {
	tooltip.style.opacity = 0;
	tooltip.setAttribute("aria-hidden", "true");
};
if (!chart.dataset.tooltipBound) {
	chart.addEventListener("mouseleave", hide);
	chart.dataset.tooltipBound = "1";
}

const indices = cb_data.index.indices;
if (!indices.length) {
	hide();
	return;
}

const i = indices[0];
tooltip.innerHTML = source.data.tooltip_date[i] + "<br>" + source.data.tooltip_weight[i];
tooltip.style.opacity = 1;
tooltip.setAttribute("aria-hidden", "false");

const chartRect = chart.getBoundingClientRect();
const cardRect = card.getBoundingClientRect();
const pointerX = chartRect.left - cardRect.left + cb_data.geometry.sx;
const pointerY = chartRect.top - cardRect.top + cb_data.geometry.sy;

const maxLeft = card.clientWidth - tooltip.offsetWidth - padding;
const maxTop = card.clientHeight - tooltip.offsetHeight - padding;
const left = Math.min(Math.max(padding, pointerX + offset), Math.max(padding, maxLeft));
const top = Math.min(Math.max(padding, pointerY + offset), Math.max(padding, maxTop));

tooltip.style.left = `${left}px`;
tooltip.style.top = `${top}px`;
"""


def _to_ms(value: date) -> float:
	moment = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
	return moment.timestamp() * 1000


def weight_points(rows: Iterable[Row]) -> list[Row]:
	return sorted(
		(row for row in rows if row.get("weight_lbs") is not None),
		key=lambda row: row["date"],
	)


def injection_markers(rows: Iterable[Row]) -> list[dict[str, Any]]:
	return [
		{"date": row["injection_date"], "dose": row.get("dose") or ""}
		for row in rows
		if row.get("injection_date") is not None
	]


def tooltip_text(point: Row) -> tuple[str, str]:
	point_date = point["date"]
	return (
		f"{point_date:%A, %b} {point_date.day}, {point_date.year}",
		f"{point['weight_lbs']:.1f} lbs",
	)


def clamp_tooltip_position(
	pointer: tuple[float, float],
	container: tuple[float, float],
	tooltip: tuple[float, float],
	offset: float = TOOLTIP_OFFSET,
	padding: float = TOOLTIP_PADDING,
) -> tuple[float, float]:
	pointer_x, pointer_y = pointer
	container_width, container_height = container
	tooltip_width, tooltip_height = tooltip

	max_left = container_width - tooltip_width - padding
	max_top = container_height - tooltip_height - padding
	left = min(max(padding, pointer_x + offset), max(padding, max_left))
	top = min(max(padding, pointer_y + offset), max(padding, max_top))
	return left, top


def _time_range(rows: list[Row]) -> Range1d:
	start, end = date_extent(row["date"] for row in rows)
	if start == end:
		start -= timedelta(days=1)
		end += timedelta(days=1)
	return Range1d(start=_to_ms(start), end=_to_ms(end))


def _point_source(points: list[Row]) -> ColumnDataSource:
	labels = [tooltip_text(point) for point in points]
	return ColumnDataSource(
		{
			"x": [_to_ms(point["date"]) for point in points],
			"y": [point["weight_lbs"] for point in points],
			"tooltip_date": [html.escape(label[0]) for label in labels],
			"tooltip_weight": [html.escape(label[1]) for label in labels],
		}
	)


def build_chart(rows: list[Row]) -> figure:
	if not rows:
		raise ValueError("no rows to chart")

	points = weight_points(rows)
	injections = injection_markers(rows)
	y_lo, y_hi = weight_domain(point["weight_lbs"] for point in points)
	x_range = _time_range(rows)

	plot = figure(
		x_axis_type="datetime",
		width=WIDTH,
		height=HEIGHT,
		sizing_mode="stretch_width",
		tools="",
		toolbar_location=None,
		x_range=x_range,
		y_range=Range1d(y_lo, y_hi),
		min_border_top=MARGIN["top"],
		min_border_right=MARGIN["right"],
		min_border_bottom=MARGIN["bottom"],
		min_border_left=MARGIN["left"],
		name="zepbound-chart",
	)
	plot.outline_line_color = None
	plot.background_fill_color = None
	plot.border_fill_color = None

	y_ticker = FixedTicker(ticks=ticks(y_lo, y_hi, Y_TICK_COUNT))
	plot.yaxis.ticker = y_ticker
	plot.ygrid.ticker = y_ticker
	plot.ygrid.grid_line_alpha = 0.35
	plot.xgrid.visible = False
	plot.yaxis.axis_label = "Weight (lbs)"
	plot.yaxis.minor_tick_line_color = None

	start_ms, end_ms = x_range.start, x_range.end
	first = datetime.fromtimestamp(start_ms / 1000, tz=timezone.utc).date()
	last = datetime.fromtimestamp(end_ms / 1000, tz=timezone.utc).date()
	plot.xaxis.ticker = FixedTicker(ticks=[_to_ms(tick) for tick in week_ticks(first, last)])
	plot.xaxis.formatter = DatetimeTickFormatter(
		days=DATE_TICK_FORMAT,
		months=DATE_TICK_FORMAT,
		years=DATE_TICK_FORMAT,
		hours=DATE_TICK_FORMAT,
		minutes=DATE_TICK_FORMAT,
		seconds=DATE_TICK_FORMAT,
	)
	plot.xaxis.minor_tick_line_color = None

	for marker in injections:
		location = _to_ms(marker["date"])
		plot.add_layout(
			Span(
				location=location,
				dimension="height",
				line_color=INJECTION_COLOR,
				line_dash="dashed",
				line_width=1.5,
				name="injection-line",
			)
		)
		plot.add_layout(
			Label(
				x=location,
				y=y_hi,
				y_offset=14,
				text=marker["dose"],
				text_align="center",
				text_baseline="bottom",
				text_font_size="11px",
				text_color=INJECTION_COLOR,
				name="injection-label",
			)
		)

	source = _point_source(points)
	source.name = "weights"
	plot.line("x", "y", source=source, line_width=2, color=LINE_COLOR, name="weight-line")
	plot.scatter("x", "y", source=source, size=DOT_SIZE, color=LINE_COLOR, name="weight-dot")
	targets = plot.scatter(
		"x",
		"y",
		source=source,
		size=HOVER_TARGET_SIZE,
		fill_alpha=0,
		line_alpha=0,
		name="hover-target",
	)
	plot.add_tools(
		HoverTool(
			renderers=[targets],
			tooltips=None,
			callback=CustomJS(
				args={
					"source": source,
					"offset": TOOLTIP_OFFSET,
					"padding": TOOLTIP_PADDING,
				},
				code=TOOLTIP_JS,
			),
		)
	)
	return plot
