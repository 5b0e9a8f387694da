from __future__ import annotations

import os
import re
import sys
import traceback
from datetime import datetime
from pathlib import Path

from bokeh.embed import components
from bokeh.resources import CDN
from jinja2 import Environment, FileSystemLoader, select_autoescape

from zepbound.chart import build_chart
from zepbound.config import (
	GENERATED_DATA_PATH,
	PAGE_PATH,
	POLL_INTERVAL_SECONDS,
	THEME_SCRIPT_PATH,
)
from zepbound.data import load_generated
from zepbound.theme import THEMES, theme_switcher_script
from zepbound.watch import FileWatcher

DEFAULT_TEMPLATE = Path(__file__).resolve().parent / "templates" / "zepbound.html"
PAGE_TITLE = "Zepbound"
MOUNT_POINTS = {
	"#chart": re.compile(r"""id\s*=\s*["']chart["']"""),
	"#chart-tooltip": re.compile(r"""id\s*=\s*["']chart-tooltip["']"""),
	".card": re.compile(r"""class\s*=\s*["'][^"']*\bcard\b[^"']*["']"""),
}


class MountPointError(RuntimeError):
	pass


def check_mount_points(template_source: str) -> None:
	missing = [name for name, pattern in MOUNT_POINTS.items() if not pattern.search(template_source)]
	if missing:
		raise MountPointError(f"zepbound chart mount points not found: {', '.join(missing)}")


def _write_text(path: Path, text: str) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")


class Bundler:
	"""Packages the chart and the generated rows into a static page."""

	def __init__(
		self,
		data_path: Path = GENERATED_DATA_PATH,
		page_path: Path = PAGE_PATH,
		theme_script_path: Path = THEME_SCRIPT_PATH,
		template_path: Path = DEFAULT_TEMPLATE,
		poll_interval: float = POLL_INTERVAL_SECONDS,
	) -> None:
		self.data_path = data_path
		self.page_path = page_path
		self.theme_script_path = theme_script_path
		self.template_path = template_path
		self.poll_interval = poll_interval
		self._watcher: FileWatcher | None = None

	def _theme_script_src(self) -> str:
		return Path(os.path.relpath(self.theme_script_path, self.page_path.parent)).as_posix()

	def render(self) -> str:
		template_source = self.template_path.read_text(encoding="utf-8")
		check_mount_points(template_source)

		rows = load_generated(self.data_path)
		script, div = "", ""
		if rows:
			script, div = components(build_chart(rows))

		env = Environment(
			loader=FileSystemLoader(str(self.template_path.parent)),
			autoescape=select_autoescape(["html"]),
		)
		template = env.get_template(self.template_path.name)
		return template.render(
			title=PAGE_TITLE,
			script=script,
			div=div,
			bokeh_js=CDN.js_files,
			bokeh_css=CDN.css_files,
			theme_script_src=self._theme_script_src(),
			themes=THEMES,
			row_count=len(rows),
			generated_at=datetime.now().strftime("%Y-%m-%d %H:%M"),
		)

	def rebuild(self) -> Path:
		page = self.render()
		_write_text(self.theme_script_path, theme_switcher_script())
		_write_text(self.page_path, page)
		return self.page_path

	def _rebuild_logged(self) -> None:
		try:
			page_path = self.rebuild()
		except Exception as exc:
			print("js: rebuild failed", file=sys.stderr, flush=True)
			traceback.print_exception(exc, file=sys.stderr)
			return
		print(f"js: rebuilt {page_path}", flush=True)

	def watch(self) -> None:
		if self._watcher is not None:
			return
		self._watcher = FileWatcher(
			[self.data_path, self.template_path],
			self._rebuild_logged,
			interval=self.poll_interval,
		)
		self._watcher.start()

	def dispose(self) -> None:
		if self._watcher is not None:
			self._watcher.close()
			self._watcher = None
