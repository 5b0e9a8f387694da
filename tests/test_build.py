"""Tests for the build driver and its exit codes."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from zepbound import build
from zepbound.bundle import Bundler

pytestmark = pytest.mark.integration


def _bundler(tmp_path: Path, data_path: Path) -> Bundler:
	return Bundler(
		data_path=data_path,
		page_path=tmp_path / "html" / "zepbound" / "index.html",
		theme_script_path=tmp_path / "html" / "_js" / "theme-switcher.js",
		poll_interval=0.02,
	)


def test_run_build_generates_data_and_page(csv_file: Path, tmp_path: Path, capsys) -> None:
	data_path = tmp_path / "web" / "weights.generated.json"
	bundler = _bundler(tmp_path, data_path)

	build.run_build(csv_path=csv_file, data_path=data_path, bundler=bundler)

	out = capsys.readouterr().out
	assert "data: generated 3 rows" in out
	assert "js: built" in out
	assert data_path.exists()
	assert bundler.page_path.exists()


def test_run_build_propagates_generation_errors(tmp_path: Path) -> None:
	data_path = tmp_path / "weights.generated.json"

	with pytest.raises(Exception):
		build.run_build(
			csv_path=tmp_path / "missing.csv",
			data_path=data_path,
			bundler=_bundler(tmp_path, data_path),
		)


def test_main_returns_zero_on_success(monkeypatch) -> None:
	seen: list[bool] = []
	monkeypatch.setattr(build, "run_build", lambda watch=False: seen.append(watch))

	assert build.main([]) == 0
	assert build.main(["--watch"]) == 0
	assert seen == [False, True]


def test_main_returns_one_on_failure(monkeypatch, capsys) -> None:
	def fail(watch: bool = False) -> None:
		raise RuntimeError("csv exploded")

	monkeypatch.setattr(build, "run_build", fail)

	assert build.main([]) == 1
	err = capsys.readouterr().err
	assert "js: build failed" in err
	assert "csv exploded" in err


def test_main_rejects_unknown_flags() -> None:
	with pytest.raises(SystemExit):
		build.main(["--minify"])


def test_watch_mode_regenerates_on_csv_change(csv_file: Path, tmp_path: Path, monkeypatch, capsys) -> None:
	"""A CSV edit during watch mode regenerates the data and the page."""

	monkeypatch.setattr(build, "DEBOUNCE_SECONDS", 0.02)
	monkeypatch.setattr(build, "POLL_INTERVAL_SECONDS", 0.02)
	data_path = tmp_path / "web" / "weights.generated.json"
	bundler = _bundler(tmp_path, data_path)
	stop = threading.Event()

	original_regenerate = build._regenerate

	def regenerate(csv_path: Path, out_path: Path) -> None:
		original_regenerate(csv_path, out_path)
		stop.set()

	monkeypatch.setattr(build, "_regenerate", regenerate)

	def edit_csv() -> None:
		csv_file.write_text(
			csv_file.read_text(encoding="utf-8") + "2024-01-15,196.5,,\n",
			encoding="utf-8",
		)

	class EditingWatcher(build.FileWatcher):
		def start(self) -> None:
			super().start()
			if self.paths == [csv_file]:
				edits.append(threading.Timer(0.05, edit_csv))
				edits[-1].start()

	edits: list[threading.Timer] = []
	monkeypatch.setattr(build, "FileWatcher", EditingWatcher)
	watchdog = threading.Timer(5, stop.set)
	watchdog.start()
	try:
		build.run_build(
			watch=True,
			csv_path=csv_file,
			data_path=data_path,
			bundler=bundler,
			stop_event=stop,
		)
	finally:
		for timer in edits:
			timer.cancel()
		watchdog.cancel()

	assert "data: regenerated 4 rows" in capsys.readouterr().out
	assert '"2024-01-15"' in data_path.read_text(encoding="utf-8")
