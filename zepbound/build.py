from __future__ import annotations

import argparse
import signal
import sys
import threading
import traceback
from pathlib import Path
from typing import Sequence

from zepbound.bundle import Bundler
from zepbound.config import (
	CSV_PATH,
	DEBOUNCE_SECONDS,
	GENERATED_DATA_PATH,
	POLL_INTERVAL_SECONDS,
	REPO_ROOT,
)
from zepbound.data import generate_data
from zepbound.watch import Debouncer, FileWatcher


def _display_path(path: Path) -> str:
	try:
		return str(path.resolve().relative_to(REPO_ROOT.resolve()))
	except ValueError:
		return str(path)


def _print_error(message: str, exc: BaseException) -> None:
	print(message, file=sys.stderr, flush=True)
	traceback.print_exception(exc, file=sys.stderr)


def _regenerate(csv_path: Path, data_path: Path) -> None:
	generated = generate_data(csv_path, data_path)
	print(f"data: regenerated {generated.count} rows", flush=True)


def _watch(
	bundler: Bundler,
	csv_path: Path,
	data_path: Path,
	stop_event: threading.Event,
) -> None:
	bundler.watch()
	print("js: watching zepbound chart sources", flush=True)
	print(f"js: watching {_display_path(csv_path)}", flush=True)

	debouncer = Debouncer(
		DEBOUNCE_SECONDS,
		lambda: _regenerate(csv_path, data_path),
		on_error=lambda exc: _print_error("data: regeneration failed", exc),
	)
	csv_watcher = FileWatcher([csv_path], debouncer.trigger, interval=POLL_INTERVAL_SECONDS)
	csv_watcher.start()

	def shutdown(signum: int, frame: object) -> None:
		stop_event.set()

	previous_handlers = {
		signum: signal.signal(signum, shutdown)
		for signum in (signal.SIGINT, signal.SIGTERM)
	}

	try:
		while not stop_event.wait(0.5):
			pass
	finally:
		csv_watcher.close()
		debouncer.cancel()
		bundler.dispose()
		for signum, handler in previous_handlers.items():
			signal.signal(signum, handler)


def run_build(
	watch: bool = False,
	csv_path: Path = CSV_PATH,
	data_path: Path = GENERATED_DATA_PATH,
	bundler: Bundler | None = None,
	stop_event: threading.Event | None = None,
) -> None:
	bundler = bundler or Bundler(data_path=data_path)
	generated = generate_data(csv_path, data_path)
	print(f"data: generated {generated.count} rows", flush=True)

	page_path = bundler.rebuild()
	print(f"js: built {_display_path(page_path)}", flush=True)
	if not watch:
		return

	_watch(bundler, csv_path, data_path, stop_event or threading.Event())


def main(argv: Sequence[str] | None = None) -> int:
	parser = argparse.ArgumentParser(
		prog="zepbound-build",
		description="Regenerate the zepbound weight data and bundle the chart page.",
	)
	parser.add_argument("--watch", action="store_true", help="rebuild when the CSV or chart inputs change")
	args = parser.parse_args(argv)

	try:
		run_build(watch=args.watch)
	except Exception as exc:
		_print_error("js: build failed", exc)
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
