from __future__ import annotations

import sys
import threading
import traceback
from pathlib import Path
from typing import Callable, Iterable

FileState = tuple[int, int] | None


class Debouncer:
	"""Coalesces bursts of triggers into one run of ``job``.

	Each trigger restarts the timer. A timer that fires while a previous run
	is still in flight is dropped, not queued.
	"""

	def __init__(
		self,
		delay: float,
		job: Callable[[], None],
		on_error: Callable[[BaseException], None] | None = None,
	) -> None:
		self.delay = delay
		self.job = job
		self.on_error = on_error
		self._timer: threading.Timer | None = None
		self._lock = threading.Lock()
		self._running = False

	@property
	def running(self) -> bool:
		return self._running

	def trigger(self) -> None:
		with self._lock:
			if self._timer is not None:
				self._timer.cancel()
			self._timer = threading.Timer(self.delay, self._fire)
			self._timer.daemon = True
			self._timer.start()

	def cancel(self) -> None:
		with self._lock:
			if self._timer is not None:
				self._timer.cancel()
				self._timer = None

	def _fire(self) -> None:
		with self._lock:
			self._timer = None
		self.run()

	def run(self) -> bool:
		with self._lock:
			if self._running:
				return False
			self._running = True
		try:
			self.job()
		except Exception as exc:
			if self.on_error is not None:
				self.on_error(exc)
			else:
				traceback.print_exception(exc, file=sys.stderr)
		finally:
			with self._lock:
				self._running = False
		return True


def _file_state(path: Path) -> FileState:
	try:
		stat = path.stat()
	except FileNotFoundError:
		return None
	return stat.st_mtime_ns, stat.st_size


class FileWatcher:
	"""Polls a fixed set of files and reports when any of them changes."""

	def __init__(
		self,
		paths: Iterable[Path],
		on_change: Callable[[], None],
		interval: float = 0.25,
	) -> None:
		self.paths = [Path(path) for path in paths]
		self.on_change = on_change
		self.interval = interval
		self._stop = threading.Event()
		self._thread: threading.Thread | None = None
		self._snapshot = self.snapshot()

	def snapshot(self) -> dict[Path, FileState]:
		return {path: _file_state(path) for path in self.paths}

	def poll(self) -> bool:
		current = self.snapshot()
		if current == self._snapshot:
			return False
		self._snapshot = current
		self.on_change()
		return True

	def start(self) -> None:
		if self._thread is not None:
			return
		self._stop.clear()
		self._snapshot = self.snapshot()
		self._thread = threading.Thread(target=self._loop, name="zepbound-watch", daemon=True)
		self._thread.start()

	def _loop(self) -> None:
		while not self._stop.wait(self.interval):
			self.poll()

	def close(self) -> None:
		self._stop.set()
		if self._thread is not None and self._thread is not threading.current_thread():
			self._thread.join(timeout=self.interval * 4)
		self._thread = None
