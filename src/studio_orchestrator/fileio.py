"""Crash-safe file primitives: advisory locking and atomic replace-on-write."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional


class FileLock:
	"""Best-effort cross-platform exclusive file lock.

	Not re-entrant: acquiring the same lock path twice in one process blocks.
	"""

	def __init__(self, lock_path: Path):
		self.lock_path = lock_path
		self.handle: Optional[Any] = None

	def __enter__(self) -> "FileLock":
		self.lock_path.parent.mkdir(parents=True, exist_ok=True)
		self.handle = open(self.lock_path, "w")
		try:
			import fcntl

			fcntl.flock(self.handle, fcntl.LOCK_EX)
		except ImportError:  # pragma: no cover - Windows fallback
			if os.name == "nt":
				import msvcrt

				msvcrt.locking(self.handle.fileno(), msvcrt.LK_LOCK, 1)
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		if not self.handle:
			return
		try:
			import fcntl

			fcntl.flock(self.handle, fcntl.LOCK_UN)
		except ImportError:  # pragma: no cover - Windows fallback
			if os.name == "nt":
				import msvcrt

				msvcrt.locking(self.handle.fileno(), msvcrt.LK_UNLCK, 1)
		self.handle.close()
		self.handle = None


def atomic_write_text(path: Path, content: str) -> None:
	"""Write content to a temp file in the same directory, fsync, then rename over path."""
	path.parent.mkdir(parents=True, exist_ok=True)
	fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
	try:
		with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
			handle.write(content)
			handle.flush()
			os.fsync(handle.fileno())
		os.replace(tmp_name, path)
	except BaseException:
		try:
			os.unlink(tmp_name)
		except FileNotFoundError:
			pass
		raise


def atomic_write_json(path: Path, data: Any) -> None:
	atomic_write_text(path, json.dumps(data, indent=2) + "\n")
