"""Summary cache - unexpiring, file-backed key -> content store."""

import logging
import re
from pathlib import Path

from ..exceptions import CacheMissError, InvalidCacheKeyError
from ..fileio import atomic_write_text

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class SummaryCache:
	"""
	Stores summaries verbatim, one file per key.

	A missing key raises CacheMissError rather than returning "", so callers
	can tell "never cached" apart from "cached empty".

	Usage:
		cache = SummaryCache(config.cache_dir)
		cache.set("frontend-2026-08-01", summary)
		summary = cache.get("frontend-2026-08-01")
	"""

	def __init__(self, cache_dir: Path):
		self.cache_dir = Path(cache_dir)

	def path_for(self, key: str) -> Path:
		if not key or key in (".", "..") or not _KEY_PATTERN.match(key):
			raise InvalidCacheKeyError(key)
		return self.cache_dir / f"{key}.md"

	def set(self, key: str, content: str) -> Path:
		"""Write content under key, replacing any previous value."""
		path = self.path_for(key)
		atomic_write_text(path, content)
		logger.info(f"Cached summary: {key}")
		return path

	def get(self, key: str) -> str:
		path = self.path_for(key)
		try:
			with open(path, encoding="utf-8", newline="") as f:
				return f.read()
		except FileNotFoundError:
			raise CacheMissError(key) from None
