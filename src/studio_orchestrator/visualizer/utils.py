"""Shared utilities for visualizer views."""

from datetime import datetime

from ..budget.pools import PoolStatus


def format_timestamp(iso_str: str) -> str:
	"""Format an ISO timestamp as relative time (e.g. '2m ago') or absolute."""
	try:
		dt = datetime.fromisoformat(iso_str)
		now = datetime.now(dt.tzinfo) if dt.tzinfo else datetime.now()
		total_secs = int((now - dt).total_seconds())

		if total_secs < 0:
			return iso_str[:19]
		if total_secs < 60:
			return f"{total_secs}s ago"
		if total_secs < 3600:
			return f"{total_secs // 60}m ago"
		if total_secs < 86400:
			return f"{total_secs // 3600}h ago"
		days = total_secs // 86400
		return f"{days}d ago"
	except (ValueError, TypeError):
		return str(iso_str)[:19]


def truncate(text: str, max_len: int = 60) -> str:
	"""Shorten a string for table display."""
	if not text:
		return ""
	text = text.strip()
	if len(text) <= max_len:
		return text
	return text[:max_len - 3] + "..."


POOL_STATUS_STYLES = {
	PoolStatus.OK: "green",
	PoolStatus.WARNING: "yellow",
	PoolStatus.CRITICAL: "red",
}


def pool_status_style(status: PoolStatus | str) -> str:
	"""Return a Rich style string for a pool status."""
	try:
		return POOL_STATUS_STYLES[PoolStatus(status)]
	except ValueError:
		return "white"


def progress_bar(percent: int, width: int = 40) -> str:
	"""Text progress bar, clamped to width."""
	filled = max(0, min(width, percent * width // 100))
	return "#" * filled + "-" * (width - filled)
