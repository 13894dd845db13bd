"""Context budget tools."""

import json

from mcp.server.fastmcp import FastMCP

from ..budget.manager import ContextBudgetManager
from ..config import Config
from .core import guarded


def register_budget_tools(mcp: FastMCP, config: Config) -> None:
	"""Register context budget tools."""

	def manager() -> ContextBudgetManager:
		return ContextBudgetManager(config)

	@mcp.tool()
	async def estimate_tokens(path: str, kind: str = "") -> str:
		"""
		Approximate the token count of a file.

		Args:
			path: File to estimate
			kind: "prose", "json" or "code" (empty = infer from suffix)
		"""
		def run():
			tokens = manager().estimate(path, kind or None)
			return json.dumps({"path": path, "tokens": tokens}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def context_budget(pool: str = "all") -> str:
		"""
		Get usage against soft/hard limits for one pool or all pools.

		Args:
			pool: reserved, learnings, backlog, plans, context7, working, or "all"
		"""
		def run():
			return json.dumps(manager().budget(pool), indent=2)
		return guarded(run)

	@mcp.tool()
	async def content_tier(entry_date: str) -> str:
		"""
		Classify a date (YYYY-MM-DD) into a retention tier.

		Args:
			entry_date: Date of the content item
		"""
		def run():
			return json.dumps(manager().tier(entry_date).to_dict(), indent=2)
		return guarded(run)

	@mcp.tool()
	async def scan_learnings(scope: str = "all") -> str:
		"""
		Tier every learnings entry and flag entries to summarize or archive.

		Args:
			scope: "all" or a single learnings domain (e.g., "frontend")
		"""
		def run():
			return json.dumps(manager().scan(scope).to_dict(), indent=2)
		return guarded(run)

	@mcp.tool()
	async def summarize_learning(path: str, entry_date: str) -> str:
		"""
		Build the prompt that compresses one learnings entry to summary form.

		Args:
			path: Learnings file containing the entry
			entry_date: Date of the entry header (YYYY-MM-DD)
		"""
		def run():
			prompt = manager().summarize_prompt(path, entry_date)
			return json.dumps({"path": path, "entry_date": entry_date, "prompt": prompt}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def cache_summary(key: str, content: str) -> str:
		"""
		Store a summary under a key so it need not be recomputed.

		Args:
			key: Cache key (letters, digits, '.', '_', '-')
			content: Summary text, stored verbatim
		"""
		def run():
			path = manager().cache_set(key, content)
			return json.dumps({"success": True, "key": key, "path": str(path)}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def get_cached_summary(key: str) -> str:
		"""
		Get a cached summary. A key never written returns a CacheMissError payload.

		Args:
			key: Cache key
		"""
		def run():
			return json.dumps({"key": key, "content": manager().cache_get(key)}, indent=2)
		return guarded(run)
