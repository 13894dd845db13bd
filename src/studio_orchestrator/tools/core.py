"""Core health check tool and shared response helpers."""

import json

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..exceptions import StudioError


def error_response(exc: Exception) -> str:
	"""JSON error payload returned by tools instead of raising."""
	return json.dumps({"error": str(exc), "type": type(exc).__name__})


def guarded(fn):
	"""Run a tool body, turning package and input errors into error payloads."""
	try:
		return fn()
	except (StudioError, ValueError) as e:
		return error_response(e)


def register_core_tools(mcp: FastMCP, config: Config) -> None:
	"""Register core tools."""

	@mcp.tool()
	async def health_check() -> str:
		"""
		Check the health of the studio-orchestrator server.
		Returns configured paths and whether they exist.
		"""
		status = {
			"server": "running",
			"config_dir": str(config.config_dir),
			"data_dir": str(config.data_dir),
			"studio_dir": str(config.studio_dir),
			"orchestration_dir_exists": config.orchestration_dir.exists(),
			"learnings_dir_exists": config.learnings_dir.exists(),
			"cache_dir_exists": config.cache_dir.exists(),
		}
		return json.dumps(status, indent=2)
