"""MCP tool registration - modular tool definitions."""

import logging

from mcp.server.fastmcp import FastMCP

from ..config import Config
from .budget import register_budget_tools
from .core import register_core_tools
from .orchestration import register_orchestration_tools

logger = logging.getLogger(__name__)


def register_all_tools(mcp: FastMCP, config: Config) -> None:
	"""Register all MCP tools."""
	register_core_tools(mcp, config)
	register_orchestration_tools(mcp, config)
	register_budget_tools(mcp, config)
	logger.debug("Registered orchestration and budget tools")
