"""Shared test fixtures and helpers for studio-orchestrator tests."""

from pathlib import Path
from typing import Callable

from studio_orchestrator.config import Config
from studio_orchestrator.orchestration.service import Orchestrator
from studio_orchestrator.orchestration.store import SessionStore


def make_config(tmp_path: Path) -> Config:
	"""Create a Config whose every path lives under tmp_path."""
	return Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
		studio_dir=tmp_path / ".studio",
		learnings_dir=tmp_path / "studio" / "learnings",
		project_root=tmp_path,
	)


def make_orchestrator(tmp_path: Path, pinned: bool = False) -> Orchestrator:
	"""Create an Orchestrator backed by a temp store."""
	config = make_config(tmp_path)
	return Orchestrator(config, SessionStore(config.orchestration_dir, pinned=pinned))


def write_learnings(learnings_dir: Path, domain: str, entries: list[tuple[str, str, str]]) -> Path:
	"""Write a learnings file with (date, title, body) entries."""
	learnings_dir.mkdir(parents=True, exist_ok=True)
	lines = [f"# {domain} learnings", ""]
	for entry_date, title, body in entries:
		lines.append(f"## {entry_date}: {title}")
		lines.append("")
		lines.append(body)
		lines.append("")
	path = learnings_dir / f"{domain}.md"
	path.write_text("\n".join(lines))
	return path


def capture_tools(config: Config, register_fn: Callable) -> dict:
	"""Register tools on a mock MCP and return the captured tool functions.

	Args:
		config: Config object to pass to the registration function
		register_fn: The registration function (e.g., register_budget_tools)

	Returns:
		Dict mapping tool name to the tool function
	"""
	captured = {}

	class MockMCP:
		def tool(self):
			def decorator(fn):
				captured[fn.__name__] = fn
				return fn
			return decorator

	register_fn(MockMCP(), config)
	return captured
