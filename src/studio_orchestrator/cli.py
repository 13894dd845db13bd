"""CLI for studio-orchestrator: session lifecycle, context budget, and serve commands.

Commands that produce machine-readable output print exactly one JSON value
on stdout (init and checkpoint print a bare id). Diagnostics go to stderr.
"""

import argparse
import json
import logging
import os
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Any, Optional

from .budget.manager import ContextBudgetManager
from .config import Config, load_config
from .exceptions import StudioError
from .logging_config import setup_logging
from .orchestration.service import Orchestrator
from .orchestration.store import SessionStore

logger = logging.getLogger(__name__)


def _emit(value: Any) -> None:
	print(json.dumps(value, indent=2))


def _store(config: Config) -> SessionStore:
	# ORCH_SESSION_ID pins one invocation to a session other than the current one
	return SessionStore(config.orchestration_dir, os.getenv("ORCH_SESSION_ID") or None)


def _orchestrator() -> Orchestrator:
	config = load_config()
	return Orchestrator(config, _store(config))


def _manager() -> ContextBudgetManager:
	config = load_config()
	return ContextBudgetManager(config, _store(config))


def _parse_json_arg(value: Optional[str]) -> Any:
	"""Parse a JSON argument; plain text is kept as a string."""
	if value is None or value == "":
		return None
	try:
		return json.loads(value)
	except json.JSONDecodeError:
		return value


# ==================== Orchestration commands ====================


def cmd_init(args: argparse.Namespace) -> None:
	"""Start a session and print its id."""
	print(_orchestrator().init(args.goal, args.mode))


def cmd_route(args: argparse.Namespace) -> None:
	decision = _orchestrator().route(args.goal, args.has_plan)
	_emit({
		"workflow": decision.workflow.value,
		"confidence": decision.confidence,
		"agents": decision.agents,
	})


def cmd_state(args: argparse.Namespace) -> None:
	print(_orchestrator().state().model_dump_json(indent=2))


def cmd_status(args: argparse.Namespace) -> None:
	"""Human-readable session status (or --json for the compact summary)."""
	orch = _orchestrator()
	if args.json:
		_emit(orch.status_summary())
		return

	from .visualizer import render_session_status
	session = orch.state() if orch.store.current_id() else None
	render_session_status(session)


def cmd_agent_start(args: argparse.Namespace) -> None:
	_emit(_orchestrator().agent_start(args.agent).model_dump(mode="json"))


def cmd_agent_complete(args: argparse.Namespace) -> None:
	state = _orchestrator().agent_complete(
		args.agent,
		_parse_json_arg(args.output),
		args.context_used,
	)
	_emit(state.model_dump(mode="json"))


def cmd_agent_fail(args: argparse.Namespace) -> None:
	_emit(_orchestrator().agent_fail(args.agent, args.error_message).model_dump(mode="json"))


def cmd_handoff(args: argparse.Namespace) -> None:
	_emit(_orchestrator().handoff(args.from_agent, args.to_agent, args.context).model_dump(mode="json"))


def cmd_get_handoff(args: argparse.Namespace) -> None:
	_emit(_orchestrator().get_handoff(args.agent))


def cmd_checkpoint(args: argparse.Namespace) -> None:
	"""Snapshot the session and print the checkpoint id."""
	print(_orchestrator().checkpoint(args.name))


def cmd_resume(args: argparse.Namespace) -> None:
	_emit(_orchestrator().resume(args.checkpoint).model_dump(mode="json"))


def cmd_recover(args: argparse.Namespace) -> None:
	print(_orchestrator().recover(args.agent).model_dump_json(indent=2))


def cmd_cleanup(args: argparse.Namespace) -> None:
	_emit({"removed": _orchestrator().cleanup()})


# ==================== Context budget commands ====================


def cmd_context_estimate(args: argparse.Namespace) -> None:
	tokens = _manager().estimate(args.path, args.kind)
	_emit({"path": args.path, "tokens": tokens})


def cmd_context_budget(args: argparse.Namespace) -> None:
	manager = _manager()
	if not args.table:
		_emit(manager.budget(args.pool))
		return

	from .visualizer import render_budget_table, render_pool_budget
	if args.pool.strip().lower() == "all":
		render_budget_table(manager.pool_reports())
	else:
		render_pool_budget(manager.pool_report(args.pool))


def cmd_context_tier(args: argparse.Namespace) -> None:
	_emit(_manager().tier(args.date).to_dict())


def cmd_context_scan(args: argparse.Namespace) -> None:
	report = _manager().scan(args.scope)
	if not args.table:
		_emit(report.to_dict())
		return

	from .visualizer import render_scan_report
	render_scan_report(report)


def cmd_context_summarize(args: argparse.Namespace) -> None:
	"""Print the summarization prompt for one learnings entry."""
	print(_manager().summarize_prompt(args.file, args.date))


def cmd_context_cache_set(args: argparse.Namespace) -> None:
	content = args.content
	if content is None or content == "-":
		content = sys.stdin.read()
	path = _manager().cache_set(args.key, content)
	_emit({"key": args.key, "path": str(path)})


def cmd_context_cache_get(args: argparse.Namespace) -> None:
	"""Print cached content verbatim."""
	sys.stdout.write(_manager().cache_get(args.key))


def cmd_context_optimize(args: argparse.Namespace) -> None:
	_emit(_manager().optimize(args.pool))


def cmd_context_status(args: argparse.Namespace) -> None:
	"""Budget table for every pool followed by the learnings scan."""
	from .visualizer import render_budget_table, render_scan_report
	manager = _manager()
	render_budget_table(manager.pool_reports())
	render_scan_report(manager.scan())


# ==================== Server & config ====================


def cmd_serve(args: argparse.Namespace) -> None:
	"""Run the MCP server (stdio transport)."""
	from .server import mcp
	mcp.run()


def cmd_config(args: argparse.Namespace) -> None:
	"""Print the effective configuration."""
	config = load_config()
	_emit({
		"config_file": str(config.config_file),
		"config_file_exists": config.config_file.exists(),
		"data_dir": str(config.data_dir),
		"log_dir": str(config.log_dir),
		"studio_dir": str(config.studio_dir),
		"orchestration_dir": str(config.orchestration_dir),
		"learnings_dir": str(config.learnings_dir),
		"cache_dir": str(config.cache_dir),
		"project_root": str(config.project_root),
		"pools": {
			name: {"soft_limit": limits.soft_limit, "hard_limit": limits.hard_limit}
			for name, limits in config.pool_limits.items()
		},
		"tiers": {"tier1_max_age": config.tier1_max_age, "tier2_max_age": config.tier2_max_age},
		"recovery": {
			"retry_threshold": config.retry_threshold,
			"escalate_threshold": config.escalate_threshold,
		},
	})


def _version() -> str:
	try:
		return pkg_version("studio-orchestrator")
	except PackageNotFoundError:
		return "unknown"


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="studio-orchestrator",
		description="Multi-agent orchestration state machine and context budget manager",
	)
	parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
	parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING or ERROR")
	subparsers = parser.add_subparsers(dest="command")

	# init
	init_parser = subparsers.add_parser("init", help="Start a new orchestration session")
	init_parser.add_argument("goal", help="What the session should achieve")
	init_parser.add_argument("mode", nargs="?", default="implicit", choices=["implicit", "explicit"])
	init_parser.set_defaults(func=cmd_init)

	# route
	route_parser = subparsers.add_parser("route", help="Classify the goal and record the agent sequence")
	route_parser.add_argument("goal", nargs="?", default=None, help="Goal to analyze (default: session goal)")
	route_parser.add_argument("--has-plan", action="store_true", help="An approved plan already exists")
	route_parser.set_defaults(func=cmd_route)

	# state / status
	state_parser = subparsers.add_parser("state", help="Print the full session state as JSON")
	state_parser.set_defaults(func=cmd_state)

	status_parser = subparsers.add_parser("status", help="Show session status")
	status_parser.add_argument("--json", action="store_true", help="Print a compact JSON summary")
	status_parser.set_defaults(func=cmd_status)

	# agent lifecycle
	start_parser = subparsers.add_parser("agent-start", help="Mark an agent as active")
	start_parser.add_argument("agent")
	start_parser.set_defaults(func=cmd_agent_start)

	complete_parser = subparsers.add_parser("agent-complete", help="Mark an agent as completed")
	complete_parser.add_argument("agent")
	complete_parser.add_argument("output", nargs="?", default=None, help="Agent output (JSON)")
	complete_parser.add_argument("--context-used", type=int, default=None, help="Approximate tokens consumed")
	complete_parser.set_defaults(func=cmd_agent_complete)

	fail_parser = subparsers.add_parser("agent-fail", help="Record an agent failure")
	fail_parser.add_argument("agent")
	fail_parser.add_argument("error_message", nargs="?", default="Unknown error")
	fail_parser.set_defaults(func=cmd_agent_fail)

	# handoffs
	handoff_parser = subparsers.add_parser("handoff", help="Record a context handoff between agents")
	handoff_parser.add_argument("from_agent")
	handoff_parser.add_argument("to_agent")
	handoff_parser.add_argument("context", nargs="?", default="{}", help="Context (JSON)")
	handoff_parser.set_defaults(func=cmd_handoff)

	get_handoff_parser = subparsers.add_parser("get-handoff", help="Print the latest context handed to an agent")
	get_handoff_parser.add_argument("agent")
	get_handoff_parser.set_defaults(func=cmd_get_handoff)

	# checkpoints & recovery
	checkpoint_parser = subparsers.add_parser("checkpoint", help="Snapshot the session")
	checkpoint_parser.add_argument("name", nargs="?", default="checkpoint")
	checkpoint_parser.set_defaults(func=cmd_checkpoint)

	resume_parser = subparsers.add_parser("resume", help="Restore the session from a checkpoint")
	resume_parser.add_argument("checkpoint", nargs="?", default=None, help="Checkpoint id or name (default: latest)")
	resume_parser.set_defaults(func=cmd_resume)

	recover_parser = subparsers.add_parser("recover", help="Decide retry, replan or escalate")
	recover_parser.add_argument("agent", nargs="?", default=None)
	recover_parser.set_defaults(func=cmd_recover)

	cleanup_parser = subparsers.add_parser("cleanup", help="Delete the current session")
	cleanup_parser.set_defaults(func=cmd_cleanup)

	# context
	context_parser = subparsers.add_parser("context", help="Context budget management")
	context_subparsers = context_parser.add_subparsers(dest="context_command")

	estimate_parser = context_subparsers.add_parser("estimate", help="Estimate tokens in a file")
	estimate_parser.add_argument("path")
	estimate_parser.add_argument("--kind", choices=["prose", "json", "code"], default=None)
	estimate_parser.set_defaults(func=cmd_context_estimate)

	budget_parser = context_subparsers.add_parser("budget", help="Pool usage against limits")
	budget_parser.add_argument("pool", nargs="?", default="all")
	budget_parser.add_argument("--table", action="store_true", help="Render as a table")
	budget_parser.set_defaults(func=cmd_context_budget)

	tier_parser = context_subparsers.add_parser("tier", help="Retention tier for a date")
	tier_parser.add_argument("date", help="YYYY-MM-DD")
	tier_parser.set_defaults(func=cmd_context_tier)

	scan_parser = context_subparsers.add_parser("scan", help="Tier every learnings entry")
	scan_parser.add_argument("scope", nargs="?", default="all", help="'all' or a learnings domain")
	scan_parser.add_argument("--table", action="store_true", help="Render as a table")
	scan_parser.set_defaults(func=cmd_context_scan)

	summarize_parser = context_subparsers.add_parser("summarize", help="Build a summarization prompt")
	summarize_parser.add_argument("file")
	summarize_parser.add_argument("date", help="Entry date (YYYY-MM-DD)")
	summarize_parser.set_defaults(func=cmd_context_summarize)

	cache_set_parser = context_subparsers.add_parser("cache-set", help="Cache content under a key")
	cache_set_parser.add_argument("key")
	cache_set_parser.add_argument("content", nargs="?", default=None, help="Content ('-' or omitted: stdin)")
	cache_set_parser.set_defaults(func=cmd_context_cache_set)

	cache_get_parser = context_subparsers.add_parser("cache-get", help="Print cached content")
	cache_get_parser.add_argument("key")
	cache_get_parser.set_defaults(func=cmd_context_cache_get)

	optimize_parser = context_subparsers.add_parser("optimize", help="Flag entries to summarize or archive")
	optimize_parser.add_argument("pool", nargs="?", default="learnings")
	optimize_parser.set_defaults(func=cmd_context_optimize)

	context_status_parser = context_subparsers.add_parser("status", help="Budgets plus learnings scan")
	context_status_parser.set_defaults(func=cmd_context_status)

	# serve / config
	serve_parser = subparsers.add_parser("serve", help="Run MCP server (stdio)")
	serve_parser.set_defaults(func=cmd_serve)

	config_parser = subparsers.add_parser("config", help="Show effective configuration")
	config_parser.set_defaults(func=cmd_config)

	return parser


def main(argv: Optional[list[str]] = None) -> None:
	"""CLI entry point."""
	parser = build_parser()
	args = parser.parse_args(argv)

	if not args.command or not hasattr(args, "func"):
		parser.print_help()
		sys.exit(1)

	setup_logging(args.log_level, load_config().log_dir)

	try:
		args.func(args)
	except (StudioError, ValueError) as e:
		logger.error(str(e))
		sys.exit(1)


if __name__ == "__main__":
	main()
