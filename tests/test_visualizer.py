"""Tests for visualizer Rich views."""

from pathlib import Path

from rich.console import Console

from studio_orchestrator.budget.pools import PoolReport, PoolStatus
from studio_orchestrator.budget.tiers import scan_learnings
from studio_orchestrator.visualizer.budget import render_budget_table, render_pool_budget, render_scan_report
from studio_orchestrator.visualizer.session_status import render_session_status
from studio_orchestrator.visualizer.utils import format_timestamp, pool_status_style, progress_bar, truncate

from .helpers import make_orchestrator, write_learnings


def _render(tmp_path: Path, fn, *args) -> str:
	console = Console(file=open(tmp_path / "out.txt", "w"), force_terminal=True, width=120)
	fn(*args, console=console)
	console.file.close()
	return (tmp_path / "out.txt").read_text()


# -- utils tests --

def test_format_timestamp_invalid():
	assert format_timestamp("not-a-date") == "not-a-date"


def test_format_timestamp_aware():
	assert format_timestamp("2001-01-01T00:00:00+00:00").endswith("d ago")


def test_truncate():
	assert truncate("short") == "short"
	assert truncate("x" * 100, 20) == "x" * 17 + "..."
	assert truncate("") == ""


def test_pool_status_style():
	assert pool_status_style(PoolStatus.OK) == "green"
	assert pool_status_style("CRITICAL") == "red"
	assert pool_status_style("unknown") == "white"


def test_progress_bar_is_clamped():
	assert progress_bar(50, width=10) == "#####-----"
	assert progress_bar(250, width=10) == "#" * 10


# -- session view tests --

def test_render_no_session(tmp_path: Path):
	output = _render(tmp_path, render_session_status, None)
	assert "No active orchestration session" in output


def test_render_session(tmp_path: Path):
	orch = make_orchestrator(tmp_path)
	orch.init("Add user authentication")
	orch.route()
	orch.agent_start("planner")
	orch.agent_complete("planner")
	orch.agent_fail("builder", "compile error in auth.py")
	orch.checkpoint("planning_complete")

	output = _render(tmp_path, render_session_status, orch.state())
	assert "Add user authentication" in output
	assert "plan_then_build" in output
	assert "planner" in output
	assert "compile error" in output
	assert "planning_complete" in output


# -- budget view tests --

def _report(pool: str, used: int, status: PoolStatus) -> PoolReport:
	return PoolReport(pool=pool, used=used, soft_limit=20000, hard_limit=25000, status=status)


def test_render_budget_table(tmp_path: Path):
	reports = [
		_report("learnings", 17000, PoolStatus.WARNING),
		_report("plans", 100, PoolStatus.OK),
	]
	output = _render(tmp_path, render_budget_table, reports)
	assert "learnings" in output
	assert "WARNING" in output
	assert "TOTAL" in output
	assert "17,100" in output


def test_render_pool_budget(tmp_path: Path):
	output = _render(tmp_path, render_pool_budget, _report("learnings", 10000, PoolStatus.OK))
	assert "Pool: learnings" in output
	assert "50%" in output


def test_render_scan_report(tmp_path: Path):
	learnings = tmp_path / "learnings"
	write_learnings(learnings, "frontend", [
		("2001-01-01", "Ancient", "x"),
	])
	output = _render(tmp_path, render_scan_report, scan_learnings(learnings))
	assert "tier3" in output
	assert "Needs archiving" in output
	assert "frontend:2001-01-01" in output


def test_render_scan_report_missing_dir(tmp_path: Path):
	output = _render(tmp_path, render_scan_report, scan_learnings(tmp_path / "nope"))
	assert "No learnings directory" in output
