"""Tests for context pools and the budget manager."""

from datetime import date, timedelta
from pathlib import Path

import pytest

from studio_orchestrator.budget.manager import ContextBudgetManager
from studio_orchestrator.budget.pools import (
	PoolLimits,
	PoolName,
	PoolStatus,
	classify_usage,
	pool_names,
	resolve_pool,
)
from studio_orchestrator.exceptions import UnknownPoolError

from .helpers import make_config, make_orchestrator, write_learnings


@pytest.fixture
def config(tmp_path: Path):
	return make_config(tmp_path)


@pytest.fixture
def manager(config):
	return ContextBudgetManager(config)


def _words(n: int) -> str:
	return " ".join(f"word{i}" for i in range(n))


class TestPools:
	def test_pool_names(self):
		assert pool_names() == ["reserved", "learnings", "backlog", "plans", "context7", "working"]

	def test_resolve_pool_is_case_insensitive(self):
		assert resolve_pool(" Learnings ") == PoolName.LEARNINGS

	def test_unknown_pool(self):
		with pytest.raises(UnknownPoolError) as exc_info:
			resolve_pool("scratch")
		assert "scratch" in str(exc_info.value)
		assert "learnings" in str(exc_info.value)

	@pytest.mark.parametrize("used,expected", [
		(0, PoolStatus.OK),
		(79, PoolStatus.OK),
		(80, PoolStatus.WARNING),
		(189, PoolStatus.WARNING),
		(190, PoolStatus.CRITICAL),
		(500, PoolStatus.CRITICAL),
	])
	def test_classify_usage(self, used: int, expected: PoolStatus):
		assert classify_usage(used, PoolLimits(soft_limit=100, hard_limit=200)) == expected


class TestBudget:
	def test_unknown_pool(self, manager):
		with pytest.raises(UnknownPoolError):
			manager.budget("scratch")

	def test_empty_project(self, manager):
		result = manager.budget("all")
		assert [p["pool"] for p in result["pools"]] == pool_names()
		assert all(p["used"] == 0 and p["status"] == "OK" for p in result["pools"])
		assert result["total_used"] == 0
		assert result["total_soft"] == 150000

	def test_learnings_pool(self, manager, config):
		config.learnings_dir.mkdir(parents=True)
		(config.learnings_dir / "frontend.md").write_text(_words(100))
		(config.learnings_dir / "backend.md").write_text(_words(10))
		(config.learnings_dir / "notes.txt").write_text(_words(1000))

		result = manager.budget("learnings")
		assert result["used"] == 130 + 13
		assert result["soft_limit"] == 20000
		assert result["hard_limit"] == 25000
		assert result["status"] == "OK"

	def test_usage_is_computed_at_query_time(self, manager, config):
		config.learnings_dir.mkdir(parents=True)
		path = config.learnings_dir / "frontend.md"
		path.write_text(_words(10))
		assert manager.budget("learnings")["used"] == 13
		path.write_text(_words(20))
		assert manager.budget("learnings")["used"] == 26

	def test_status_uses_configured_limits(self, manager, config):
		config.pool_limits["learnings"] = PoolLimits(soft_limit=100, hard_limit=120)
		config.learnings_dir.mkdir(parents=True)
		(config.learnings_dir / "frontend.md").write_text(_words(70))
		assert manager.budget("learnings")["status"] == "WARNING"
		(config.learnings_dir / "backend.md").write_text(_words(20))
		assert manager.budget("learnings")["status"] == "CRITICAL"

	def test_pool_members(self, manager, config, tmp_path: Path):
		(config.tasks_dir / "task_001").mkdir(parents=True)
		(config.tasks_dir / "task_001" / "plan.json").write_text('{"id": "bp_001"}')
		(config.tasks_dir / "task_001" / "notes.md").write_text("ignored")
		config.backlog_file.write_text('{"epics": []}')
		(tmp_path / "playbooks" / "frontend").mkdir(parents=True)
		(tmp_path / "playbooks" / "frontend" / "SKILL.md").write_text("skill")
		(tmp_path / "agents").mkdir()
		(tmp_path / "agents" / "builder.yaml").write_text("name: builder")
		(config.context7_dir / "react").mkdir(parents=True)
		(config.context7_dir / "react" / "hooks.md").write_text("docs")

		assert manager.pool_members("plans") == [config.tasks_dir / "task_001" / "plan.json"]
		assert manager.pool_members("backlog") == [config.backlog_file]
		assert manager.pool_members("reserved") == [
			tmp_path / "playbooks" / "frontend" / "SKILL.md",
			tmp_path / "agents" / "builder.yaml",
		]
		assert manager.pool_members("context7") == [config.context7_dir / "react" / "hooks.md"]
		assert manager.pool_members("working") == []

	def test_working_pool_tracks_session_context(self, tmp_path: Path):
		orch = make_orchestrator(tmp_path)
		manager = ContextBudgetManager(orch.config, orch.store)
		assert manager.budget("working")["used"] == 0

		orch.init("Add search")
		orch.route()
		orch.agent_start("planner")
		orch.agent_complete("planner", {"plan_id": "bp_001"}, context_used=4000)
		orch.agent_start("builder")
		orch.agent_complete("builder", {}, context_used=21000)

		report = manager.budget("working")
		assert report["used"] == 25000
		assert report["status"] == "WARNING"

	def test_budget_all_totals(self, manager, config):
		config.backlog_file.parent.mkdir(parents=True, exist_ok=True)
		config.backlog_file.write_text("x" * 333)
		result = manager.budget("ALL")
		assert result["total_used"] == 100
		assert result["percent"] == 0


class TestOptimize:
	def test_unsupported_pool(self, manager):
		assert manager.optimize("plans") == {"pool": "plans", "supported": False}

	def test_learnings_flags_entries(self, manager, config):
		today = date.today()
		write_learnings(config.learnings_dir, "frontend", [
			((today - timedelta(days=5)).isoformat(), "Fresh", "body"),
			((today - timedelta(days=45)).isoformat(), "Aging", "body"),
			((today - timedelta(days=200)).isoformat(), "Old", "body"),
		])
		result = manager.optimize()
		assert result["supported"] is True
		assert result["summarize"] == [f"frontend:{(today - timedelta(days=45)).isoformat()}"]
		assert result["archive"] == [f"frontend:{(today - timedelta(days=200)).isoformat()}"]
