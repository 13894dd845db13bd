"""Tests for the MCP tool surface."""

import json
from pathlib import Path

import pytest

from studio_orchestrator.tools import register_all_tools
from studio_orchestrator.tools.budget import register_budget_tools
from studio_orchestrator.tools.core import register_core_tools
from studio_orchestrator.tools.orchestration import register_orchestration_tools

from .helpers import capture_tools, make_config, write_learnings

EXPECTED_TOOLS = {
	"health_check",
	"orchestration_init",
	"orchestration_route",
	"orchestration_state",
	"agent_start",
	"agent_complete",
	"agent_fail",
	"record_handoff",
	"get_handoff",
	"save_checkpoint",
	"resume_checkpoint",
	"recover_agent",
	"cleanup_orchestration",
	"estimate_tokens",
	"context_budget",
	"content_tier",
	"scan_learnings",
	"summarize_learning",
	"cache_summary",
	"get_cached_summary",
}


@pytest.fixture
def config(tmp_path: Path):
	return make_config(tmp_path)


@pytest.fixture
def orch_tools(config):
	return capture_tools(config, register_orchestration_tools)


@pytest.fixture
def budget_tools(config):
	return capture_tools(config, register_budget_tools)


def test_all_tools_registered(config):
	tools = capture_tools(config, register_all_tools)
	assert set(tools) == EXPECTED_TOOLS


@pytest.mark.asyncio
async def test_health_check(config):
	tools = capture_tools(config, register_core_tools)
	status = json.loads(await tools["health_check"]())
	assert status["server"] == "running"
	assert status["orchestration_dir_exists"] is False


class TestOrchestrationTools:
	@pytest.mark.asyncio
	async def test_session_flow(self, orch_tools):
		init = json.loads(await orch_tools["orchestration_init"]("Add user authentication"))
		assert init["success"] is True

		routing = json.loads(await orch_tools["orchestration_route"]())
		assert routing["workflow"] == "plan_then_build"

		await orch_tools["agent_start"]("planner")
		await orch_tools["agent_complete"]("planner", '{"plan_id": "bp_001"}', 1500)
		checkpoint = json.loads(await orch_tools["save_checkpoint"]("planning_complete"))
		assert checkpoint["checkpoint_id"].startswith("cp_")

		await orch_tools["record_handoff"]("planner", "builder", '{"task_id": "task_001"}')
		assert json.loads(await orch_tools["get_handoff"]("builder")) == {"task_id": "task_001"}

		state = json.loads(await orch_tools["orchestration_state"]())
		planner = state["agent_states"][0]
		assert planner["output"] == {"plan_id": "bp_001"}
		assert planner["context_used"] == 1500

		resumed = json.loads(await orch_tools["resume_checkpoint"]())
		assert resumed["resumed"]["name"] == "planning_complete"
		assert json.loads(await orch_tools["get_handoff"]("builder")) == {}

		cleaned = json.loads(await orch_tools["cleanup_orchestration"]())
		assert cleaned["removed"] == init["session_id"]

	@pytest.mark.asyncio
	async def test_no_session_returns_error_payload(self, orch_tools):
		result = json.loads(await orch_tools["orchestration_state"]())
		assert result["type"] == "NoActiveSessionError"
		assert "init" in result["error"]

	@pytest.mark.asyncio
	async def test_invalid_mode_returns_error_payload(self, orch_tools):
		result = json.loads(await orch_tools["orchestration_init"]("Add search", "sometimes"))
		assert result["type"] == "ValueError"

	@pytest.mark.asyncio
	async def test_agent_fail_suggests_action(self, orch_tools):
		await orch_tools["orchestration_init"]("Fix flaky test")
		for _ in range(3):
			result = json.loads(await orch_tools["agent_fail"]("builder", "tests failed"))
		assert result["failure_count"] == 3
		assert result["suggested_action"] == "replan"

		decision = json.loads(await orch_tools["recover_agent"]("builder"))
		assert decision["action"] == "replan"
		assert decision["thresholds"] == {"retry_max": 3, "replan_max": 5}


class TestBudgetTools:
	@pytest.mark.asyncio
	async def test_budget_all_and_unknown(self, budget_tools):
		result = json.loads(await budget_tools["context_budget"]())
		assert len(result["pools"]) == 6

		error = json.loads(await budget_tools["context_budget"]("scratch"))
		assert error["type"] == "UnknownPoolError"

	@pytest.mark.asyncio
	async def test_tier(self, budget_tools):
		assert json.loads(await budget_tools["content_tier"]("2001-01-01"))["tier"] == "tier3"
		error = json.loads(await budget_tools["content_tier"]("someday"))
		assert error["type"] == "InvalidDateError"

	@pytest.mark.asyncio
	async def test_estimate_missing_file(self, budget_tools, tmp_path: Path):
		error = json.loads(await budget_tools["estimate_tokens"](str(tmp_path / "missing.md")))
		assert error["type"] == "ContentNotFoundError"

	@pytest.mark.asyncio
	async def test_scan_and_summarize(self, budget_tools, config):
		path = write_learnings(config.learnings_dir, "frontend", [("2026-05-01", "Suspense", "Use boundaries")])
		scan = json.loads(await budget_tools["scan_learnings"]())
		assert scan["total_entries"] == 1

		result = json.loads(await budget_tools["summarize_learning"](str(path), "2026-05-01"))
		assert "Use boundaries" in result["prompt"]

	@pytest.mark.asyncio
	async def test_cache(self, budget_tools):
		miss = json.loads(await budget_tools["get_cached_summary"]("frontend-2026-05-01"))
		assert miss["type"] == "CacheMissError"

		await budget_tools["cache_summary"]("frontend-2026-05-01", "short summary")
		hit = json.loads(await budget_tools["get_cached_summary"]("frontend-2026-05-01"))
		assert hit["content"] == "short summary"
