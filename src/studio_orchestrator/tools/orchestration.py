"""Orchestration session tools."""

import json

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..orchestration.service import Orchestrator
from .core import guarded


def register_orchestration_tools(mcp: FastMCP, config: Config) -> None:
	"""Register orchestration session tools."""

	def orchestrator() -> Orchestrator:
		return Orchestrator(config)

	@mcp.tool()
	async def orchestration_init(goal: str, mode: str = "implicit") -> str:
		"""
		Start a new orchestration session and make it current.

		Args:
			goal: What the session should achieve
			mode: "implicit" (auto-apply routing) or "explicit" (confirm routing)
		"""
		def run():
			session_id = orchestrator().init(goal, mode)
			return json.dumps({"success": True, "session_id": session_id}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def orchestration_route(goal: str = "", has_existing_plan: bool = False) -> str:
		"""
		Classify the goal into a workflow and record the agent sequence.

		Args:
			goal: Goal to analyze (empty = the session's goal)
			has_existing_plan: True when an approved plan already exists
		"""
		def run():
			decision = orchestrator().route(goal or None, has_existing_plan)
			return json.dumps({
				"workflow": decision.workflow.value,
				"confidence": decision.confidence,
				"agents": decision.agents,
			}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def orchestration_state() -> str:
		"""Get the full state of the current session."""
		def run():
			return orchestrator().state().model_dump_json(indent=2)
		return guarded(run)

	@mcp.tool()
	async def agent_start(agent: str) -> str:
		"""
		Mark an agent as active. Starting an agent again retries it.

		Args:
			agent: Agent name (e.g., "planner", "builder")
		"""
		def run():
			state = orchestrator().agent_start(agent)
			return json.dumps({
				"agent": agent,
				"status": state.status.value,
				"invocation_count": state.invocation_count,
			}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def agent_complete(agent: str, output: str = "", context_used: int = -1) -> str:
		"""
		Mark an agent as completed and store its output.

		Args:
			agent: Agent name
			output: Agent output as JSON (non-JSON text is stored as a string)
			context_used: Approximate tokens the agent consumed (-1 = unknown)
		"""
		def run():
			parsed = None
			if output:
				try:
					parsed = json.loads(output)
				except json.JSONDecodeError:
					parsed = output
			state = orchestrator().agent_complete(
				agent,
				parsed,
				context_used if context_used >= 0 else None,
			)
			return json.dumps({"agent": agent, "status": state.status.value}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def agent_fail(agent: str, error_message: str) -> str:
		"""
		Record an agent failure. The agent stays eligible for retry.

		Args:
			agent: Agent name
			error_message: Human-readable failure description
		"""
		def run():
			orch = orchestrator()
			failure = orch.agent_fail(agent, error_message)
			decision = orch.recover(agent)
			return json.dumps({
				"recorded": failure.model_dump(),
				"failure_count": decision.failure_count,
				"suggested_action": decision.action.value,
			}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def record_handoff(from_agent: str, to_agent: str, context: str = "{}") -> str:
		"""
		Pass a context package from one agent to another.

		Args:
			from_agent: Agent handing off
			to_agent: Agent receiving the context
			context: JSON context (invalid JSON is stored as an empty object)
		"""
		def run():
			record = orchestrator().handoff(from_agent, to_agent, context)
			return json.dumps(record.model_dump(), indent=2)
		return guarded(run)

	@mcp.tool()
	async def get_handoff(agent: str) -> str:
		"""
		Get the latest context handed off to an agent ({} if none).

		Args:
			agent: Receiving agent name
		"""
		def run():
			return json.dumps(orchestrator().get_handoff(agent), indent=2)
		return guarded(run)

	@mcp.tool()
	async def save_checkpoint(name: str = "checkpoint") -> str:
		"""
		Snapshot the current session so it can be resumed later.

		Args:
			name: Human-readable checkpoint name (e.g., "planning_complete")
		"""
		def run():
			checkpoint_id = orchestrator().checkpoint(name)
			return json.dumps({"checkpoint_id": checkpoint_id, "name": name}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def resume_checkpoint(checkpoint: str = "") -> str:
		"""
		Restore the session from a checkpoint and pause it.

		Args:
			checkpoint: Checkpoint id or name (empty = latest)
		"""
		def run():
			ref = orchestrator().resume(checkpoint or None)
			return json.dumps({"resumed": ref.model_dump(), "status": "paused"}, indent=2)
		return guarded(run)

	@mcp.tool()
	async def recover_agent(agent: str = "") -> str:
		"""
		Decide how to respond to an agent's failures: retry, replan or escalate.

		Args:
			agent: Agent name (empty = count failures of all agents)
		"""
		def run():
			decision = orchestrator().recover(agent or None)
			return decision.model_dump_json(indent=2)
		return guarded(run)

	@mcp.tool()
	async def cleanup_orchestration() -> str:
		"""Delete the current session and clear the current-session pointer."""
		def run():
			removed = orchestrator().cleanup()
			return json.dumps({"removed": removed}, indent=2)
		return guarded(run)
