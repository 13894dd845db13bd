"""
Orchestrator - the session operations exposed to callers.

Each mutating operation is one SessionStore transaction: lock, load,
mutate, atomic write. Agents run outside this process; their lifecycle is
reported through explicit start/complete/fail calls.
"""

import json
import logging
import time
from typing import TYPE_CHECKING, Any, Optional

from ..exceptions import CheckpointNotFoundError
from .models import (
	AgentState,
	AgentStatus,
	CheckpointRef,
	Failure,
	Handoff,
	RecoveryAction,
	RecoveryDecision,
	Routing,
	RoutingDecision,
	SequenceEntry,
	Session,
	SessionMode,
	SessionStatus,
	now_iso,
)
from .recovery import decide_recovery
from .router import route_goal
from .store import SessionStore

if TYPE_CHECKING:
	from ..config import Config

logger = logging.getLogger(__name__)


def coerce_context(context: Any) -> Any:
	"""Turn a handoff context into a JSON object or array; anything else becomes {}."""
	if context is None:
		return {}
	if isinstance(context, bytes):
		context = context.decode("utf-8", errors="replace")
	if isinstance(context, str):
		if not context.strip():
			return {}
		try:
			context = json.loads(context)
		except json.JSONDecodeError:
			logger.warning("Invalid JSON handoff context, using empty object")
			return {}
	if not isinstance(context, (dict, list)):
		logger.warning(f"Handoff context must be an object or array, got {type(context).__name__}; using empty object")
		return {}
	try:
		json.dumps(context)
	except (TypeError, ValueError):
		logger.warning("Unserializable handoff context, using empty object")
		return {}
	return context


def _ensure_serializable(value: Any, what: str) -> Any:
	try:
		json.dumps(value)
	except (TypeError, ValueError) as e:
		raise ValueError(f"{what} must be JSON-serializable: {e}") from e
	return value


class Orchestrator:
	"""
	Drives one orchestration session at a time.

	The current session comes from the injected SessionStore; tests pin a
	store per session to run several independently.

	Usage:
		orch = Orchestrator(config)
		orch.init("Add user authentication")
		orch.route()
		orch.agent_start("planner")
		orch.agent_complete("planner", {"plan_id": "bp_001"})
	"""

	def __init__(self, config: "Config", store: Optional[SessionStore] = None):
		self.config = config
		self.store = store or SessionStore(config.orchestration_dir)

	# ==================== Session ====================

	def init(self, goal: str, mode: SessionMode | str = SessionMode.IMPLICIT) -> str:
		"""Create a session for goal, make it current and return its id."""
		if not goal or not goal.strip():
			raise ValueError("Goal must not be empty")
		try:
			mode = SessionMode(mode)
		except ValueError:
			raise ValueError(f"Invalid mode: {mode} (expected implicit or explicit)") from None

		session = self.store.create(goal.strip(), mode)
		logger.info(f"Orchestration initialized: {session.id} ({mode.value})")
		return session.id

	def state(self) -> Session:
		return self.store.load()

	def cleanup(self, session_id: Optional[str] = None) -> Optional[str]:
		"""Delete a session (default: current). No session is a no-op returning None."""
		removed = self.store.delete(session_id)
		if removed is None:
			logger.warning("No active session to clean up")
		else:
			logger.info(f"Cleaned up session: {removed}")
		return removed

	def status_summary(self) -> Optional[dict]:
		"""Compact view of the current session, or None when there is none."""
		if not self.store.current_id():
			return None
		session = self.store.load()
		return {
			"session_id": session.id,
			"mode": session.mode.value,
			"status": session.status.value,
			"goal": session.goal,
			"workflow": session.routing.workflow.value if session.routing.workflow else None,
			"confidence": session.routing.confidence,
			"agents": [
				{"agent": e.agent, "order": e.order, "status": e.status.value}
				for e in session.routing.agent_sequence
			],
			"handoffs": len(session.handoffs),
			"checkpoints": len(session.checkpoints),
			"failures": len(session.failures),
			"updated_at": session.updated_at,
		}

	# ==================== Routing ====================

	def route(self, goal: Optional[str] = None, has_existing_plan: bool = False) -> RoutingDecision:
		"""Classify goal (default: the session's goal) and record the routing."""
		with self.store.transaction() as session:
			analyzed = goal if goal and goal.strip() else session.goal
			decision = route_goal(analyzed, has_existing_plan)
			session.routing = Routing(
				analyzed_goal=analyzed,
				workflow=decision.workflow,
				confidence=decision.confidence,
				agent_sequence=[
					SequenceEntry(agent=agent, order=i + 1)
					for i, agent in enumerate(decision.agents)
				],
			)
			session.status = SessionStatus.ROUTING

		logger.info(
			f"Routed to {decision.workflow.value} "
			f"(confidence {decision.confidence}, agents: {', '.join(decision.agents)})"
		)
		return decision

	# ==================== Agent lifecycle ====================

	def agent_start(self, name: str) -> AgentState:
		"""Mark an agent active, reopening it if it already ran (retry)."""
		if not name:
			raise ValueError("Agent name must not be empty")
		now = now_iso()
		with self.store.transaction() as session:
			entry = session.routing.entry_for(name)
			if entry is None:
				entry = SequenceEntry(agent=name, order=len(session.routing.agent_sequence) + 1)
				session.routing.agent_sequence.append(entry)
			entry.status = AgentStatus.ACTIVE
			entry.started_at = now
			entry.completed_at = None

			state = session.agent_state(name)
			if state is None:
				state = AgentState(agent_name=name)
				session.agent_states.append(state)
			state.status = AgentStatus.ACTIVE
			state.started_at = now
			state.completed_at = None
			state.invocation_count += 1

			session.status = SessionStatus.EXECUTING
			result = state.model_copy()

		logger.info(f"Agent started: {name} (invocation {result.invocation_count})")
		return result

	def agent_complete(
		self,
		name: str,
		output: Any = None,
		context_used: Optional[int] = None,
	) -> AgentState:
		"""Mark an agent completed and store its output verbatim."""
		if not name:
			raise ValueError("Agent name must not be empty")
		output = {} if output is None else _ensure_serializable(output, "Agent output")
		now = now_iso()
		with self.store.transaction() as session:
			entry = session.routing.entry_for(name)
			if entry is not None:
				entry.status = AgentStatus.COMPLETED
				entry.completed_at = now

			state = session.agent_state(name)
			if state is None:
				state = AgentState(agent_name=name, started_at=now)
				session.agent_states.append(state)
			state.status = AgentStatus.COMPLETED
			state.completed_at = now
			state.output = output
			if context_used is not None:
				state.context_used = max(0, int(context_used))

			sequence = session.routing.agent_sequence
			if sequence and all(e.status == AgentStatus.COMPLETED for e in sequence):
				session.status = SessionStatus.COMPLETED
			result = state.model_copy()
			finished = session.status == SessionStatus.COMPLETED

		logger.info(f"Agent completed: {name}")
		if finished:
			logger.info("All agents in sequence completed")
		return result

	def agent_fail(self, name: str, error_message: str) -> Failure:
		"""
		Record an agent failure.

		Only the failures log changes (plus the session status); the agent's
		own status is left alone so a later agent_start can retry it.
		"""
		if not name:
			raise ValueError("Agent name must not be empty")
		failure = Failure(agent=name, error_message=error_message or "Unknown error")
		with self.store.transaction() as session:
			session.failures.append(failure)
			session.status = SessionStatus.RECOVERING
			count = len(session.failures_for(name))

		logger.warning(f"Agent failed: {name} ({count} failure(s)): {failure.error_message}")
		return failure

	# ==================== Handoffs ====================

	def handoff(self, from_agent: str, to_agent: str, context: Any = None) -> Handoff:
		"""Record a context package passed between agents. Malformed context degrades to {}."""
		if not from_agent or not to_agent:
			raise ValueError("Handoff needs both a source and a target agent")
		record = Handoff(
			from_agent=from_agent,
			to_agent=to_agent,
			context_passed=coerce_context(context),
		)
		with self.store.transaction() as session:
			session.handoffs.append(record)

		logger.info(f"Handoff: {from_agent} -> {to_agent}")
		return record

	def get_handoff(self, agent: str) -> Any:
		"""Context of the latest handoff addressed to agent, or {} if none."""
		session = self.store.load()
		latest = session.latest_handoff_to(agent)
		if latest is None:
			return {}
		return latest.context_passed

	# ==================== Checkpoints & recovery ====================

	def _next_checkpoint_id(self, session: Session) -> str:
		stamp = int(time.time() * 1000)
		taken = {cp.id for cp in session.checkpoints}
		while f"cp_{stamp}" in taken or self.store.checkpoint_exists(session.id, f"cp_{stamp}"):
			stamp += 1
		return f"cp_{stamp}"

	def checkpoint(self, name: str = "checkpoint") -> str:
		"""Snapshot the current session and return the checkpoint id."""
		name = name or "checkpoint"
		with self.store.transaction() as session:
			checkpoint_id = self._next_checkpoint_id(session)
			session.checkpoints.append(CheckpointRef(
				id=checkpoint_id,
				name=name,
				timestamp=session.updated_at,
				after_agent=session.last_completed_agent(),
			))
			# Snapshot matches what the transaction is about to persist
			self.store.write_checkpoint(session, checkpoint_id)

		logger.info(f"Checkpoint saved: {name} ({checkpoint_id})")
		return checkpoint_id

	def resume(self, checkpoint: Optional[str] = None) -> CheckpointRef:
		"""
		Restore the session from a checkpoint and pause it.

		checkpoint may be an id or a name (latest with that name); None means
		the latest checkpoint. Anything recorded after the checkpoint is lost.
		"""
		with self.store.transaction() as session:
			ref = session.find_checkpoint(checkpoint)
			if ref is None:
				raise CheckpointNotFoundError(checkpoint)
			snapshot = self.store.load_checkpoint(ref.id, session.id)

			session.routing = snapshot.routing
			session.agent_states = snapshot.agent_states
			session.handoffs = snapshot.handoffs
			session.failures = snapshot.failures
			session.status = SessionStatus.PAUSED

		logger.info(f"Resumed from checkpoint: {ref.name} ({ref.id})")
		return ref

	def recover(self, agent: Optional[str] = None) -> RecoveryDecision:
		"""Decide retry, replan or escalate from the failures log. Does not mutate."""
		decision = decide_recovery(
			self.store.load(),
			agent,
			retry_threshold=self.config.retry_threshold,
			escalate_threshold=self.config.escalate_threshold,
		)
		if decision.action == RecoveryAction.ESCALATE:
			logger.warning(f"Escalating {agent or 'session'}: {decision.reason}")
		else:
			logger.info(f"Recovery for {agent or 'session'}: {decision.action.value}")
		return decision
