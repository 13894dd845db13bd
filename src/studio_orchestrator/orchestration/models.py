"""
Orchestration Models - Pydantic schemas for session state.

A Session is one orchestration run from init to cleanup. Agent outputs and
handoff contexts are opaque JSON values: their shape is a contract between
the producing and the consuming agent, not something validated here.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


def now_iso() -> str:
	return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class SessionMode(str, Enum):
	"""Whether routing decisions are auto-applied or surfaced for confirmation."""
	IMPLICIT = "implicit"
	EXPLICIT = "explicit"


class SessionStatus(str, Enum):
	"""Lifecycle status of a session."""
	INITIALIZING = "initializing"
	ROUTING = "routing"
	EXECUTING = "executing"
	PAUSED = "paused"
	RECOVERING = "recovering"
	COMPLETED = "completed"
	ABORTED = "aborted"


class Workflow(str, Enum):
	"""High-level plan shape selected by routing."""
	BUILD_ONLY = "build_only"
	PLAN_THEN_BUILD = "plan_then_build"
	MULTI_TASK = "multi_task"
	DECOMPOSE_FIRST = "decompose_first"


class AgentStatus(str, Enum):
	"""Status of an agent within a session."""
	PENDING = "pending"
	ACTIVE = "active"
	COMPLETED = "completed"
	FAILED = "failed"


class RecoveryAction(str, Enum):
	"""Orchestrator response to accumulated agent failures."""
	RETRY = "retry"
	REPLAN = "replan"
	ESCALATE = "escalate"


class SequenceEntry(BaseModel):
	"""One step of the routed agent sequence."""
	agent: str
	order: int
	status: AgentStatus = Field(default=AgentStatus.PENDING)
	started_at: Optional[str] = Field(default=None)
	completed_at: Optional[str] = Field(default=None)


class Routing(BaseModel):
	"""Routing decision recorded on the session."""
	analyzed_goal: Optional[str] = Field(default=None)
	workflow: Optional[Workflow] = Field(default=None)
	confidence: float = Field(default=0.0, ge=0.0, le=1.0)
	agent_sequence: list[SequenceEntry] = Field(default_factory=list)

	def entry_for(self, agent: str) -> Optional[SequenceEntry]:
		for entry in self.agent_sequence:
			if entry.agent == agent:
				return entry
		return None


class AgentState(BaseModel):
	"""Accumulated state of one agent; updated in place across retries."""
	agent_name: str
	status: AgentStatus = Field(default=AgentStatus.PENDING)
	output: Any = Field(default=None, description="Opaque structured agent output")
	started_at: Optional[str] = Field(default=None)
	completed_at: Optional[str] = Field(default=None)
	invocation_count: int = Field(default=0)
	context_used: int = Field(default=0, description="Approximate tokens consumed")


class Handoff(BaseModel):
	"""A context package passed from one agent to another."""
	from_agent: str
	to_agent: str
	context_passed: Any = Field(default_factory=dict)
	timestamp: str = Field(default_factory=now_iso)
	reason: str = Field(default="workflow_sequence")


class CheckpointRef(BaseModel):
	"""Reference to a separately stored, write-once session snapshot."""
	id: str
	name: str
	timestamp: str = Field(default_factory=now_iso)
	after_agent: Optional[str] = Field(default=None)


class Failure(BaseModel):
	"""An agent failure report."""
	agent: str
	error_message: str
	timestamp: str = Field(default_factory=now_iso)


class Session(BaseModel):
	"""Full state of one orchestration run."""
	id: str = Field(frozen=True)
	mode: SessionMode = Field(default=SessionMode.IMPLICIT)
	status: SessionStatus = Field(default=SessionStatus.INITIALIZING)
	goal: str = Field(frozen=True)
	created_at: str = Field(default_factory=now_iso)
	updated_at: str = Field(default_factory=now_iso)

	routing: Routing = Field(default_factory=Routing)
	agent_states: list[AgentState] = Field(default_factory=list)
	handoffs: list[Handoff] = Field(default_factory=list)
	checkpoints: list[CheckpointRef] = Field(default_factory=list)
	failures: list[Failure] = Field(default_factory=list)

	def agent_state(self, agent: str) -> Optional[AgentState]:
		for state in self.agent_states:
			if state.agent_name == agent:
				return state
		return None

	def failures_for(self, agent: Optional[str] = None) -> list[Failure]:
		if agent is None:
			return list(self.failures)
		return [f for f in self.failures if f.agent == agent]

	def latest_handoff_to(self, agent: str) -> Optional[Handoff]:
		for handoff in reversed(self.handoffs):
			if handoff.to_agent == agent:
				return handoff
		return None

	def last_completed_agent(self) -> Optional[str]:
		completed = [e.agent for e in self.routing.agent_sequence if e.status == AgentStatus.COMPLETED]
		return completed[-1] if completed else None

	def find_checkpoint(self, ref: Optional[str] = None) -> Optional[CheckpointRef]:
		"""Resolve a checkpoint by id, then by name (latest wins); None means latest."""
		if not self.checkpoints:
			return None
		if ref is None:
			return self.checkpoints[-1]
		for checkpoint in self.checkpoints:
			if checkpoint.id == ref:
				return checkpoint
		for checkpoint in reversed(self.checkpoints):
			if checkpoint.name == ref:
				return checkpoint
		return None


class RoutingDecision(BaseModel):
	"""Output of the router: workflow, confidence and agent order."""
	workflow: Workflow
	confidence: float = Field(ge=0.0, le=1.0)
	agents: list[str]
	signal: str = Field(default="default", description="Which rule matched")


class RecoveryDecision(BaseModel):
	"""Output of the recovery engine for one agent."""
	agent: Optional[str] = Field(default=None)
	action: RecoveryAction
	reason: str
	failure_count: int
	thresholds: dict[str, int] = Field(default_factory=dict)

	@property
	def escalated(self) -> bool:
		return self.action == RecoveryAction.ESCALATE
