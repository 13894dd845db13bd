"""Orchestration package - session state machine for multi-agent runs."""

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
	Workflow,
)
from .recovery import decide_recovery
from .router import route_goal
from .service import Orchestrator
from .store import SessionStore

__all__ = [
	"AgentState",
	"AgentStatus",
	"CheckpointRef",
	"Failure",
	"Handoff",
	"Orchestrator",
	"RecoveryAction",
	"RecoveryDecision",
	"Routing",
	"RoutingDecision",
	"SequenceEntry",
	"Session",
	"SessionMode",
	"SessionStatus",
	"SessionStore",
	"Workflow",
	"decide_recovery",
	"route_goal",
]
