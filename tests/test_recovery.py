"""Tests for the failure-count recovery policy."""

import pytest

from studio_orchestrator.orchestration.models import Failure, RecoveryAction, Session
from studio_orchestrator.orchestration.recovery import classify_failures, decide_recovery


def _session_with_failures(**counts: int) -> Session:
	session = Session(id="orch_test", goal="Add search")
	for agent, count in counts.items():
		for i in range(count):
			session.failures.append(Failure(agent=agent, error_message=f"attempt {i + 1} failed"))
	return session


@pytest.mark.parametrize("count,expected", [
	(0, RecoveryAction.RETRY),
	(1, RecoveryAction.RETRY),
	(2, RecoveryAction.RETRY),
	(3, RecoveryAction.REPLAN),
	(4, RecoveryAction.REPLAN),
	(5, RecoveryAction.ESCALATE),
	(9, RecoveryAction.ESCALATE),
])
def test_classify_failures(count: int, expected: RecoveryAction):
	assert classify_failures(count) == expected


def test_counts_are_scoped_per_agent():
	session = _session_with_failures(builder=2, planner=6)
	decision = decide_recovery(session, "builder")
	assert decision.action == RecoveryAction.RETRY
	assert decision.failure_count == 2

	assert decide_recovery(session, "planner").action == RecoveryAction.ESCALATE


def test_no_agent_counts_everything():
	session = _session_with_failures(builder=2, planner=2)
	decision = decide_recovery(session)
	assert decision.agent is None
	assert decision.failure_count == 4
	assert decision.action == RecoveryAction.REPLAN


def test_escalation_is_distinguishable():
	decision = decide_recovery(_session_with_failures(builder=5), "builder")
	assert decision.escalated
	assert "escalating" in decision.reason
	assert not decide_recovery(_session_with_failures(builder=4), "builder").escalated


def test_custom_thresholds_are_reported():
	session = _session_with_failures(builder=2)
	decision = decide_recovery(session, "builder", retry_threshold=2, escalate_threshold=3)
	assert decision.action == RecoveryAction.REPLAN
	assert decision.thresholds == {"retry_max": 2, "replan_max": 3}


def test_decision_does_not_mutate_session():
	session = _session_with_failures(builder=3)
	before = session.model_dump()
	decide_recovery(session, "builder")
	assert session.model_dump() == before
