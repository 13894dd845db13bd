"""Failure-count recovery policy: retry, then replan, then escalate."""

from typing import Optional

from .models import RecoveryAction, RecoveryDecision, Session

RETRY_THRESHOLD = 3
ESCALATE_THRESHOLD = 5


def classify_failures(
	count: int,
	retry_threshold: int = RETRY_THRESHOLD,
	escalate_threshold: int = ESCALATE_THRESHOLD,
) -> RecoveryAction:
	if count < retry_threshold:
		return RecoveryAction.RETRY
	if count < escalate_threshold:
		return RecoveryAction.REPLAN
	return RecoveryAction.ESCALATE


def decide_recovery(
	session: Session,
	agent: Optional[str] = None,
	retry_threshold: int = RETRY_THRESHOLD,
	escalate_threshold: int = ESCALATE_THRESHOLD,
) -> RecoveryDecision:
	"""
	Decide how to respond to the failures recorded for an agent.

	Counts are scoped to the agent name; with no agent every failure counts.
	Reads the session only, never mutates it.

	Args:
		session: Session whose failures log is consulted
		agent: Agent name (None = all agents)
		retry_threshold: Failure count at which retrying stops
		escalate_threshold: Failure count at which a human takes over
	"""
	count = len(session.failures_for(agent))
	action = classify_failures(count, retry_threshold, escalate_threshold)

	if action == RecoveryAction.RETRY:
		reason = f"Failure count ({count}) below retry threshold ({retry_threshold})"
	elif action == RecoveryAction.REPLAN:
		reason = f"Failure count ({count}) exceeded retry threshold, attempting replan"
	else:
		reason = f"Failure count ({count}) exceeded all thresholds, escalating to user"

	return RecoveryDecision(
		agent=agent,
		action=action,
		reason=reason,
		failure_count=count,
		thresholds={"retry_max": retry_threshold, "replan_max": escalate_threshold},
	)
