"""Keyword-priority goal routing.

Rules are evaluated in order and the first match wins. A goal matches a rule
when it contains any of its keywords, ignoring case, so "Hotfix" and "Debug"
are fix signals.
"""

from .models import RoutingDecision, Workflow

PLANNER = "planner"
BUILDER = "builder"

REFACTOR_SIGNALS = ("refactor", "reorganize", "restructure")
CREATION_SIGNALS = ("add", "create", "implement", "build")
FIX_SIGNALS = ("fix", "bug", "typo", "error")

# (signal name, keywords, workflow, confidence, agents)
ROUTING_RULES = [
	("refactor", REFACTOR_SIGNALS, Workflow.PLAN_THEN_BUILD, 0.9, [PLANNER, BUILDER]),
	("creation", CREATION_SIGNALS, Workflow.PLAN_THEN_BUILD, 0.85, [PLANNER, BUILDER]),
	("fix", FIX_SIGNALS, Workflow.BUILD_ONLY, 0.7, [BUILDER]),
]


def _contains_any(goal: str, keywords: tuple[str, ...]) -> bool:
	lowered = goal.lower()
	return any(keyword in lowered for keyword in keywords)


def route_goal(goal: str, has_existing_plan: bool = False) -> RoutingDecision:
	"""Classify a goal into a workflow. Pure: same inputs, same decision."""
	if has_existing_plan:
		return RoutingDecision(
			workflow=Workflow.BUILD_ONLY,
			confidence=1.0,
			agents=[BUILDER],
			signal="existing_plan",
		)

	for name, keywords, workflow, confidence, agents in ROUTING_RULES:
		if _contains_any(goal or "", keywords):
			return RoutingDecision(
				workflow=workflow,
				confidence=confidence,
				agents=list(agents),
				signal=name,
			)

	# Ambiguous goals take the more thorough path
	return RoutingDecision(
		workflow=Workflow.PLAN_THEN_BUILD,
		confidence=0.5,
		agents=[PLANNER, BUILDER],
		signal="default",
	)
