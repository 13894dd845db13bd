"""Tests for keyword-priority goal routing."""

import pytest

from studio_orchestrator.orchestration.models import Workflow
from studio_orchestrator.orchestration.router import route_goal


class TestRouteGoal:
	def test_existing_plan_wins(self):
		decision = route_goal("Refactor the auth module", has_existing_plan=True)
		assert decision.workflow == Workflow.BUILD_ONLY
		assert decision.confidence == 1.0
		assert decision.agents == ["builder"]

	@pytest.mark.parametrize("goal", [
		"Fix the login redirect",
		"Bug in checkout totals",
		"typo on the landing page",
		"Handle the ERROR banner",
		"Fixing flaky pagination",
	])
	def test_fix_signals(self, goal: str):
		decision = route_goal(goal)
		assert decision.workflow == Workflow.BUILD_ONLY
		assert decision.confidence == 0.7
		assert decision.agents == ["builder"]

	@pytest.mark.parametrize("goal", [
		"Add user authentication",
		"Create a settings page",
		"Implement rate limiting",
		"Build the export pipeline",
	])
	def test_creation_signals(self, goal: str):
		decision = route_goal(goal)
		assert decision.workflow == Workflow.PLAN_THEN_BUILD
		assert decision.confidence == 0.85
		assert decision.agents == ["planner", "builder"]

	@pytest.mark.parametrize("goal", [
		"Refactor the billing service",
		"Reorganize the components folder",
		"Restructure state management",
	])
	def test_refactor_signals(self, goal: str):
		decision = route_goal(goal)
		assert decision.workflow == Workflow.PLAN_THEN_BUILD
		assert decision.confidence == 0.9
		assert decision.agents == ["planner", "builder"]

	def test_refactor_beats_fix(self):
		assert route_goal("Refactor to fix the memory leak").confidence == 0.9

	def test_creation_beats_fix(self):
		decision = route_goal("Add a fix for the date picker")
		assert decision.workflow == Workflow.PLAN_THEN_BUILD
		assert decision.confidence == 0.85

	def test_ambiguous_goal_defaults_to_planning(self):
		decision = route_goal("Make the dashboard nicer")
		assert decision.workflow == Workflow.PLAN_THEN_BUILD
		assert decision.confidence == 0.5
		assert decision.agents == ["planner", "builder"]
		assert decision.signal == "default"

	@pytest.mark.parametrize("goal, confidence, signal", [
		("Hotfix the login crash", 0.7, "fix"),
		("Debug the checkout page", 0.7, "fix"),
		("Reorganized modules need a pass", 0.9, "refactor"),
		("REBUILD the search index", 0.85, "creation"),
	])
	def test_keyword_inside_word_matches(self, goal: str, confidence: float, signal: str):
		decision = route_goal(goal)
		assert decision.confidence == confidence
		assert decision.signal == signal

	def test_routing_is_deterministic(self):
		goal = "Implement dark mode"
		assert route_goal(goal) == route_goal(goal)

	def test_empty_goal(self):
		assert route_goal("").workflow == Workflow.PLAN_THEN_BUILD
