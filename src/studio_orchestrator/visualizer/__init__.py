"""Visualizer package - Rich terminal views for sessions and context budgets."""

from .budget import render_budget_table, render_pool_budget, render_scan_report
from .session_status import render_session_status

__all__ = [
	"render_budget_table",
	"render_pool_budget",
	"render_scan_report",
	"render_session_status",
]
