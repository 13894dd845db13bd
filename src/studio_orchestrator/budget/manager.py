"""
Context Budget Manager - bounds how much material is held active at once.

Pool usage is never stored: every query re-estimates the pool's current
member files, so the numbers always reflect what is on disk right now.
"""

import logging
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..exceptions import NoActiveSessionError, SessionNotFoundError
from ..orchestration.store import SessionStore
from .cache import SummaryCache
from .estimator import ContentEstimator, ContentKind
from .pools import (
	DEFAULT_POOL_LIMITS,
	POOL_DESCRIPTIONS,
	PoolLimits,
	PoolName,
	PoolReport,
	PoolStatus,
	classify_usage,
	pool_names,
	resolve_pool,
)
from .tiers import ScanReport, TierInfo, build_summary_prompt, scan_learnings, tier_for

if TYPE_CHECKING:
	from ..config import Config

logger = logging.getLogger(__name__)

ALL_POOLS = "all"


def _sorted_files(paths) -> list[Path]:
	return sorted(p for p in paths if p.is_file())


class ContextBudgetManager:
	"""
	Estimation, pool budgets, tiering, scans and the summary cache.

	Usage:
		manager = ContextBudgetManager(config)
		manager.budget("learnings")
		manager.tier("2026-08-01")
		manager.cache_set("frontend-2026-08-01", summary)
	"""

	def __init__(
		self,
		config: "Config",
		store: Optional[SessionStore] = None,
		estimator: Optional[ContentEstimator] = None,
	):
		self.config = config
		self.store = store or SessionStore(config.orchestration_dir)
		self.estimator = estimator or ContentEstimator()
		self.cache = SummaryCache(config.cache_dir)

	# ==================== Estimation ====================

	def estimate(self, path: Path | str, kind: ContentKind | str | None = None) -> int:
		"""Approximate tokens in a file; kind defaults to the one implied by its suffix."""
		return self.estimator.estimate_file(path, kind)

	def estimate_text(self, text: str, kind: ContentKind | str = ContentKind.PROSE) -> int:
		return self.estimator.estimate_text(text, kind)

	# ==================== Pools ====================

	def limits_for(self, pool: str) -> PoolLimits:
		name = resolve_pool(pool).value
		return self.config.pool_limits.get(name, DEFAULT_POOL_LIMITS[name])

	def pool_members(self, pool: str) -> list[Path]:
		"""Files currently counted against a pool. The working pool has none."""
		name = resolve_pool(pool)
		config = self.config

		if name == PoolName.LEARNINGS:
			if not config.learnings_dir.is_dir():
				return []
			return _sorted_files(config.learnings_dir.glob("*.md"))

		if name == PoolName.PLANS:
			if not config.tasks_dir.is_dir():
				return []
			return _sorted_files(config.tasks_dir.glob("*/plan.json"))

		if name == PoolName.BACKLOG:
			return [config.backlog_file] if config.backlog_file.is_file() else []

		if name == PoolName.RESERVED:
			root = config.project_root
			return (
				_sorted_files(root.glob("playbooks/*/SKILL.md"))
				+ _sorted_files(root.glob("agents/*.yaml"))
			)

		if name == PoolName.CONTEXT7:
			if not config.context7_dir.is_dir():
				return []
			return _sorted_files(config.context7_dir.rglob("*"))

		return []

	def _working_usage(self) -> int:
		try:
			session = self.store.load()
		except (NoActiveSessionError, SessionNotFoundError):
			return 0
		return sum(state.context_used for state in session.agent_states)

	def pool_usage(self, pool: str) -> int:
		"""Sum of estimates over the pool's members, computed now."""
		name = resolve_pool(pool)
		if name == PoolName.WORKING:
			return self._working_usage()
		return sum(self.estimate(path) for path in self.pool_members(name.value))

	def pool_report(self, pool: str) -> PoolReport:
		name = resolve_pool(pool).value
		limits = self.limits_for(name)
		used = self.pool_usage(name)
		return PoolReport(
			pool=name,
			used=used,
			soft_limit=limits.soft_limit,
			hard_limit=limits.hard_limit,
			status=classify_usage(used, limits),
		)

	def pool_reports(self) -> list[PoolReport]:
		return [self.pool_report(name) for name in pool_names()]

	def budget_all(self) -> dict:
		"""Every pool's report plus totals across pools."""
		reports = self.pool_reports()
		total_used = sum(r.used for r in reports)
		total_soft = sum(r.soft_limit for r in reports)
		return {
			"pools": [r.to_dict() for r in reports],
			"total_used": total_used,
			"total_soft": total_soft,
			"percent": total_used * 100 // total_soft if total_soft else 0,
		}

	def budget(self, pool: str = ALL_POOLS) -> dict:
		"""
		Budget for one pool, or for every pool when pool is "all".

		Raises:
			UnknownPoolError: pool is neither "all" nor a known pool name.
		"""
		if pool.strip().lower() == ALL_POOLS:
			return self.budget_all()
		report = self.pool_report(pool)
		if report.status != PoolStatus.OK:
			logger.warning(f"Pool {report.pool} at {report.percent_of_soft}% of soft limit ({report.status.value})")
		data = report.to_dict()
		data["description"] = POOL_DESCRIPTIONS[report.pool]
		return data

	# ==================== Tiers & scans ====================

	def tier(self, value: str, today: Optional[date] = None) -> TierInfo:
		return tier_for(value, today, self.config.tier1_max_age, self.config.tier2_max_age)

	def scan(self, scope: str = "all", today: Optional[date] = None) -> ScanReport:
		"""Tier every learnings entry in scope. A missing learnings directory scans as empty."""
		report = scan_learnings(
			self.config.learnings_dir,
			scope,
			today,
			self.config.tier1_max_age,
			self.config.tier2_max_age,
		)
		limits = self.limits_for(PoolName.LEARNINGS.value)
		report.tokens = sum(self.estimate(path) for path in report.files)
		report.soft_limit = limits.soft_limit
		report.status = classify_usage(report.tokens, limits).value
		return report

	def summarize_prompt(self, path: Path | str, entry_date: str) -> str:
		return build_summary_prompt(Path(path), entry_date)

	def optimize(self, pool: str = PoolName.LEARNINGS.value) -> dict:
		"""Flag entries that should move down a tier. Only the learnings pool is supported."""
		name = resolve_pool(pool)
		if name != PoolName.LEARNINGS:
			logger.warning(f"Optimization not implemented for pool: {name.value}")
			return {"pool": name.value, "supported": False}

		report = self.scan("all")
		return {
			"pool": name.value,
			"supported": True,
			"summarize": report.needs_summarization,
			"archive": report.needs_archiving,
			"scan": report.to_dict(),
		}

	# ==================== Cache ====================

	def cache_set(self, key: str, content: str) -> Path:
		return self.cache.set(key, content)

	def cache_get(self, key: str) -> str:
		return self.cache.get(key)
