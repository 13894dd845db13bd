"""Context pools: named budget categories with soft/hard limits."""

from dataclasses import dataclass
from enum import Enum

from ..exceptions import UnknownPoolError

# Fraction of the soft limit at which a pool starts warning
WARNING_RATIO = 0.80
# Fraction of the hard limit at which a pool is critical
CRITICAL_RATIO = 0.95


class PoolName(str, Enum):
	"""Known context pools."""
	RESERVED = "reserved"
	LEARNINGS = "learnings"
	BACKLOG = "backlog"
	PLANS = "plans"
	CONTEXT7 = "context7"
	WORKING = "working"


class PoolStatus(str, Enum):
	"""Pressure level of a pool."""
	OK = "OK"
	WARNING = "WARNING"
	CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class PoolLimits:
	"""Soft and hard limits of a pool, in approximate tokens."""
	soft_limit: int
	hard_limit: int


DEFAULT_POOL_LIMITS: dict[str, PoolLimits] = {
	PoolName.RESERVED.value: PoolLimits(30000, 35000),
	PoolName.LEARNINGS.value: PoolLimits(20000, 25000),
	PoolName.BACKLOG.value: PoolLimits(15000, 20000),
	PoolName.PLANS.value: PoolLimits(30000, 35000),
	PoolName.CONTEXT7.value: PoolLimits(25000, 30000),
	PoolName.WORKING.value: PoolLimits(30000, 40000),
}

POOL_DESCRIPTIONS: dict[str, str] = {
	PoolName.RESERVED.value: "System prompts, playbooks, agent definitions",
	PoolName.LEARNINGS.value: "Project learnings",
	PoolName.BACKLOG.value: "Epic/Feature/Task hierarchy",
	PoolName.PLANS.value: "Current plan details",
	PoolName.CONTEXT7.value: "Cached external documentation",
	PoolName.WORKING.value: "Agent workspace",
}


def pool_names() -> list[str]:
	"""All pool names in display order."""
	return [p.value for p in PoolName]


def resolve_pool(name: str) -> PoolName:
	"""Map a pool name to its enum member, raising UnknownPoolError otherwise."""
	try:
		return PoolName(name.strip().lower())
	except ValueError:
		raise UnknownPoolError(name, pool_names()) from None


def classify_usage(used: int, limits: PoolLimits) -> PoolStatus:
	"""CRITICAL at 95% of the hard limit, WARNING at 80% of the soft limit."""
	if limits.hard_limit > 0 and used >= limits.hard_limit * CRITICAL_RATIO:
		return PoolStatus.CRITICAL
	if limits.soft_limit > 0 and used >= limits.soft_limit * WARNING_RATIO:
		return PoolStatus.WARNING
	return PoolStatus.OK


@dataclass
class PoolReport:
	"""Usage of one pool at query time."""
	pool: str
	used: int
	soft_limit: int
	hard_limit: int
	status: PoolStatus

	@property
	def percent_of_soft(self) -> int:
		if self.soft_limit <= 0:
			return 0
		return self.used * 100 // self.soft_limit

	def to_dict(self) -> dict:
		return {
			"pool": self.pool,
			"used": self.used,
			"soft_limit": self.soft_limit,
			"hard_limit": self.hard_limit,
			"percent": self.percent_of_soft,
			"status": self.status.value,
		}
