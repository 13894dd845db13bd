"""Context budget package - token estimation, pools, tiers and summary cache."""

from .cache import SummaryCache
from .estimator import (
	CharRatioEstimator,
	ContentEstimator,
	ContentKind,
	TokenEstimator,
	WordRatioEstimator,
)
from .pools import PoolLimits, PoolName, PoolReport, PoolStatus
from .tiers import ScanReport, Tier, TierInfo

__all__ = [
	"CharRatioEstimator",
	"ContentEstimator",
	"ContentKind",
	"PoolLimits",
	"PoolName",
	"PoolReport",
	"PoolStatus",
	"ScanReport",
	"SummaryCache",
	"Tier",
	"TierInfo",
	"TokenEstimator",
	"WordRatioEstimator",
]
