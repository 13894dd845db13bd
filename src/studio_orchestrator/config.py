"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

from .budget.pools import DEFAULT_POOL_LIMITS, PoolLimits

APP_NAME = "studio-orchestrator"


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Project-local state
	studio_dir: Path = field(default_factory=lambda: Path(".studio"))
	learnings_dir: Path = field(default_factory=lambda: Path("studio") / "learnings")
	project_root: Path = field(default_factory=lambda: Path("."))

	# Budget and recovery policy
	pool_limits: dict[str, PoolLimits] = field(default_factory=lambda: dict(DEFAULT_POOL_LIMITS))
	tier1_max_age: int = 30
	tier2_max_age: int = 90
	retry_threshold: int = 3
	escalate_threshold: int = 5

	# Derived paths
	config_file: Path = field(init=False)
	log_dir: Path = field(init=False)
	orchestration_dir: Path = field(init=False)
	cache_dir: Path = field(init=False)
	context7_dir: Path = field(init=False)
	tasks_dir: Path = field(init=False)
	backlog_file: Path = field(init=False)

	def __post_init__(self) -> None:
		self.config_file = self.config_dir / "config.toml"
		self.log_dir = self.data_dir / "logs"
		self.orchestration_dir = self.studio_dir / "orchestration"
		self.cache_dir = self.studio_dir / ".cache" / "summaries"
		self.context7_dir = self.studio_dir / ".cache" / "context7"
		self.tasks_dir = self.studio_dir / "tasks"
		self.backlog_file = self.studio_dir / "backlog.json"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


_PATH_FIELDS = {"config_dir", "data_dir", "studio_dir", "learnings_dir", "project_root"}
_INT_FIELDS = {"tier1_max_age", "tier2_max_age", "retry_threshold", "escalate_threshold"}


def _apply_env_overrides(config: Config) -> Config:
	"""Apply STUDIO_* environment variable overrides."""
	env_map = {
		"STUDIO_ORCHESTRATOR_CONFIG_DIR": "config_dir",
		"STUDIO_ORCHESTRATOR_DATA_DIR": "data_dir",
		"STUDIO_DIR": "studio_dir",
		"LEARNINGS_DIR": "learnings_dir",
		"STUDIO_PROJECT_ROOT": "project_root",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, Path(val))
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_pool_table(config: Config, pools: dict) -> None:
	"""Merge a [pools.<name>] table over the default limits."""
	for name, limits in pools.items():
		if not isinstance(limits, dict):
			continue
		current = config.pool_limits.get(name, PoolLimits(0, 0))
		config.pool_limits[name] = PoolLimits(
			soft_limit=int(limits.get("soft_limit", current.soft_limit)),
			hard_limit=int(limits.get("hard_limit", current.hard_limit)),
		)


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	for key, val in data.items():
		if key == "pools":
			_apply_pool_table(config, val)
		elif key in _PATH_FIELDS:
			setattr(config, key, Path(os.path.expanduser(val)))
		elif key in _INT_FIELDS:
			setattr(config, key, int(val))

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	# config_dir may itself come from the environment
	config_dir = os.getenv("STUDIO_ORCHESTRATOR_CONFIG_DIR")
	if config_dir:
		config.config_dir = Path(config_dir)
		config.__post_init__()
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config
