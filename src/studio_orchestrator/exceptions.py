"""Studio orchestrator exception hierarchy.

All package-specific exceptions inherit from StudioError. Session-state
errors derive from OrchestrationError; input-validation errors of the
context budget manager derive from ContextBudgetError.
"""


class StudioError(Exception):
	"""Base exception for all studio-orchestrator errors."""


# -- orchestration -----------------------------------------------------------


class OrchestrationError(StudioError):
	"""Base exception for session-state errors."""


class NoActiveSessionError(OrchestrationError):
	"""Raised when a session operation runs with no current session."""

	def __init__(self) -> None:
		super().__init__("No active session. Run 'studio-orchestrator init' first.")


class SessionNotFoundError(OrchestrationError):
	"""Raised when a session id has no stored record."""

	def __init__(self, session_id: str) -> None:
		self.session_id = session_id
		super().__init__(f"Session not found: {session_id}")


class SessionStateError(OrchestrationError):
	"""Raised when a stored session record cannot be read or validated."""


class CheckpointNotFoundError(OrchestrationError):
	"""Raised when a checkpoint id or name does not resolve to a snapshot."""

	def __init__(self, checkpoint: str | None) -> None:
		self.checkpoint = checkpoint
		if checkpoint:
			super().__init__(f"Checkpoint not found: {checkpoint}")
		else:
			super().__init__("No checkpoint found")


class CheckpointExistsError(OrchestrationError):
	"""Raised when a snapshot would overwrite an existing checkpoint."""

	def __init__(self, checkpoint_id: str) -> None:
		self.checkpoint_id = checkpoint_id
		super().__init__(f"Checkpoint already written: {checkpoint_id}")


# -- context budget ----------------------------------------------------------


class ContextBudgetError(StudioError):
	"""Base exception for context budget input errors."""


class UnknownPoolError(ContextBudgetError):
	"""Raised when a budget query names a pool that does not exist."""

	def __init__(self, pool: str, valid: list[str]) -> None:
		self.pool = pool
		self.valid = valid
		super().__init__(f"Unknown pool: {pool} (valid pools: {', '.join(valid)})")


class InvalidDateError(ContextBudgetError, ValueError):
	"""Raised when a tier lookup receives an unparseable date."""

	def __init__(self, value: str) -> None:
		self.value = value
		super().__init__(f"Invalid date format: {value!r} (expected YYYY-MM-DD)")


class ContentNotFoundError(ContextBudgetError, FileNotFoundError):
	"""Raised when content to estimate or summarize cannot be located."""

	def __init__(self, path: str) -> None:
		self.path = path
		super().__init__(f"File not found: {path}")

	def __str__(self) -> str:
		return f"File not found: {self.path}"


class ContentUnreadableError(ContextBudgetError):
	"""Raised when content exists but cannot be read (permissions, I/O errors)."""

	def __init__(self, path: str, reason: str) -> None:
		self.path = path
		self.reason = reason
		super().__init__(f"Cannot read {path}: {reason}")


class CacheMissError(ContextBudgetError, KeyError):
	"""Raised when a cache key was never written."""

	def __init__(self, key: str) -> None:
		self.key = key
		super().__init__(f"Cache miss: {key}")

	def __str__(self) -> str:
		return f"Cache miss: {self.key}"


class InvalidCacheKeyError(ContextBudgetError, ValueError):
	"""Raised when a cache key is empty or contains path characters."""

	def __init__(self, key: str) -> None:
		self.key = key
		super().__init__(f"Invalid cache key: {key!r} (allowed: letters, digits, '.', '_', '-')")


class EntryNotFoundError(ContextBudgetError):
	"""Raised when a learnings file has no entry for the requested date."""

	def __init__(self, path: str, entry_date: str) -> None:
		self.path = path
		self.entry_date = entry_date
		super().__init__(f"Entry not found for date {entry_date} in {path}")
