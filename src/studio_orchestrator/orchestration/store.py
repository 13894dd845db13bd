"""
Session Store - file-backed persistence for orchestration sessions.

Layout under the orchestration root:

	.current                      pointer: id of the active session
	.lock                         advisory lock guarding every read-modify-write
	<session_id>/state.json       full Session record
	<session_id>/<cp_id>.json     write-once checkpoint snapshot

Every write goes to a temp file first and is renamed over the target, so a
process killed mid-write leaves the previous version intact.
"""

import json
import logging
import secrets
import shutil
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from pydantic import ValidationError

from ..exceptions import (
	CheckpointExistsError,
	CheckpointNotFoundError,
	NoActiveSessionError,
	SessionNotFoundError,
	SessionStateError,
)
from ..fileio import FileLock, atomic_write_json, atomic_write_text
from .models import Session, SessionMode, now_iso

logger = logging.getLogger(__name__)

STATE_FILE = "state.json"
POINTER_FILE = ".current"
LOCK_FILE = ".lock"


def new_session_id() -> str:
	"""Time-derived id; lexicographic order equals creation order."""
	stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
	return f"orch_{stamp}_{secrets.token_hex(2)}"


class SessionStore:
	"""
	Persistence for sessions plus the current-session handle.

	By default the current session is whatever the pointer file names. Passing
	session_id (or pinned=True) pins the store to one session instead: a pinned
	store follows only the sessions it created or was given, so independent
	stores can drive separate sessions under one root.

	Usage:
		store = SessionStore(config.orchestration_dir)
		session = store.create("Add user authentication", SessionMode.IMPLICIT)
		with store.transaction() as session:
			session.status = SessionStatus.EXECUTING
	"""

	def __init__(self, root: Path, session_id: Optional[str] = None, pinned: bool = False):
		self.root = Path(root)
		self._pinned = pinned or session_id is not None
		self._session_id = session_id

	@property
	def pointer_file(self) -> Path:
		return self.root / POINTER_FILE

	@property
	def lock_file(self) -> Path:
		return self.root / LOCK_FILE

	def session_dir(self, session_id: str) -> Path:
		return self.root / session_id

	def state_path(self, session_id: str) -> Path:
		return self.session_dir(session_id) / STATE_FILE

	def checkpoint_path(self, session_id: str, checkpoint_id: str) -> Path:
		return self.session_dir(session_id) / f"{checkpoint_id}.json"

	# ==================== Current pointer ====================

	def current_id(self) -> Optional[str]:
		"""Id of the current session, or None when there is none."""
		if self._pinned:
			return self._session_id
		try:
			value = self.pointer_file.read_text(encoding="utf-8").strip()
		except FileNotFoundError:
			return None
		return value or None

	def require_current_id(self) -> str:
		session_id = self.current_id()
		if not session_id:
			raise NoActiveSessionError()
		return session_id

	def _set_current(self, session_id: str) -> None:
		if self._pinned:
			self._session_id = session_id
		atomic_write_text(self.pointer_file, session_id + "\n")

	def _clear_current(self, session_id: str) -> None:
		if self._pinned and self._session_id == session_id:
			self._session_id = None
		try:
			if self.pointer_file.read_text(encoding="utf-8").strip() == session_id:
				self.pointer_file.unlink()
		except FileNotFoundError:
			pass

	# ==================== Session records ====================

	def _read(self, path: Path) -> Session:
		try:
			with open(path, encoding="utf-8") as f:
				data = json.load(f)
		except json.JSONDecodeError as e:
			raise SessionStateError(f"Corrupt session record {path}: {e}") from e
		try:
			return Session.model_validate(data)
		except ValidationError as e:
			raise SessionStateError(f"Invalid session record {path}: {e}") from e

	def _write(self, path: Path, session: Session) -> None:
		# Re-validate: pydantic does not check plain attribute assignment
		data = session.model_dump(mode="json")
		try:
			Session.model_validate(data)
		except ValidationError as e:
			raise SessionStateError(f"Refusing to write invalid session {session.id}: {e}") from e
		atomic_write_json(path, data)

	def create(self, goal: str, mode: SessionMode = SessionMode.IMPLICIT) -> Session:
		"""Create a new session record and make it current."""
		with FileLock(self.lock_file):
			session_id = new_session_id()
			while self.session_dir(session_id).exists():
				session_id = new_session_id()
			session = Session(id=session_id, goal=goal, mode=mode)
			self._write(self.state_path(session_id), session)
			self._set_current(session_id)
		logger.info(f"Session created: {session_id}")
		return session

	def load(self, session_id: Optional[str] = None) -> Session:
		"""Load a session (default: current) without taking the lock."""
		session_id = session_id or self.require_current_id()
		path = self.state_path(session_id)
		try:
			return self._read(path)
		except FileNotFoundError:
			raise SessionNotFoundError(session_id) from None

	@contextmanager
	def transaction(self) -> Iterator[Session]:
		"""Lock, load the current session, yield it for mutation, then write it back.

		Nothing is written if the body raises.
		"""
		with FileLock(self.lock_file):
			session = self.load()
			session.updated_at = now_iso()
			yield session
			self._write(self.state_path(session.id), session)

	def delete(self, session_id: Optional[str] = None) -> Optional[str]:
		"""Remove a session (default: current). Returns the id removed, or None."""
		with FileLock(self.lock_file):
			session_id = session_id or self.current_id()
			if not session_id:
				return None
			shutil.rmtree(self.session_dir(session_id), ignore_errors=True)
			self._clear_current(session_id)
		logger.info(f"Session removed: {session_id}")
		return session_id

	# ==================== Checkpoints ====================

	def checkpoint_exists(self, session_id: str, checkpoint_id: str) -> bool:
		return self.checkpoint_path(session_id, checkpoint_id).exists()

	def write_checkpoint(self, session: Session, checkpoint_id: str) -> Path:
		"""Write a snapshot of session. Caller must hold the store lock."""
		path = self.checkpoint_path(session.id, checkpoint_id)
		if path.exists():
			raise CheckpointExistsError(checkpoint_id)
		self._write(path, session)
		return path

	def load_checkpoint(self, checkpoint_id: str, session_id: Optional[str] = None) -> Session:
		session_id = session_id or self.require_current_id()
		path = self.checkpoint_path(session_id, checkpoint_id)
		try:
			return self._read(path)
		except FileNotFoundError:
			raise CheckpointNotFoundError(checkpoint_id) from None
