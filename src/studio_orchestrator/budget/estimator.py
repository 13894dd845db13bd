"""Approximate token estimation.

None of these strategies is a tokenizer. They are cheap, stable heuristics
meant for budgeting, and every one of them is monotonic: appending text to
an input never lowers its estimate.

Rough error bounds against BPE tokenizers (cl100k/o200k class) on
typical repository content:

- Prose, words x 1.3: usually within +/-25%. Underestimates text dense in
  numbers, URLs or non-English words.
- JSON, chars / 3.3: usually within +/-30%. Punctuation-heavy, so denser
  than prose per character.
- Code, chars / 4: usually within +/-35%. Underestimates minified code and
  overestimates deeply indented code.
"""

from __future__ import annotations

import math
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..exceptions import ContentNotFoundError, ContentUnreadableError


class ContentKind(str, Enum):
	"""Content families with distinct token densities."""
	PROSE = "prose"
	JSON = "json"
	CODE = "code"


PROSE_SUFFIXES = {".md", ".markdown", ".txt", ".rst"}
JSON_SUFFIXES = {".json"}


@runtime_checkable
class TokenEstimator(Protocol):
	"""Protocol for approximate token estimators."""

	def estimate(self, text: str) -> int:
		"""Return an approximate token count for text."""
		...


class WordRatioEstimator:
	"""Tokens = word count x ratio, rounded.

	Implements the TokenEstimator protocol.
	"""

	def __init__(self, ratio: float = 1.3) -> None:
		self.ratio = ratio

	def estimate(self, text: str) -> int:
		if not text:
			return 0
		return round(len(text.split()) * self.ratio)


class CharRatioEstimator:
	"""Tokens = character count / chars_per_token, floored.

	Implements the TokenEstimator protocol.
	"""

	def __init__(self, chars_per_token: float = 4.0) -> None:
		if chars_per_token <= 0:
			raise ValueError("chars_per_token must be positive")
		self.chars_per_token = chars_per_token

	def estimate(self, text: str) -> int:
		if not text:
			return 0
		return math.floor(len(text) / self.chars_per_token)


def default_estimators() -> dict[ContentKind, TokenEstimator]:
	"""Strategy per content kind."""
	return {
		ContentKind.PROSE: WordRatioEstimator(1.3),
		ContentKind.JSON: CharRatioEstimator(3.3),
		ContentKind.CODE: CharRatioEstimator(4.0),
	}


def kind_for_path(path: Path | str) -> ContentKind:
	"""Infer the content kind from a file suffix. Unknown suffixes count as code."""
	suffix = Path(path).suffix.lower()
	if suffix in PROSE_SUFFIXES:
		return ContentKind.PROSE
	if suffix in JSON_SUFFIXES:
		return ContentKind.JSON
	return ContentKind.CODE


class ContentEstimator:
	"""Dispatches estimation to the strategy registered for each content kind."""

	def __init__(self, estimators: dict[ContentKind, TokenEstimator] | None = None) -> None:
		self._estimators = default_estimators()
		if estimators:
			self._estimators.update(estimators)

	def estimate_text(self, text: str, kind: ContentKind | str = ContentKind.PROSE) -> int:
		return self._estimators[ContentKind(kind)].estimate(text)

	def estimate_file(self, path: Path | str, kind: ContentKind | str | None = None) -> int:
		"""Estimate tokens in a file.

		Raises:
			ContentNotFoundError: path does not exist or is not a regular file.
			ContentUnreadableError: path exists but cannot be read.
		"""
		file_path = Path(path)
		if not file_path.is_file():
			raise ContentNotFoundError(str(path))
		try:
			text = file_path.read_text(encoding="utf-8", errors="replace")
		except FileNotFoundError:
			raise ContentNotFoundError(str(path)) from None
		except OSError as e:
			raise ContentUnreadableError(str(path), e.strerror or str(e)) from e
		return self.estimate_text(text, kind if kind is not None else kind_for_path(file_path))
