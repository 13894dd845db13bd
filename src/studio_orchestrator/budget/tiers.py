"""
Age-based tiering of learnings entries.

Learnings files hold dated entries under headers of the form
``## YYYY-MM-DD: Title``. Each entry ages through three retention tiers:

- tier1 / full:    age <= 30 days, kept verbatim
- tier2 / summary: 31-90 days, kept as an LLM-written summary
- tier3 / index:   > 90 days, kept as a one-line reference
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from ..exceptions import ContentNotFoundError, ContentUnreadableError, EntryNotFoundError, InvalidDateError

logger = logging.getLogger(__name__)

TIER1_MAX_AGE = 30
TIER2_MAX_AGE = 90

ENTRY_HEADER = re.compile(r"^##\s(\d{4}-\d{2}-\d{2}):\s*(.*)$")
_DOMAIN_NAME = re.compile(r"^[A-Za-z0-9._-]+$")


class Tier(str, Enum):
	"""Retention tier of an aging content item."""
	TIER1 = "tier1"
	TIER2 = "tier2"
	TIER3 = "tier3"


RETENTION_MODES = {
	Tier.TIER1: "full",
	Tier.TIER2: "summary",
	Tier.TIER3: "index",
}

TOKEN_SHARE = {
	Tier.TIER1: "Full content (100% tokens)",
	Tier.TIER2: "Summary (20-30% tokens)",
	Tier.TIER3: "Index only (5% tokens)",
}


@dataclass
class TierInfo:
	"""Tier classification of one date."""
	tier: Tier
	age_days: int

	@property
	def retention_mode(self) -> str:
		return RETENTION_MODES[self.tier]

	@property
	def description(self) -> str:
		return f"{self.age_days} days old - {TOKEN_SHARE[self.tier]}"

	def to_dict(self) -> dict:
		return {
			"tier": self.tier.value,
			"retention_mode": self.retention_mode,
			"age_days": self.age_days,
			"description": self.description,
		}


def parse_entry_date(value: str) -> date:
	"""Parse YYYY-MM-DD (or a full ISO timestamp) into a date."""
	text = (value or "").strip()
	if not text:
		raise InvalidDateError(value)
	try:
		return date.fromisoformat(text)
	except ValueError:
		pass
	try:
		if text.endswith("Z"):
			text = text[:-1] + "+00:00"
		return datetime.fromisoformat(text).date()
	except ValueError:
		raise InvalidDateError(value) from None


def classify_age(
	age_days: int,
	tier1_max_age: int = TIER1_MAX_AGE,
	tier2_max_age: int = TIER2_MAX_AGE,
) -> Tier:
	"""Map an age in days to its tier. Future dates count as fresh."""
	if age_days <= tier1_max_age:
		return Tier.TIER1
	if age_days <= tier2_max_age:
		return Tier.TIER2
	return Tier.TIER3


def tier_for(
	value: str,
	today: Optional[date] = None,
	tier1_max_age: int = TIER1_MAX_AGE,
	tier2_max_age: int = TIER2_MAX_AGE,
) -> TierInfo:
	"""Classify a date string relative to today."""
	entry_date = parse_entry_date(value)
	today = today or date.today()
	age = (today - entry_date).days
	return TierInfo(tier=classify_age(age, tier1_max_age, tier2_max_age), age_days=age)


@dataclass
class LearningEntry:
	"""A dated entry found in a learnings file."""
	domain: str
	date: str
	title: str
	tier: Tier

	@property
	def ref(self) -> str:
		return f"{self.domain}:{self.date}"


@dataclass
class ScanReport:
	"""Result of scanning a learnings corpus."""
	scope: str
	source_exists: bool
	files: list[Path] = field(default_factory=list)
	entries: list[LearningEntry] = field(default_factory=list)
	tokens: int = 0
	soft_limit: int = 0
	status: str = "OK"

	def count(self, tier: Tier) -> int:
		return sum(1 for e in self.entries if e.tier == tier)

	@property
	def needs_summarization(self) -> list[str]:
		return [e.ref for e in self.entries if e.tier == Tier.TIER2]

	@property
	def needs_archiving(self) -> list[str]:
		return [e.ref for e in self.entries if e.tier == Tier.TIER3]

	@property
	def percent_of_soft(self) -> int:
		if self.soft_limit <= 0:
			return 0
		return self.tokens * 100 // self.soft_limit

	def to_dict(self) -> dict:
		return {
			"scope": self.scope,
			"source_exists": self.source_exists,
			"files": len(self.files),
			"total_entries": len(self.entries),
			"tiers": {
				Tier.TIER1.value: self.count(Tier.TIER1),
				Tier.TIER2.value: self.count(Tier.TIER2),
				Tier.TIER3.value: self.count(Tier.TIER3),
			},
			"needs_summarization": self.needs_summarization,
			"needs_archiving": self.needs_archiving,
			"tokens": self.tokens,
			"soft_limit": self.soft_limit,
			"percent": self.percent_of_soft,
			"status": self.status,
		}


def iter_entry_headers(path: Path) -> Iterator[tuple[str, str]]:
	"""Yield (date, title) for every entry header in a learnings file."""
	with open(path, encoding="utf-8", errors="replace") as f:
		for line in f:
			match = ENTRY_HEADER.match(line.rstrip("\n"))
			if match:
				yield match.group(1), match.group(2).strip()


def learnings_files(learnings_dir: Path, scope: str = "all") -> list[Path]:
	"""Files covered by a scan scope. A missing directory yields no files."""
	if not learnings_dir.is_dir():
		return []
	if scope == "all":
		return sorted(p for p in learnings_dir.glob("*.md") if p.is_file())
	if not _DOMAIN_NAME.match(scope):
		logger.warning(f"Ignoring invalid learnings domain: {scope!r}")
		return []
	candidate = learnings_dir / f"{scope}.md"
	return [candidate] if candidate.is_file() else []


def scan_learnings(
	learnings_dir: Path,
	scope: str = "all",
	today: Optional[date] = None,
	tier1_max_age: int = TIER1_MAX_AGE,
	tier2_max_age: int = TIER2_MAX_AGE,
) -> ScanReport:
	"""Classify every dated entry in scope into a tier."""
	today = today or date.today()
	source_exists = learnings_dir.is_dir()
	if not source_exists:
		logger.info(f"Learnings directory not found: {learnings_dir}")

	report = ScanReport(scope=scope, source_exists=source_exists)
	report.files = learnings_files(learnings_dir, scope)

	for path in report.files:
		for entry_date, title in iter_entry_headers(path):
			try:
				info = tier_for(entry_date, today, tier1_max_age, tier2_max_age)
			except InvalidDateError:
				logger.warning(f"Skipping entry with invalid date {entry_date} in {path.name}")
				continue
			report.entries.append(LearningEntry(
				domain=path.stem,
				date=entry_date,
				title=title,
				tier=info.tier,
			))

	return report


def extract_entry(path: Path, entry_date: str) -> tuple[str, str]:
	"""Return (title, body) of the entry dated entry_date."""
	if not path.is_file():
		raise ContentNotFoundError(str(path))

	try:
		with open(path, encoding="utf-8", errors="replace") as f:
			lines = f.read().split("\n")
	except FileNotFoundError:
		raise ContentNotFoundError(str(path)) from None
	except OSError as e:
		raise ContentUnreadableError(str(path), e.strerror or str(e)) from e

	title = ""
	body: list[str] = []
	in_entry = False
	for line in lines:
		match = ENTRY_HEADER.match(line)
		if match:
			if in_entry:
				break
			if match.group(1) == entry_date:
				in_entry = True
				title = match.group(2).strip()
			continue
		if in_entry:
			body.append(line)

	if not in_entry:
		raise EntryNotFoundError(str(path), entry_date)
	return title, "\n".join(body).strip("\n")


SUMMARY_PROMPT = """Summarize this learning entry, preserving:
1. The key insight (one sentence)
2. Pattern names mentioned
3. Code snippets (keep if < 10 lines, describe otherwise)
4. Problem-solution pairs

Original entry:
## {date}: {title}

{body}

Output format:
## {date}: {title} (summarized)
**Key Insight:** ...
**Patterns:** ...
**Ref:** {ref}#{date}
"""


def build_summary_prompt(path: Path, entry_date: str) -> str:
	"""Build the LLM prompt that compresses one entry to tier2 form."""
	title, body = extract_entry(path, entry_date)
	return SUMMARY_PROMPT.format(date=entry_date, title=title, body=body, ref=path)
