"""Field normalization shared by the source mappers and the store layer."""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

_NON_DIGIT_RE = re.compile(r"\D")
_ISO_DATE_RE = re.compile(r"^\s*(\d{4})(?:[-/](\d{1,2})(?:[-/](\d{1,2}))?)?")
_WS_RE = re.compile(r"\s+")
_TAG_RE = re.compile(r"<[^>]+>")

_MONTHS = {
	"jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
	"jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

DateParts = Tuple[Optional[int], Optional[int], Optional[int]]


def normalize_issn(issn: Optional[str]) -> str:
	"""Normalize an ISSN to ``NNNN-NNNN``.

	Non-digit characters are stripped; if exactly 8 digits remain the
	canonical hyphenated form is returned. Anything else falls back to the
	trimmed, space-removed, upper-cased raw value (ISSNs ending in ``X``
	therefore keep their original spelling).
	"""
	if not issn or not issn.strip():
		return ""
	digits = _NON_DIGIT_RE.sub("", issn)
	if len(digits) == 8:
		return f"{digits[:4]}-{digits[4:]}".upper()
	return issn.replace(" ", "").strip().upper()


def to_int(value) -> Optional[int]:
	if value is None:
		return None
	try:
		return int(str(value).strip())
	except (TypeError, ValueError):
		return None


def parse_month(value) -> Optional[int]:
	"""Month from ``"3"``, ``"03"`` or ``"Mar"``; None when absent or invalid."""
	if value is None:
		return None
	text = str(value).strip()
	if not text:
		return None
	month = to_int(text)
	if month is None:
		month = _MONTHS.get(text[:3].lower())
	if month is None or not 1 <= month <= 12:
		return None
	return month


def parse_day(value) -> Optional[int]:
	day = to_int(value)
	if day is None or not 1 <= day <= 31:
		return None
	return day


def date_parts(year=None, month=None, day=None) -> DateParts:
	"""Range-checked (year, month, day); missing components stay None."""
	y = to_int(year)
	if y is not None and y <= 0:
		y = None
	return y, parse_month(month), parse_day(day)


def parse_date_parts(value: Optional[str]) -> DateParts:
	"""Split an ISO-like date (``2021``, ``2021-05``, ``2021-05-03T10:00:00Z``)."""
	if not value:
		return None, None, None
	m = _ISO_DATE_RE.match(str(value))
	if not m:
		return None, None, None
	return date_parts(m.group(1), m.group(2), m.group(3))


def clean_text(text: Optional[str]) -> str:
	"""Strip markup tags and collapse whitespace."""
	if not text:
		return ""
	text = _TAG_RE.sub("", str(text))
	return _WS_RE.sub(" ", text).strip()


def normalize_title(title: Optional[str]) -> str:
	"""Title identity key: trimmed, lower-cased, spaces removed."""
	if not title:
		return ""
	return title.strip().lower().replace(" ", "")


def name_key(name: Optional[str]) -> str:
	"""Case-insensitive identity key for author, category and portal names."""
	return (name or "").strip().lower()


def is_blank(value) -> bool:
	return value is None or (isinstance(value, str) and not value.strip())


class AuthorCache:
	"""Per-call author registry.

	Returns one canonical spelling per case-insensitive name so the same
	person is not attached twice within a single adapter call.
	"""

	def __init__(self) -> None:
		self._names: Dict[str, str] = {}

	def resolve(self, name: Optional[str]) -> Optional[str]:
		full = (name or "").strip()
		if not full:
			return None
		key = name_key(full)
		if key not in self._names:
			self._names[key] = full
		return self._names[key]

	def collect(self, names) -> List[str]:
		"""Resolve names, dropping blanks and repeats within one record."""
		out: List[str] = []
		seen = set()
		for raw in names:
			resolved = self.resolve(raw)
			if resolved is None:
				continue
			key = name_key(resolved)
			if key in seen:
				continue
			seen.add(key)
			out.append(resolved)
		return out

	def __len__(self) -> int:
		return len(self._names)
