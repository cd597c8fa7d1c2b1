from __future__ import annotations

import json
import re
from typing import Iterable, List

from pydantic import TypeAdapter, ValidationError

from .errors import DataFormatError
from .models import Role, Turn, VocabularyItem

# Placeholder the UI shows in place of a failed model reply
ERROR_REPLY_PREFIX = "Sorry,"

MIN_QUALIFYING_TURNS = 2

_vocabulary_list = TypeAdapter(List[VocabularyItem])
_FENCE_RE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)
_ROLE_LINE_RE = re.compile(r"^(user|model):[ \t]?(.*)$")


def qualifying_turns(turns: Iterable[Turn]) -> List[Turn]:
	return [
		t for t in turns
		if t.role == Role.USER or (t.role == Role.MODEL and not t.text.startswith(ERROR_REPLY_PREFIX))
	]


def split_conversation_text(text: str) -> List[Turn]:
	"""Rebuild turns from rendered ``role: text`` lines.

	A line starting with ``user:`` or ``model:`` opens a new turn; any other
	line continues the previous one. Text before the first role line is
	treated as a user turn.
	"""
	turns: List[Turn] = []
	for line in (text or "").splitlines():
		match = _ROLE_LINE_RE.match(line)
		if match:
			turns.append(Turn(role=match.group(1), text=match.group(2)))
		elif turns:
			turns[-1].text += "\n" + line
		elif line.strip():
			turns.append(Turn(role=Role.USER, text=line))
	for turn in turns:
		turn.text = turn.text.strip()
	return [t for t in turns if t.text]


def render_conversation(turns: Iterable[Turn]) -> str:
	return "\n".join(f"{t.role.value}: {t.text}" for t in turns)


def parse_vocabulary(raw: str) -> List[VocabularyItem]:
	"""Parse the model's vocabulary reply strictly.

	Only surrounding whitespace and a markdown code fence are tolerated; the
	rest must be a JSON array of ``{word, synonyms, arabicMeanings}`` objects.
	Anything else raises ``DataFormatError`` instead of returning a partial list.
	"""
	text = (raw or "").strip()
	fenced = _FENCE_RE.match(text)
	if fenced:
		text = fenced.group(1)
	try:
		data = json.loads(text)
	except ValueError as e:
		raise DataFormatError(f"vocabulary reply is not valid JSON: {e}") from e
	try:
		return _vocabulary_list.validate_python(data)
	except ValidationError as e:
		raise DataFormatError(f"vocabulary reply has the wrong shape: {e.error_count()} error(s)") from e


def dump_vocabulary(items: List[VocabularyItem]) -> str:
	return json.dumps([item.model_dump() for item in items], ensure_ascii=False)
