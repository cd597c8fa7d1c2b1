from __future__ import annotations
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Role(str, Enum):
	USER = "user"
	MODEL = "model"


class Difficulty(str, Enum):
	BEGINNER = "Beginner"
	INTERMEDIATE = "Intermediate"
	ADVANCED = "Advanced"


class Turn(BaseModel):
	role: Role
	text: str

	@model_validator(mode="before")
	@classmethod
	def _from_content(cls, data: Any) -> Any:
		# Accept Gemini Content shape {"role", "parts": [{"text"}]} as well
		if isinstance(data, dict) and "text" not in data and "parts" in data:
			parts = data.get("parts") or []
			text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
			return {"role": data.get("role"), "text": text}
		return data


class VocabularyItem(BaseModel):
	word: str
	synonyms: List[str]
	arabicMeanings: List[str]


class TaskKind(str, Enum):
	SEND_MESSAGE = "SendMessage"
	EXTRACT_VOCABULARY = "ExtractVocabulary"
	GRAMMAR_EXPLANATION = "GrammarExplanation"
	VALIDATE_CHALLENGE_SENTENCE = "ValidateChallengeSentence"
	WORD_ANALYSIS = "WordAnalysis"
	WORD_FAMILY = "WordFamily"


# Tags sent by the existing browser client
_CLIENT_TAGS: Dict[str, TaskKind] = {
	"sendMessage": TaskKind.SEND_MESSAGE,
	"extractVocabulary": TaskKind.EXTRACT_VOCABULARY,
	"getGrammarExplanation": TaskKind.GRAMMAR_EXPLANATION,
	"validateChallengeSentence": TaskKind.VALIDATE_CHALLENGE_SENTENCE,
	"getWordAnalysis": TaskKind.WORD_ANALYSIS,
	"getWordFamily": TaskKind.WORD_FAMILY,
}


def resolve_task_kind(tag: Any) -> Optional[TaskKind]:
	if not isinstance(tag, str):
		return None
	if tag in _CLIENT_TAGS:
		return _CLIENT_TAGS[tag]
	try:
		return TaskKind(tag)
	except ValueError:
		return None


class _TaskBase(BaseModel):
	model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

	kind: TaskKind


NonEmptyStr = Annotated[str, Field(min_length=1)]


class SendMessageTask(_TaskBase):
	kind: TaskKind = TaskKind.SEND_MESSAGE
	message: NonEmptyStr
	history: List[Turn] = Field(default_factory=list)
	systemInstruction: Optional[str] = None
	# Used to build the system instruction when the client does not send one
	language: str = "English"
	difficulty: Difficulty = Difficulty.BEGINNER
	contextText: Optional[str] = None
	scenarioPrompt: Optional[str] = None


class ExtractVocabularyTask(_TaskBase):
	kind: TaskKind = TaskKind.EXTRACT_VOCABULARY
	conversation: List[Turn] = Field(default_factory=list)
	# Pre-rendered "role: text" lines; used only when no conversation is given
	conversationText: Optional[str] = None


class GrammarExplanationTask(_TaskBase):
	kind: TaskKind = TaskKind.GRAMMAR_EXPLANATION
	userSentence: NonEmptyStr
	aiCorrection: NonEmptyStr


class ValidateChallengeSentenceTask(_TaskBase):
	kind: TaskKind = TaskKind.VALIDATE_CHALLENGE_SENTENCE
	word: NonEmptyStr
	sentence: NonEmptyStr


class WordAnalysisTask(_TaskBase):
	kind: TaskKind = TaskKind.WORD_ANALYSIS
	word: NonEmptyStr


class WordFamilyTask(_TaskBase):
	kind: TaskKind = TaskKind.WORD_FAMILY
	word: NonEmptyStr


Task = Union[
	SendMessageTask,
	ExtractVocabularyTask,
	GrammarExplanationTask,
	ValidateChallengeSentenceTask,
	WordAnalysisTask,
	WordFamilyTask,
]

TASK_MODELS: Dict[TaskKind, type] = {
	TaskKind.SEND_MESSAGE: SendMessageTask,
	TaskKind.EXTRACT_VOCABULARY: ExtractVocabularyTask,
	TaskKind.GRAMMAR_EXPLANATION: GrammarExplanationTask,
	TaskKind.VALIDATE_CHALLENGE_SENTENCE: ValidateChallengeSentenceTask,
	TaskKind.WORD_ANALYSIS: WordAnalysisTask,
	TaskKind.WORD_FAMILY: WordFamilyTask,
}


class InboundRequest(BaseModel):
	type: str
	payload: Dict[str, Any] = Field(default_factory=dict)


class ResponseEnvelope(BaseModel):
	text: Optional[str] = None
	error: Optional[str] = None

	@classmethod
	def success(cls, text: str) -> "ResponseEnvelope":
		return cls(text=text)

	@classmethod
	def failure(cls, message: str) -> "ResponseEnvelope":
		return cls(error=message)

	@property
	def ok(self) -> bool:
		return self.error is None

	def as_body(self) -> Dict[str, str]:
		return self.model_dump(exclude_none=True)
