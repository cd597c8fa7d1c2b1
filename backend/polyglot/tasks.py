from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError

from .errors import DataFormatError, PolyglotError, TaskError
from .gemini_client import GeminiClient
from .key_pool import KeyPool
from .settings import Settings
from .models import (
	TASK_MODELS,
	ExtractVocabularyTask,
	GrammarExplanationTask,
	InboundRequest,
	ResponseEnvelope,
	SendMessageTask,
	Task,
	TaskKind,
	ValidateChallengeSentenceTask,
	WordAnalysisTask,
	WordFamilyTask,
	resolve_task_kind,
)
from .prompts import (
	VOCABULARY_SCHEMA,
	build_system_instruction,
	challenge_prompt,
	grammar_prompt,
	vocabulary_prompt,
	word_analysis_prompt,
	word_family_prompt,
)
from .vocabulary import (
	MIN_QUALIFYING_TURNS,
	dump_vocabulary,
	parse_vocabulary,
	qualifying_turns,
	render_conversation,
	split_conversation_text,
)

logger = logging.getLogger(__name__)

# (api_key, *, settings) -> client
ClientFactory = Callable[..., GeminiClient]


def parse_task(body: Any) -> Task:
	"""Turn a decoded ``{type, payload}`` body into one of the task models."""
	try:
		request = InboundRequest.model_validate(body)
	except ValidationError as e:
		raise TaskError("Invalid request body") from e
	kind = resolve_task_kind(request.type)
	if kind is None:
		raise TaskError()
	try:
		return TASK_MODELS[kind].model_validate({**request.payload, "kind": kind})
	except ValidationError as e:
		raise TaskError(f"Invalid payload for {kind.value}") from e


class TaskRouter:
	def __init__(self, pool: KeyPool, client_factory: ClientFactory = GeminiClient, *, settings: Optional[Settings] = None) -> None:
		self.pool = pool
		self._client_factory = client_factory
		self._settings = settings
		self._handlers: Dict[TaskKind, Callable[[Any], Awaitable[str]]] = {
			TaskKind.SEND_MESSAGE: self._send_message,
			TaskKind.EXTRACT_VOCABULARY: self._extract_vocabulary,
			TaskKind.GRAMMAR_EXPLANATION: self._grammar_explanation,
			TaskKind.VALIDATE_CHALLENGE_SENTENCE: self._validate_challenge_sentence,
			TaskKind.WORD_ANALYSIS: self._word_analysis,
			TaskKind.WORD_FAMILY: self._word_family,
		}

	@property
	def handled_kinds(self) -> frozenset:
		return frozenset(self._handlers)

	async def handle(self, body: Any) -> ResponseEnvelope:
		try:
			task = parse_task(body)
			text = await self.run(task)
		except DataFormatError as e:
			logger.warning("Structured reply rejected: %s", e.detail)
			return ResponseEnvelope.failure(e.user_message)
		except TaskError as e:
			logger.info("Rejected request: %s", e.user_message)
			return ResponseEnvelope.failure(e.user_message)
		except PolyglotError as e:
			return ResponseEnvelope.failure(e.user_message)
		except Exception:
			logger.exception("Unexpected error while handling task")
			return ResponseEnvelope.failure(PolyglotError.user_message)
		return ResponseEnvelope.success(text)

	async def run(self, task: Task) -> str:
		handler = self._handlers.get(task.kind)
		if handler is None:
			raise TaskError()
		return await handler(task)

	async def _call(self, call: Callable[[GeminiClient], Awaitable[str]]) -> str:
		async def operation(api_key: str) -> str:
			client = self._client_factory(api_key, settings=self._settings)
			try:
				return await call(client)
			finally:
				await client.aclose()

		return await self.pool.dispatch(operation)

	async def _send_message(self, task: SendMessageTask) -> str:
		system_instruction = task.systemInstruction or build_system_instruction(
			task.language,
			task.difficulty,
			context_text=task.contextText,
			scenario_prompt=task.scenarioPrompt,
		)
		return await self._call(
			lambda client: client.chat(task.message, history=task.history, system_instruction=system_instruction)
		)

	async def _extract_vocabulary(self, task: ExtractVocabularyTask) -> str:
		turns = qualifying_turns(task.conversation or split_conversation_text(task.conversationText or ""))
		if len(turns) < MIN_QUALIFYING_TURNS:
			return dump_vocabulary([])
		raw = await self._call(
			lambda client: client.generate(
				vocabulary_prompt(render_conversation(turns)),
				response_mime_type="application/json",
				response_schema=VOCABULARY_SCHEMA,
			)
		)
		# Parsed after dispatch; a malformed reply does not rotate keys
		return dump_vocabulary(parse_vocabulary(raw))

	async def _grammar_explanation(self, task: GrammarExplanationTask) -> str:
		return await self._call(lambda client: client.generate(grammar_prompt(task.userSentence, task.aiCorrection)))

	async def _validate_challenge_sentence(self, task: ValidateChallengeSentenceTask) -> str:
		return await self._call(lambda client: client.generate(challenge_prompt(task.word, task.sentence)))

	async def _word_analysis(self, task: WordAnalysisTask) -> str:
		return await self._call(lambda client: client.generate(word_analysis_prompt(task.word)))

	async def _word_family(self, task: WordFamilyTask) -> str:
		return await self._call(lambda client: client.generate(word_family_prompt(task.word)))
