from __future__ import annotations
import httpx
from typing import Any, Dict, List, Optional, Sequence
from .errors import GeminiResponseError
from .models import Turn
from .settings import Settings, settings as default_settings

class GeminiClient:
	"""Gemini ``generateContent`` client bound to a single API key.

	The key pool creates one per attempt, so a failing key never leaks into
	the next try.
	"""

	def __init__(
		self,
		api_key: str,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
		settings: Optional[Settings] = None,
	) -> None:
		settings = settings or default_settings
		if not api_key or not api_key.strip():
			raise ValueError("Gemini API key is empty")
		self.api_key = api_key.strip()
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(
			timeout=timeout if timeout is not None else settings.request_timeout_seconds,
			transport=transport,
		)

	async def generate(
		self,
		prompt: str,
		*,
		response_mime_type: Optional[str] = None,
		response_schema: Optional[Dict[str, Any]] = None,
	) -> str:
		payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
		generation_config: Dict[str, Any] = {}
		if response_mime_type:
			generation_config["responseMimeType"] = response_mime_type
		if response_schema is not None:
			generation_config["responseSchema"] = response_schema
		if generation_config:
			payload["generationConfig"] = generation_config
		return await self._post_payload(payload)

	async def chat(
		self,
		message: str,
		*,
		history: Sequence[Turn] = (),
		system_instruction: Optional[str] = None,
	) -> str:
		contents: List[Dict[str, Any]] = [
			{"role": turn.role.value, "parts": [{"text": turn.text}]} for turn in history
		]
		contents.append({"role": "user", "parts": [{"text": message}]})
		payload: Dict[str, Any] = {"contents": contents}
		if system_instruction and system_instruction.strip():
			payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
		return await self._post_payload(payload)

	async def _post_payload(self, payload: Dict[str, Any]) -> str:
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
		r.raise_for_status()
		try:
			data = r.json()
		except ValueError:
			raise GeminiResponseError(f"Unexpected Gemini response: {r.text[:200]}")
		return _candidate_text(data)

	async def aclose(self) -> None:
		await self._client.aclose()


def _candidate_text(data: Dict[str, Any]) -> str:
	candidates = data.get("candidates") or []
	if not candidates:
		block_reason = (data.get("promptFeedback") or {}).get("blockReason")
		raise GeminiResponseError("Gemini returned no candidates", block_reason=block_reason)
	parts = (candidates[0].get("content") or {}).get("parts") or []
	# Thinking models may split the answer over several parts; thought parts are skipped
	text = "".join(p.get("text", "") for p in parts if isinstance(p, dict) and not p.get("thought"))
	if not text:
		raise GeminiResponseError(
			"Gemini candidate has no text",
			block_reason=candidates[0].get("finishReason"),
		)
	return text
