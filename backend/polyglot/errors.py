from __future__ import annotations
from typing import Optional

import httpx


class PolyglotError(Exception):
	"""Base error; ``user_message`` is the only part shown to the browser."""

	user_message = "Sorry, an unknown error occurred with the AI service."

	def __init__(self, message: Optional[str] = None) -> None:
		super().__init__(message or self.user_message)
		if message:
			self.user_message = message


class ConfigurationError(PolyglotError):
	user_message = "API keys are not configured on the server."


class AllCredentialsExhausted(PolyglotError):
	user_message = "All AI servers are currently busy. Please try again."

	def __init__(self, last_error: Optional[BaseException] = None, *, attempts: int = 0) -> None:
		super().__init__()
		self.last_error = last_error
		self.attempts = attempts


class DataFormatError(PolyglotError):
	user_message = "The AI returned an unreadable vocabulary list. Please try again."

	def __init__(self, detail: str) -> None:
		# detail stays in logs; the browser only gets user_message
		super().__init__()
		self.detail = detail

	def __str__(self) -> str:
		return f"{self.user_message} ({self.detail})"


class TaskError(PolyglotError):
	user_message = "Invalid task type"


class GeminiResponseError(RuntimeError):
	"""A 2xx reply from Gemini that carries no usable text (blocked or empty candidate)."""

	def __init__(self, message: str, *, block_reason: Optional[str] = None) -> None:
		super().__init__(message)
		self.block_reason = block_reason


def describe_upstream_error(exc: BaseException) -> str:
	# Short reason for log lines only, never for the response body
	if isinstance(exc, httpx.TimeoutException):
		return "timeout"
	if isinstance(exc, httpx.RequestError):
		return "network error"
	if isinstance(exc, httpx.HTTPStatusError):
		status = exc.response.status_code
		try:
			body = exc.response.text
		except Exception:
			body = ""
		if status == 429 or "RESOURCE_EXHAUSTED" in body:
			return "rate limited"
		if status in (400, 401, 403) and ("API key" in body or "API_KEY" in body):
			return "invalid key"
		if status == 404:
			return "model not found"
		return f"http {status}"
	if isinstance(exc, GeminiResponseError):
		return f"blocked ({exc.block_reason})" if exc.block_reason else "empty response"
	return type(exc).__name__
