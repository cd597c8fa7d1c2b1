from __future__ import annotations

import logging
import threading
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .errors import AllCredentialsExhausted, ConfigurationError, describe_upstream_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[str], Awaitable[T]]


def parse_credentials(raw: Optional[str]) -> List[str]:
	"""Split a comma-separated key list, dropping blanks. Order and duplicates are kept."""
	if not raw:
		return []
	return [key.strip() for key in raw.split(",") if key.strip()]


class KeyPool:
	"""Ordered API keys plus a round-robin cursor.

	``dispatch`` runs an operation against the key under the cursor and moves
	on to the next key whenever the operation raises. Every attempt, successful
	or not, advances the cursor by one, so sequential calls spread evenly over
	the pool. The read-and-advance step is done under a lock; concurrent
	dispatches still interleave, which only affects the order keys are used in.
	"""

	def __init__(self, credentials: Iterable[str] = ()) -> None:
		self._credentials: Tuple[str, ...] = tuple(credentials)
		self._cursor = 0
		self._lock = threading.Lock()

	@classmethod
	def from_string(cls, raw: Optional[str]) -> "KeyPool":
		return cls(parse_credentials(raw))

	@property
	def size(self) -> int:
		return len(self._credentials)

	@property
	def cursor(self) -> int:
		return self._cursor

	@property
	def credentials(self) -> Sequence[str]:
		return self._credentials

	def __len__(self) -> int:
		return self.size

	def _take(self) -> Tuple[int, str]:
		with self._lock:
			index = self._cursor
			self._cursor = (index + 1) % len(self._credentials)
			return index, self._credentials[index]

	async def dispatch(self, operation: Operation[T]) -> T:
		if not self._credentials:
			raise ConfigurationError()
		attempts = len(self._credentials)
		last_error: Optional[Exception] = None
		for _ in range(attempts):
			index, key = self._take()
			try:
				return await operation(key)
			except Exception as err:
				last_error = err
				logger.warning("API key %d failed (%s); moving to next key", index, describe_upstream_error(err))
		logger.error("All %d API keys failed; last error: %s", attempts, describe_upstream_error(last_error))
		raise AllCredentialsExhausted(last_error, attempts=attempts) from last_error
