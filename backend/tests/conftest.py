"""Shared fixtures for the Polyglot backend tests."""

from typing import Any, Dict, List, Tuple, Union

import pytest

from polyglot.key_pool import KeyPool
from polyglot.tasks import TaskRouter


class FakeGemini:
    """Stand-in for GeminiClient whose reply depends on the API key used.

    ``replies`` maps a key to the text it returns or the exception it raises;
    keys not listed fall back to ``replies["*"]`` (default ``"ok"``).
    """

    def __init__(self, replies: Dict[str, Union[str, Exception]] = None):
        self.replies = dict(replies or {})
        self.calls: List[Tuple[str, str, Any, Dict[str, Any]]] = []
        self.opened = 0
        self.settings_seen = []
        self.closed = 0

    def factory(self, api_key, *, settings=None):
        self.opened += 1
        self.settings_seen.append(settings)
        return _FakeClient(self, api_key)

    def reply_for(self, api_key):
        reply = self.replies.get(api_key, self.replies.get("*", "ok"))
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def keys_tried(self) -> List[str]:
        return [call[0] for call in self.calls]


class _FakeClient:
    def __init__(self, owner: FakeGemini, api_key: str):
        self._owner = owner
        self.api_key = api_key

    async def generate(self, prompt, **kwargs):
        self._owner.calls.append((self.api_key, "generate", prompt, kwargs))
        return self._owner.reply_for(self.api_key)

    async def chat(self, message, **kwargs):
        self._owner.calls.append((self.api_key, "chat", message, kwargs))
        return self._owner.reply_for(self.api_key)

    async def aclose(self):
        self._owner.closed += 1


@pytest.fixture
def fake_gemini():
    return FakeGemini()


@pytest.fixture
def make_router(fake_gemini):
    """Build a TaskRouter over the given keys, backed by ``fake_gemini``."""

    def _make(keys=("A", "B", "C")):
        return TaskRouter(KeyPool(keys), fake_gemini.factory)

    return _make
