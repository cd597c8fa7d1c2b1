from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..gemini_client import GeminiClient
from ..key_pool import KeyPool
from ..models import ResponseEnvelope
from ..settings import Settings
from ..tasks import ClientFactory, TaskRouter

router = APIRouter(tags=["chat"])


def get_key_pool(request: Request) -> KeyPool:
	return request.app.state.key_pool


def get_settings(request: Request) -> Settings:
	return request.app.state.settings


def get_client_factory() -> ClientFactory:
	return GeminiClient


def get_task_router(
	pool: KeyPool = Depends(get_key_pool),
	settings: Settings = Depends(get_settings),
	client_factory: ClientFactory = Depends(get_client_factory),
) -> TaskRouter:
	return TaskRouter(pool, client_factory, settings=settings)


def _envelope_response(envelope: ResponseEnvelope) -> JSONResponse:
	return JSONResponse(status_code=200 if envelope.ok else 500, content=envelope.as_body())


# The second path is the one the browser client has always posted to
@router.post("/api/chat")
@router.post("/.netlify/functions/chat", include_in_schema=False)
async def chat(request: Request, task_router: TaskRouter = Depends(get_task_router)):
	try:
		body = await request.json()
	except ValueError:
		return _envelope_response(ResponseEnvelope.failure("Invalid request body"))
	envelope = await task_router.handle(body)
	return _envelope_response(envelope)
