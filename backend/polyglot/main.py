import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .key_pool import KeyPool
from .settings import Settings, settings as default_settings
from .routers import chat, health

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	settings = settings or default_settings
	logging.basicConfig(
		level=settings.log_level.upper(),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)

	app = FastAPI(title="Polyglot Tutor API")
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origin_list(),
		allow_methods=["POST", "GET", "OPTIONS"],
		allow_headers=["*"],
	)
	app.state.settings = settings
	# An empty pool is allowed here; dispatch raises ConfigurationError
	app.state.key_pool = KeyPool.from_string(settings.credential_string())
	app.include_router(health.router)
	app.include_router(chat.router)

	@app.on_event("startup")
	async def startup_event():
		size = app.state.key_pool.size
		if size == 0:
			logger.error("No Gemini API keys configured; set GEMINI_KEYS (comma-separated)")
		else:
			logger.info("Loaded %d API keys", size)

	return app


app = create_app()
