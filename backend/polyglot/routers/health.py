from fastapi import APIRouter, Depends

from ..key_pool import KeyPool
from ..settings import Settings
from .chat import get_key_pool, get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health(pool: KeyPool = Depends(get_key_pool), settings: Settings = Depends(get_settings)):
	# Key count only; key values never leave the process
	return {"status": "ok", "credentials": pool.size, "model": settings.gemini_model}
