from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

class Settings(BaseSettings):
	# Comma-separated pool of Gemini API keys, tried in round-robin order
	gemini_keys: str = Field(default="", validation_alias="GEMINI_KEYS")
	# Single key, used only when GEMINI_KEYS is empty
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")
	# Deadline for a single remote attempt; the key pool itself never times out
	request_timeout_seconds: float = Field(default=30, validation_alias="GEMINI_TIMEOUT_SECONDS")

	# Browser UI origins allowed to call the API
	cors_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")
	log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@field_validator("log_level", mode="before")
	@classmethod
	def _upper_log_level(cls, value):
		return value.strip().upper() if isinstance(value, str) else value

	def credential_string(self) -> str:
		if self.gemini_keys and self.gemini_keys.strip():
			return self.gemini_keys
		return self.gemini_api_key or ""

	def cors_origin_list(self) -> list[str]:
		return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
