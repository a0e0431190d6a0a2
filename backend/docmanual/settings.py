from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	app_title: str = Field(default="Module Manual API", validation_alias="APP_TITLE")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Persistence: "json" (flat file) or "sql" (single document row via SQLAlchemy)
	storage_backend: str = Field(default="json", validation_alias="STORAGE_BACKEND")
	data_file: str = Field(default="./data/db.json", validation_alias="DATA_FILE")
	# Session store and optional document store
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Session cookie carrying a signed token
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	session_cookie_name: str = Field(default="session", validation_alias="SESSION_COOKIE_NAME")
	session_cookie_secure: bool = Field(default=False, validation_alias="SESSION_COOKIE_SECURE")

	# Bootstrap admin, created as "user-root" when the store has no users
	root_username: str | None = Field(default=None, validation_alias="ROOT_USERNAME")
	root_password: str | None = Field(default=None, validation_alias="ROOT_PASSWORD")

	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="x-ai/grok-4-fast:free", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Module Manual", validation_alias="OPENROUTER_TITLE")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
