from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # General
    LOG_LEVEL: str = Field(default="INFO", description="Application log level")
    BIND: str = Field(default="0.0.0.0:8076", description="API bind address")

    # CORS
    CORS_ALLOW_ORIGINS: str = Field(default="*", description="Comma-separated list of allowed origins")
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True, description="Allow credentials in CORS")
    CORS_ALLOW_METHODS: str = Field(default="*", description="Allowed CORS methods")
    CORS_ALLOW_HEADERS: str = Field(default="*", description="Allowed CORS headers")

    # LLM
    OLLAMA_HOST: str = Field(default="http://localhost:11434", description="Ollama server URL")
    LLM_MODEL: str = Field(default="llama3.1:8b", description="Generation model ID")
    LLM_MAX_CONCURRENCY: int = Field(default=10, description="Maximum concurrency for LLM requests")
    LLM_REQUEST_TIMEOUT: int = Field(default=120, description="LLM HTTP timeout (seconds)")
    PERSONA_DEADLINE_SECONDS: float = Field(
        default=180.0,
        description="Deadline for one persona's model call (seconds, 0 disables)",
    )

    # Data Layer
    MONGODB_URI: str = Field(
        default="mongodb://localhost:27017/recipe-generator",
        description="MongoDB connection URI",
        validation_alias=AliasChoices("MONGODB_URI", "MONGO_URI", "DATABASE_URL"),
    )
    MONGODB_DB: str = Field(
        default="recipe-generator",
        description="MongoDB database name",
        validation_alias=AliasChoices("MONGODB_DB", "MONGO_DB"),
    )
    PERSISTENCE_QUEUE_MAXSIZE: int = Field(default=1000, description="Pending background writes before dropping")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
