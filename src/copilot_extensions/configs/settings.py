from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    ROOT_DIR: Path = Path(__file__).parent.parent.parent.parent

    ENVIRONMENT: str = "development"
    PORT: int = 3333

    # Chat
    OPENAI_CHAT_MODEL: str = "gpt-4o"
    COPILOT_API_URL: str = "https://api.githubcopilot.com/chat/completions"

    # Payload verification
    COPILOT_PUBLIC_KEYS_URL: str = "https://api.github.com/meta/public_keys/copilot_api"
    COPILOT_PUBLIC_KEY: str = ""  # literal PEM, skips the metadata fetch when set

    # Role of the synthetic "_session" message
    SESSION_CARRIER_ROLE: Literal["user", "system"] = "user"

    # Observability
    OTEL_ENABLED: bool = True
    OTLP_TRACE_ENDPOINT: str = ""

    model_config = SettingsConfigDict(
        env_file=ROOT_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return not self.is_development


settings = Settings()
