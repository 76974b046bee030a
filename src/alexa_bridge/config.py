"""Application configuration via environment variables."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    environment: str = "development"
    debug: bool = False
    service_name: str = "alexa-bridge"

    # Downstream automation webhook (e.g. a Make.com scenario)
    webhook_url: str = Field(
        default="",
        validation_alias=AliasChoices("ALEXA_BRIDGE_WEBHOOK_URL", "MAKE_WEBHOOK_URL"),
    )
    downstream_timeout: float = 8.0  # Alexa gives up after ~8s anyway

    # Request signature verification; disable only for local testing
    verify_signatures: bool = Field(
        default=True,
        validation_alias=AliasChoices("ALEXA_BRIDGE_VERIFY_SIGNATURES", "ALEXA_VERIFY"),
    )
    signature_tolerance_seconds: int = 150
    max_body_bytes: int = 128 * 1024

    # Skill interaction model
    primary_intent: str = "AskPerplexityIntent"
    query_slot_names: list[str] = ["query", "SearchQuery", "anyQuery", "pergunta", "texto"]
    default_language: str = "pt"

    @field_validator("verify_signatures", mode="before")
    @classmethod
    def verification_on_unless_disabled(cls, value: Any) -> bool:
        """Only an explicit false-like value turns verification off."""
        if isinstance(value, str):
            return value.strip().lower() not in ("false", "0", "no", "off")
        return bool(value)

    class Config:
        env_prefix = "ALEXA_BRIDGE_"
        case_sensitive = False
        populate_by_name = True


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return settings
