"""
Environment-driven application settings.
Values come from the process environment, optionally seeded from a .env file.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read once from the environment."""

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    # AI mediator providers, tried in this order
    ai_providers: List[str] = field(default_factory=lambda: ["openai", "groq"])
    ai_timeout_seconds: float = 20.0
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    groq_api_key: Optional[str] = None
    groq_model: str = "llama-3.3-70b-versatile"

    # Invitation emails
    gmail_address: Optional[str] = None
    gmail_app_password: Optional[str] = None
    app_base_url: str = "http://localhost:5173"

    policy_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        return cls(
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_KEY"),
            allowed_origins=_split(os.getenv("ALLOWED_ORIGINS")) or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            ai_providers=_split(os.getenv("AI_PROVIDERS")) or ["openai", "groq"],
            ai_timeout_seconds=float(os.getenv("AI_TIMEOUT_SECONDS", "20")),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            groq_api_key=os.getenv("GROQ_API_KEY"),
            groq_model=os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile"),
            gmail_address=os.getenv("GMAIL_ADDRESS"),
            gmail_app_password=os.getenv("GMAIL_APP_PASSWORD"),
            app_base_url=os.getenv("APP_BASE_URL", "http://localhost:5173"),
            policy_path=os.getenv("MEDIATION_POLICY_PATH"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
