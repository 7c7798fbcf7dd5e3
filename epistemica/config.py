"""
Epistemica Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    VERSION: str = "0.3.0"

    # --- LLM Providers ---
    # Preferred provider; the remaining ones are tried in canonical order.
    LLM_PROVIDER: str = os.getenv("EPISTEMICA_LLM_PROVIDER", "anthropic")

    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    ANTHROPIC_BASE_URL: str = os.getenv("ANTHROPIC_BASE_URL", "")
    ANTHROPIC_MODEL: str = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5")

    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o")

    DEEPSEEK_API_KEY: str = os.getenv("DEEPSEEK_API_KEY", "")
    DEEPSEEK_MODEL: str = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
    DEEPSEEK_BASE_URL: str = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")

    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

    # --- Embeddings (continuity module) ---
    EMBEDDING_PROVIDER: str = os.getenv("EPISTEMICA_EMBEDDING_PROVIDER", "gemini")
    GEMINI_EMBEDDING_MODEL: str = os.getenv(
        "GEMINI_EMBEDDING_MODEL", "gemini-embedding-001"
    )
    OPENAI_EMBEDDING_MODEL: str = os.getenv(
        "OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"
    )

    # --- Analysis limits ---
    CHUNK_MAX_WORDS: int = int(os.getenv("EPISTEMICA_CHUNK_MAX_WORDS", "2000"))
    MAX_INPUT_WORDS: int = int(os.getenv("EPISTEMICA_MAX_INPUT_WORDS", "10000"))
    # Only reject input when the gate is this sure it is NOT argumentative.
    REJECT_CONFIDENCE: float = float(
        os.getenv("EPISTEMICA_REJECT_CONFIDENCE", "0.85")
    )

    # --- Storage ---
    DB_PATH: str = os.getenv("EPISTEMICA_DB_PATH", "epistemica.db")

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("EPISTEMICA_LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("EPISTEMICA_LOG_FORMAT", "json")  # "json" or "text"


settings = Settings()
