"""
Configuration settings for the Yorisoi Relay service.

Values are read from the environment, after loading a ``.env`` file from the
working directory when one exists.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()

DEFAULT_ICF_TAGS_PATH = Path(__file__).parent / "data" / "icf_tags.json"


class Settings(BaseModel):
    """Process configuration for the relay."""

    model_config = ConfigDict(validate_default=True)

    openai_api_key: str = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = Field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    )
    chat_model: str = Field(default_factory=lambda: os.getenv("CHAT_MODEL", "gpt-4o-mini"))
    max_output_tokens: int = Field(
        default_factory=lambda: int(os.getenv("MAX_OUTPUT_TOKENS", "200"))
    )
    tts_model: str = Field(default_factory=lambda: os.getenv("TTS_MODEL", "gpt-4o-mini-tts"))
    tts_voice: str = Field(default_factory=lambda: os.getenv("TTS_VOICE", "alloy"))
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "30"))
    )

    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "info"))

    icf_tags_path: Path = Field(
        default_factory=lambda: Path(os.getenv("ICF_TAGS_PATH", str(DEFAULT_ICF_TAGS_PATH)))
    )
    history_limit: int = Field(
        default_factory=lambda: int(os.getenv("HISTORY_LIMIT", "1000")), ge=1
    )
    initial_score: int = Field(
        default_factory=lambda: int(os.getenv("INITIAL_SCORE", "70")), ge=0, le=100
    )
    max_body_bytes: int = 20 * 1024 * 1024
