"""Healthdesk configuration: loaded from environment variables / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Anthropic
    anthropic_api_key: str = ""

    # Models
    chat_model: str = "claude-sonnet-4-20250514"
    reasoning_model: str = "claude-sonnet-4-20250514"
    reasoning_budget_tokens: int = 2048
    title_model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 4096

    # Storage
    db_path: str = "data/healthdesk.db"
    log_dir: str = "logs"

    # Orchestration
    max_steps: int = 5
    max_request_seconds: float = 60.0
    tool_timeout_seconds: float = 30.0

    # Resumable streams
    resumable_streams: bool = True
    stream_retention_seconds: float = 15 * 60

    # Entitlements
    guest_max_messages_per_day: int = 20
    regular_max_messages_per_day: int = 100

    # Speech-to-text (Whisper-compatible endpoint)
    groq_api_key: str = ""
    transcription_url: str = "https://api.groq.com/openai/v1/audio/transcriptions"
    transcription_model: str = "distil-whisper-large-v3-en"

    # Web push
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_subject: str = "mailto:admin@example.com"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
