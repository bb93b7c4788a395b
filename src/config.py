from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.errors import InvalidTimezone
from src.core.timezones import load_timezone


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    telegram_bot_token: str = ""
    allowed_chat_ids: list[int] = []
    timezone: str = "UTC"
    data_dir: str = "data"
    log_path: str = "logs/app.log"
    log_level: str = "INFO"
    log_retention: str = "30 days"


settings = Settings()


def validate_settings(value: Settings) -> list[str]:
    problems: list[str] = []
    if not value.telegram_bot_token.strip():
        problems.append("telegram_bot_token is required")
    if not value.allowed_chat_ids:
        problems.append("allowed_chat_ids is required")
    try:
        load_timezone(value.timezone)
    except InvalidTimezone as exc:
        problems.append(str(exc))
    return problems
