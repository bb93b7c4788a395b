import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from loguru import logger
from pydantic import ValidationError
from pydantic_settings import SettingsError

from src.logging_setup import setup_logging

EXIT_BAD_CONFIG = 3


def _load_env(env_file: str | None) -> None:
    env_path = env_file or find_dotenv(usecwd=True)
    if not env_path:
        candidate = Path(__file__).resolve().parents[1] / ".env"
        if candidate.exists():
            env_path = str(candidate)
    if env_path:
        logger.info("Loaded .env from {}", env_path)
        load_dotenv(env_path, override=True)
    else:
        logger.warning("No .env found")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Diabetes diary Telegram bot.")
    parser.add_argument("--env-file", default=None, help="Path to .env file.")
    parser.add_argument(
        "action",
        nargs="?",
        choices=("run", "check-config"),
        default="run",
        help="run the bot (default) or only validate configuration",
    )
    return parser.parse_args(argv)


def _format_settings_error(exc: Exception) -> list[str]:
    if not isinstance(exc, ValidationError):
        return [str(exc)]
    problems: list[str] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "settings"
        problems.append(f"{field}: {error.get('msg', 'invalid value')}")
    return problems


def load_settings():
    """Build settings from env, returning ``(settings, problems)``.

    ``settings`` is None when the environment cannot be parsed at all.
    """
    try:
        from src.config import Settings, validate_settings

        value = Settings()
    except (ValidationError, SettingsError) as exc:
        return None, _format_settings_error(exc)
    return value, validate_settings(value)


def check_config() -> int:
    _settings, problems = load_settings()
    if problems:
        print(f"bad config: {'; '.join(problems)}", file=sys.stderr)
        return EXIT_BAD_CONFIG
    print("config is ok")
    return 0


def run() -> int:
    _settings, problems = load_settings()
    if problems:
        for problem in problems:
            logger.error("Config error: {}", problem)
        return 1

    from src.config import settings
    from src.telegram.polling import start_polling

    setup_logging()

    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)
    logger.info(
        "Starting diary bot data_dir={} timezone={} chats={}",
        settings.data_dir,
        settings.timezone,
        len(settings.allowed_chat_ids),
    )
    try:
        asyncio.run(start_polling())
    except KeyboardInterrupt:
        return 0
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _load_env(args.env_file)
    if args.action == "check-config":
        return check_config()
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
