from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    db_url: str = "sqlite+aiosqlite:///cards.db"
    env: Literal["prod", "dev"] = "prod"

    # Read-only HTTP API
    api_host: str = "127.0.0.1"
    api_port: int = 3011

    # Discord
    discord_bot_token: str
    test_guild_id: int | None = None
    """Sync slash commands to this guild only, they show up instantly there"""

    # Card generation
    openai_api_key: str | None = None
    """Falls back to the local heuristic generator when unset"""
    openai_model: str = "gpt-4o-mini"
    visual_cards: bool = True

    # Opponent "thinking" delay before it plays its move
    opponent_think_min_seconds: float = 2.0
    opponent_think_max_seconds: float = 4.0

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.is_dev else "INFO"


load_dotenv()
settings = Config()  # pyright: ignore[reportCallIssue]
