import asyncio
import contextlib

from app.core.config import settings
from app.utils.logging import setup_logging
from bot.main import CardGameBot


async def main() -> None:
    setup_logging("bot.log", level=settings.log_level)
    async with CardGameBot() as bot:
        await bot.start(settings.discord_bot_token)


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())
