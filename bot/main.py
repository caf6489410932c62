import anyio
import discord
from discord.ext import commands
from loguru import logger

from app.core.config import settings
from app.core.db import create_tables, engine
from app.game.registry import SessionRegistry
from app.services.battle import BattleService
from app.services.card_generation import CardGenerationService
from bot.command_tree import CommandTree


class CardGameBot(commands.Bot):
    def __init__(self) -> None:
        intents = discord.Intents.default()
        intents.message_content = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            tree_cls=CommandTree,
        )

        self.registry = SessionRegistry()
        self.battle_service = BattleService(
            self.registry,
            think_delay=(settings.opponent_think_min_seconds, settings.opponent_think_max_seconds),
        )
        self.card_generation = CardGenerationService(
            settings.openai_api_key, model=settings.openai_model
        )

    async def _load_cogs(self) -> None:
        async for file in anyio.Path("bot/cogs").iterdir():
            if file.suffix == ".py" and not file.stem.startswith("_"):
                cog_name = f"bot.cogs.{file.stem}"
                await self.load_extension(cog_name)
                logger.info(f"Loaded cog: {cog_name}")

        await self.load_extension("jishaku")

    async def _sync_commands(self) -> None:
        if settings.test_guild_id is None:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} global commands (may take up to an hour to show)")
            return

        guild = discord.Object(id=settings.test_guild_id)
        self.tree.copy_global_to(guild=guild)
        synced = await self.tree.sync(guild=guild)
        logger.info(f"Synced {len(synced)} commands to test guild {settings.test_guild_id}")

    async def setup_hook(self) -> None:
        await create_tables()
        await self._load_cogs()
        await self._sync_commands()

        if self.card_generation.uses_fallback:
            logger.warning("No OpenAI API key configured, cards will use the fallback generator")

    async def on_ready(self) -> None:
        assert self.user is not None
        logger.info(f"Logged in as {self.user} ({self.user.id})")

    async def close(self) -> None:
        for battle in self.registry:
            if battle.opponent_task is not None and not battle.opponent_task.done():
                battle.opponent_task.cancel()

        await super().close()
        await engine.dispose()
