import discord
from discord import app_commands
from loguru import logger

from bot.utils.error_handler import error_handler


class CommandTree(app_commands.CommandTree):
    async def on_error(self, i: discord.Interaction, error: app_commands.AppCommandError) -> None:
        return await error_handler(i, error)

    async def interaction_check(self, i: discord.Interaction) -> bool:
        if i.command is not None:
            logger.debug(f"/{i.command.qualified_name} used by {i.user.id} in {i.channel_id}")
        return True
