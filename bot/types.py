from typing import TYPE_CHECKING

import discord

if TYPE_CHECKING:
    from bot.main import CardGameBot

type Interaction = discord.Interaction[CardGameBot]
